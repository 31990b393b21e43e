"""
Employee Model.
The manager_id self-reference forms the reporting hierarchy; a missing
manager_id marks a root (typically the account owner).
"""
import uuid

from sqlalchemy import Column, String, Enum, DateTime, Boolean
from sqlalchemy.sql import func
from app.database import Base
from app.schemas.records import EmployeeRole


class Employee(Base):
    __tablename__ = "employees"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    organization_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True, index=True)
    title = Column(String, nullable=True)

    role = Column(Enum(EmployeeRole), default=EmployeeRole.EMPLOYEE, nullable=False)

    # No DB-level FK: records come from a store that is not fully validated
    manager_id = Column(String, nullable=True, index=True)

    is_account_owner = Column(Boolean, default=False, nullable=False)

    # Permissions granted by the account owner
    can_view_organization_wide = Column(Boolean, nullable=True)
    can_manage_settings = Column(Boolean, nullable=True)
    can_set_global_frequency = Column(Boolean, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Employee {self.id} ({self.role.value})>"
