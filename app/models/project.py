import uuid

from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


class Project(Base):
    __tablename__ = "projects"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    organization_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=True)
    report_frequency = Column(String, nullable=False, default="weekly")  # daily, weekly, bi-weekly, monthly, custom
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    assignees = relationship(
        "ProjectAssignee",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectAssignee.position",
    )


class ProjectAssignee(Base):
    __tablename__ = "project_assignees"
    __table_args__ = (UniqueConstraint("project_id", "assignee_id", name="uq_project_assignee"),)

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(String, ForeignKey("projects.id"), nullable=False, index=True)
    assignee_id = Column(String, nullable=False)
    assignee_type = Column(String, nullable=False, default="employee")  # employee, manager
    position = Column(Integer, nullable=False, default=0)

    project = relationship("Project", back_populates="assignees")
