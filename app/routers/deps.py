"""
Request-scoped dependencies.
Authentication is handled upstream; the gateway forwards the acting
employee's id in a header and this module turns it into a record.
"""
import logging
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import AccessDeniedError, AuthenticationError, NotFoundError
from app.database import get_db
from app.schemas.records import Employee, EmployeeRole
from app.services import dataset as dataset_service
from app.services.dataset import Dataset

logger = logging.getLogger(__name__)


def get_current_employee(
    employee_id: Optional[str] = Header(default=None, alias=settings.actor_header),
    db: Session = Depends(get_db),
) -> Employee:
    if not employee_id or not employee_id.strip():
        logger.warning("Request without acting employee header")
        raise AuthenticationError()
    try:
        return dataset_service.get_employee(db, employee_id.strip())
    except NotFoundError:
        logger.warning(f"Acting employee {employee_id} not found")
        raise AuthenticationError("Unknown acting employee")


def require_manager(actor: Employee = Depends(get_current_employee)) -> Employee:
    if actor.role != EmployeeRole.MANAGER:
        raise AccessDeniedError("This view is only available to managers")
    return actor


def get_dataset(
    actor: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
) -> Dataset:
    """The actor's organization, loaded once per request."""
    return dataset_service.load_dataset(db, actor.organization_id)
