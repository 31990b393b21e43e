from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.database import get_db
from app.routers.deps import get_dataset, require_manager
from app.schemas.records import Employee, Report
from app.services import dataset as dataset_service
from app.services.dataset import Dataset
from app.services.override import (
    OverrideState,
    apply_override,
    authorize_override,
    clear_override,
    override_state,
)

router = APIRouter(prefix="/reports", tags=["reports"])


def _report_in_organization(data: Dataset, report_id: str) -> Report:
    report = data.report(report_id)
    if report is None:
        raise NotFoundError("Report", report_id)
    return report


# --- Pydantic Schemas ---
class OverrideRequest(BaseModel):
    score: float
    reasoning: Optional[str] = None


class OverrideResponse(BaseModel):
    report: Report
    state: OverrideState
    effective_score: float

    @classmethod
    def from_report(cls, report: Report) -> "OverrideResponse":
        return cls(report=report, state=override_state(report), effective_score=report.effective_score)


# --- Endpoints ---

@router.put("/{report_id}/override", response_model=OverrideResponse)
def override_report_score(
    report_id: str,
    payload: OverrideRequest,
    actor: Employee = Depends(require_manager),
    data: Dataset = Depends(get_dataset),
    db: Session = Depends(get_db),
):
    report = _report_in_organization(data, report_id)
    authorize_override(data.employees, report, actor.id)
    updated = apply_override(report, payload.score, payload.reasoning)
    return OverrideResponse.from_report(dataset_service.save_report_override(db, updated))


@router.delete("/{report_id}/override", response_model=OverrideResponse)
def clear_report_override(
    report_id: str,
    actor: Employee = Depends(require_manager),
    data: Dataset = Depends(get_dataset),
    db: Session = Depends(get_db),
):
    report = _report_in_organization(data, report_id)
    authorize_override(data.employees, report, actor.id)
    updated = clear_override(report)
    if updated is report:
        return OverrideResponse.from_report(report)
    return OverrideResponse.from_report(dataset_service.save_report_override(db, updated))
