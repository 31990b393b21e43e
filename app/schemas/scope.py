from pydantic import BaseModel, ConfigDict
from typing import FrozenSet, List, Optional
from enum import Enum


class ScopeMode(str, Enum):
    DIRECT_REPORTS = "direct-reports"
    REPORTING_CHAIN = "reporting-chain"
    ORGANIZATION = "organization"
    SELF = "self"  # employee view, resolution skipped


class Scope(BaseModel):
    """
    Employee ids a manager may act upon, plus the mode that produced them.
    `mode` may differ from `requested_mode` when a permission fallback applied.
    """
    model_config = ConfigDict(frozen=True)

    requested_mode: ScopeMode
    mode: ScopeMode
    employee_ids: FrozenSet[str]
    manager_id: Optional[str] = None

    @property
    def fell_back(self) -> bool:
        return self.mode != self.requested_mode

    def __contains__(self, employee_id: str) -> bool:
        return employee_id in self.employee_ids


class ScopeResponse(BaseModel):
    requested_mode: ScopeMode
    mode: ScopeMode
    fell_back: bool
    employee_ids: List[str]

    @classmethod
    def from_scope(cls, scope: Scope) -> "ScopeResponse":
        return cls(
            requested_mode=scope.requested_mode,
            mode=scope.mode,
            fell_back=scope.fell_back,
            employee_ids=sorted(scope.employee_ids),
        )
