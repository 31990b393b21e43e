"""
Capability derivation for employees.
The account owner bypasses every stored flag; everyone else gets exactly the
flags granted to them, defaulting to False.
"""
from dataclasses import dataclass
from typing import Optional

from app.schemas.records import Employee


@dataclass(frozen=True)
class Capabilities:
    view_org_wide: bool = False
    manage_settings: bool = False
    is_owner: bool = False


NO_CAPABILITIES = Capabilities()


def is_account_owner(employee: Optional[Employee]) -> bool:
    return bool(employee is not None and employee.is_account_owner is True)


def capabilities_of(employee: Optional[Employee]) -> Capabilities:
    """Derive the capability set of an employee. Unknown employees get none."""
    if employee is None:
        return NO_CAPABILITIES
    if is_account_owner(employee):
        return Capabilities(view_org_wide=True, manage_settings=True, is_owner=True)

    permissions = employee.permissions
    if permissions is None:
        return NO_CAPABILITIES
    return Capabilities(
        view_org_wide=permissions.can_view_organization_wide is True,
        manage_settings=permissions.can_manage_settings is True,
        is_owner=False,
    )


def can_set_global_frequency(employee: Optional[Employee]) -> bool:
    if employee is None:
        return False
    if is_account_owner(employee):
        return True
    return bool(employee.permissions and employee.permissions.can_set_global_frequency is True)


def is_direct_manager(employee: Optional[Employee], manager_id: Optional[str]) -> bool:
    """True only for the employee's immediate manager (no skip-level)."""
    if employee is None or not manager_id:
        return False
    return employee.manager_id == manager_id
