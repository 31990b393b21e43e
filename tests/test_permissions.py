from app.schemas.records import EmployeePermissions
from app.services.permissions import (
    NO_CAPABILITIES,
    can_set_global_frequency,
    capabilities_of,
    is_account_owner,
    is_direct_manager,
)
from tests.builders import employee, manager


def test_unknown_employee_has_no_capabilities():
    assert capabilities_of(None) == NO_CAPABILITIES


def test_account_owner_bypasses_stored_flags():
    owner = manager("owner", owner=True, org_wide=False, manage_settings=False)
    caps = capabilities_of(owner)
    assert caps.view_org_wide
    assert caps.manage_settings
    assert caps.is_owner
    assert can_set_global_frequency(owner)


def test_missing_permissions_default_to_false():
    caps = capabilities_of(manager("m"))
    assert not caps.view_org_wide
    assert not caps.manage_settings
    assert not caps.is_owner


def test_granted_flags_only():
    caps = capabilities_of(manager("m", org_wide=True))
    assert caps.view_org_wide
    assert not caps.manage_settings
    assert not caps.is_owner


def test_owner_flag_none_is_not_owner():
    assert not is_account_owner(manager("m", owner=None))
    assert is_account_owner(manager("m", owner=True))


def test_global_frequency_permission():
    person = manager("m").model_copy(update={
        "permissions": EmployeePermissions(can_set_global_frequency=True),
    })
    assert can_set_global_frequency(person)
    assert not can_set_global_frequency(manager("n"))
    assert not can_set_global_frequency(None)


def test_direct_manager_only():
    worker = employee("w", manager_id="lead")
    assert is_direct_manager(worker, "lead")
    assert not is_direct_manager(worker, "vp")
    assert not is_direct_manager(worker, None)
    assert not is_direct_manager(None, "lead")
