from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from src.review_cycle.review_cycle.core.enums import PermissionState, Role
from src.review_cycle.review_cycle.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.review_cycle.review_cycle.core.quarter import Quarter
from src.review_cycle.review_cycle.employees.model import Employee

NOW = datetime(2026, 7, 10, 9, 0)
HR = Role.HR_ADMIN


@pytest.fixture
def service(container, employees):
    employees.add(Employee(7, "E007", "Gia"))
    return container.permission_service


def _grant(service, quarter=2, **kwargs):
    values = dict(current_role=HR, granted_by=1, employee_id=7, cycle_id=1, quarter=quarter, now=NOW)
    values.update(kwargs)
    return service.grant(**values)


def test_grant_creates_active_permission(service):
    p = _grant(service, reason="  sick leave  ", expires_at=date(2026, 7, 31))

    assert p.scope == Quarter.numbered(2)
    assert p.reason == "sick leave"
    assert p.expires_at == datetime(2026, 7, 31, 23, 59, 59)
    assert p.state(NOW) == PermissionState.GRANTED


def test_grant_without_quarter_is_wildcard(service):
    assert _grant(service, quarter=None).scope == Quarter.ANY
    assert _grant(service, quarter="year-end").scope == Quarter.YEAR_END


def test_second_active_grant_conflicts(service):
    _grant(service)

    with pytest.raises(ConflictError):
        _grant(service)


def test_revoked_grant_is_reactivated_in_place(service, permissions):
    first = _grant(service)
    service.revoke(current_role=HR, permission_id=first.permission_id, now=NOW)

    again = _grant(service, now=NOW + timedelta(days=1), reason="second chance")

    assert again.permission_id == first.permission_id
    assert again.revoked_at is None
    assert again.reason == "second chance"
    assert len(permissions.rows) == 1


def test_expired_grant_still_occupies_its_scope(service):
    _grant(service, expires_at=NOW + timedelta(hours=1))

    with pytest.raises(ConflictError):
        _grant(service, now=NOW + timedelta(days=2))


def test_expired_grant_is_reactivated_after_revoke(service):
    first = _grant(service, expires_at=NOW + timedelta(hours=1))
    later = NOW + timedelta(days=2)
    service.revoke(current_role=HR, permission_id=first.permission_id, now=later)

    again = _grant(service, now=later)

    assert again.permission_id == first.permission_id
    assert again.expires_at is None


def test_grant_rejects_past_expiry(service):
    with pytest.raises(ValidationError):
        _grant(service, expires_at=date(2026, 7, 1))


def test_grant_requires_known_employee_and_cycle(service):
    with pytest.raises(NotFoundError):
        _grant(service, employee_id=99)
    with pytest.raises(NotFoundError):
        _grant(service, cycle_id=99)


def test_grant_requires_admin(service):
    with pytest.raises(AuthorizationError):
        _grant(service, current_role=Role.MANAGER)


def test_revoke_is_idempotent(service):
    p = _grant(service)

    first = service.revoke(current_role=HR, permission_id=p.permission_id, now=NOW)
    second = service.revoke(current_role=HR, permission_id=p.permission_id, now=NOW + timedelta(days=1))

    assert first.revoked_at == NOW
    assert second.revoked_at == NOW


def test_revoke_unknown_permission(service):
    with pytest.raises(NotFoundError):
        service.revoke(current_role=HR, permission_id=404, now=NOW)


def test_revoke_for_quarter_takes_wildcard_but_not_year_end(service):
    q2 = _grant(service, quarter=2)
    wildcard = _grant(service, quarter=None)
    year_end = _grant(service, quarter="year-end")

    revoked = service.revoke_for(current_role=HR, cycle_id=1, employee_id=7, now=NOW, quarter=2)

    assert {p.permission_id for p in revoked} == {q2.permission_id, wildcard.permission_id}
    assert service.get(current_role=HR, permission_id=year_end.permission_id).revoked_at is None


def test_revoke_for_everything_then_nothing_left(service):
    _grant(service, quarter=1)
    _grant(service, quarter=3)

    assert len(service.revoke_for(current_role=HR, cycle_id=1, employee_id=7, now=NOW)) == 2
    with pytest.raises(NotFoundError):
        service.revoke_for(current_role=HR, cycle_id=1, employee_id=7, now=NOW)


def test_update_changes_only_given_fields(service):
    p = _grant(service, reason="first")

    updated = service.update(current_role=HR, permission_id=p.permission_id, now=NOW, expires_at=date(2026, 8, 1))

    assert updated.reason == "first"
    assert updated.expires_at == datetime(2026, 8, 1, 23, 59, 59)


def test_update_rejects_past_expiry(service):
    p = _grant(service, expires_at=date(2026, 7, 31))

    with pytest.raises(ValidationError):
        service.update(current_role=HR, permission_id=p.permission_id, now=NOW, expires_at=date(2026, 7, 9))

    assert service.get(current_role=HR, permission_id=p.permission_id).expires_at == datetime(2026, 7, 31, 23, 59, 59)


def test_check_prefers_quarter_specific(service):
    _grant(service, quarter=None)
    q2 = _grant(service, quarter=2)

    result = service.check(employee_id=7, cycle_id=1, now=NOW, quarter="2")
    assert result.has_permission and result.permission == q2

    assert service.check(employee_id=7, cycle_id=1, now=NOW, quarter="year-end").has_permission is False
    assert service.check(employee_id=7, cycle_id=1, now=NOW).has_permission is True


def test_list_active_only_hides_revoked_and_expired(service):
    keep = _grant(service, quarter=1)
    gone = _grant(service, quarter=2)
    _grant(service, quarter=3, expires_at=NOW + timedelta(minutes=5))
    service.revoke(current_role=HR, permission_id=gone.permission_id, now=NOW)

    rows = service.list_permissions(current_role=HR, now=NOW + timedelta(hours=1), cycle_id=1, active_only=True)

    assert [p.permission_id for p in rows] == [keep.permission_id]
