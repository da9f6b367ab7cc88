"""
Service-level tests for the employee lifecycle: ordering, President guard,
department counters and workflow records
"""
from datetime import date

import pytest
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, InvalidValueError, NotFoundError
from app.models.department import Department
from app.models.employee import Employee, EmployeeStatus
from app.models.position import Position, PositionStatus
from app.models.workflow import Workflow
from app.schemas.employee import EmployeeCreate, EmployeeUpdate
from app.services import employee_service, workflow_service
from app.services.employee_service import (
    create_employee,
    update_employee,
    delete_employee,
    get_employee,
    list_employees,
)


def _workflows(db: Session, employee_id: str, event_type: str = None):
    query = db.query(Workflow).filter(Workflow.employee_id == employee_id)
    if event_type:
        query = query.filter(Workflow.type == event_type)
    return query.order_by(Workflow.id).all()


def _president_status(db: Session) -> str:
    position = db.query(Position).filter(Position.name == "President").first()
    db.refresh(position)
    return position.status


def _assert_counts_match(db: Session):
    for department in db.query(Department).all():
        db.refresh(department)
        actual = db.query(Employee).filter(Employee.department_id == department.id).count()
        assert department.employee_count == actual, department.name


@pytest.fixture
def recount_spy(monkeypatch):
    """Record every department recount the lifecycle triggers"""
    calls = []
    real = employee_service.recount_employees

    def spy(db, department_id):
        calls.append(department_id)
        return real(db, department_id)

    monkeypatch.setattr(employee_service, "recount_employees", spy)
    return calls


# ====== CREATE ======

def test_create_employee_onboarding(db, positions, make_account, engineering):
    account = make_account("ada")

    employee = create_employee(db, EmployeeCreate(
        account_id=account.id,
        position="Developer",
        department_id=engineering.id,
        hire_date=date(2024, 1, 1),
    ))

    assert employee.id == "EMP001"
    assert employee.account.email == "ada@example.com"
    assert employee.department.name == "Engineering"
    assert employee.status == EmployeeStatus.ACTIVE.value
    assert [w.type for w in employee.workflows] == ["Onboarding"]
    assert employee.workflows[0].details == "Onboarded to Engineering as Developer on 2024-01-01"
    assert employee.workflows[0].status == "pending"
    _assert_counts_match(db)
    assert engineering.employee_count == 1


def test_create_onboarding_details_use_placeholders(db, make_account):
    account = make_account("bare")

    employee = create_employee(db, EmployeeCreate(account_id=account.id))

    assert employee.workflows[0].details == "Onboarded to No Department as Unassigned on N/A"


def test_create_resolves_account_by_email(db, make_account):
    make_account("grace")

    employee = create_employee(db, EmployeeCreate(email="  GRACE@example.com "))

    assert employee.account.email == "grace@example.com"


def test_create_with_unknown_account_fails(db):
    with pytest.raises(NotFoundError):
        create_employee(db, EmployeeCreate(account_id=999))
    with pytest.raises(NotFoundError):
        create_employee(db, EmployeeCreate(email="nobody@example.com"))

    assert db.query(Employee).count() == 0


def test_create_duplicate_account_conflicts_without_side_effects(db, make_account, engineering):
    account = make_account("ada")
    create_employee(db, EmployeeCreate(account_id=account.id, department_id=engineering.id))
    workflows_before = db.query(Workflow).count()

    with pytest.raises(ConflictError):
        create_employee(db, EmployeeCreate(account_id=account.id, department_id=engineering.id))

    assert db.query(Employee).count() == 1
    assert db.query(Workflow).count() == workflows_before
    _assert_counts_match(db)


def test_create_with_unknown_position_or_department_fails(db, positions, make_account):
    account = make_account("ada")

    with pytest.raises(NotFoundError):
        create_employee(db, EmployeeCreate(account_id=account.id, position="Astronaut"))
    with pytest.raises(NotFoundError):
        create_employee(db, EmployeeCreate(account_id=account.id, department_id=42))

    assert db.query(Employee).count() == 0


def test_create_with_deactivated_position_fails(db, positions, make_account):
    positions["Developer"].status = PositionStatus.DEACTIVE.value
    db.commit()

    with pytest.raises(InvalidValueError):
        create_employee(db, EmployeeCreate(account_id=make_account("ada").id, position="Developer"))

    assert db.query(Employee).count() == 0


def test_create_position_name_is_canonicalized(db, positions, make_account):
    employee = create_employee(db, EmployeeCreate(account_id=make_account("ada").id, position="  developer "))

    assert employee.position == "Developer"


def test_create_survives_workflow_store_failure(db, make_account, engineering, monkeypatch):
    """A failing workflow write is contained; the employee is still returned"""
    def broken(details):
        raise RuntimeError("workflow store unavailable")

    monkeypatch.setattr(workflow_service, "sanitize_for_json", broken)

    employee = create_employee(db, EmployeeCreate(
        account_id=make_account("ada").id,
        department_id=engineering.id,
    ))

    assert employee.id == "EMP001"
    assert employee.workflows == []
    assert db.query(Workflow).count() == 0
    _assert_counts_match(db)


def test_create_survives_recount_failure(db, make_account, engineering, monkeypatch):
    def broken(db, department_id):
        raise RuntimeError("counter unavailable")

    monkeypatch.setattr(employee_service, "recount_employees", broken)

    employee = create_employee(db, EmployeeCreate(
        account_id=make_account("ada").id,
        department_id=engineering.id,
    ))

    assert employee.id == "EMP001"
    # Workflow recording still ran after the failed recount
    assert [w.type for w in employee.workflows] == ["Onboarding"]


# ====== MANAGER ======

def test_self_manager_on_create_conflicts(db, make_account):
    with pytest.raises(ConflictError):
        create_employee(db, EmployeeCreate(id="EMP050", account_id=make_account("a").id, manager_id="EMP050"))

    # Generated ID: the candidate itself is rejected as manager
    with pytest.raises(ConflictError):
        create_employee(db, EmployeeCreate(account_id=make_account("b").id, manager_id="EMP001"))

    assert db.query(Employee).count() == 0


def test_self_manager_on_update_conflicts(db, make_account):
    employee = create_employee(db, EmployeeCreate(account_id=make_account("a").id))

    with pytest.raises(ConflictError):
        update_employee(db, employee.id, EmployeeUpdate(manager_id=employee.id))

    assert get_employee(db, employee.id).manager_id is None


def test_manager_cycle_conflicts(db, make_account):
    boss = create_employee(db, EmployeeCreate(account_id=make_account("boss").id))
    report = create_employee(db, EmployeeCreate(account_id=make_account("report").id, manager_id=boss.id))

    with pytest.raises(ConflictError):
        update_employee(db, boss.id, EmployeeUpdate(manager_id=report.id))


def test_unknown_manager_not_found(db, make_account):
    create_employee(db, EmployeeCreate(account_id=make_account("a").id))

    with pytest.raises(NotFoundError):
        create_employee(db, EmployeeCreate(account_id=make_account("b").id, manager_id="EMP777"))


# ====== PRESIDENT GUARD ======

def test_assigning_president_deactivates_position(db, positions, make_account):
    assert _president_status(db) == PositionStatus.ACTIVE.value

    create_employee(db, EmployeeCreate(account_id=make_account("a").id, position="president"))

    assert _president_status(db) == PositionStatus.DEACTIVE.value


def test_second_president_conflicts(db, positions, make_account):
    president = create_employee(db, EmployeeCreate(account_id=make_account("a").id, position="President"))
    other = create_employee(db, EmployeeCreate(account_id=make_account("b").id, position="Manager"))

    with pytest.raises(ConflictError, match="already assigned"):
        create_employee(db, EmployeeCreate(account_id=make_account("c").id, position="PRESIDENT"))
    with pytest.raises(ConflictError, match="already assigned"):
        update_employee(db, other.id, EmployeeUpdate(position="President"))

    assert get_employee(db, president.id).position == "President"
    assert get_employee(db, other.id).position == "Manager"
    assert _president_status(db) == PositionStatus.DEACTIVE.value


def test_inactive_president_does_not_hold_position(db, positions, make_account):
    create_employee(db, EmployeeCreate(
        account_id=make_account("a").id,
        position="President",
        status=EmployeeStatus.INACTIVE,
    ))
    assert _president_status(db) == PositionStatus.ACTIVE.value

    # An active holder can still be appointed
    create_employee(db, EmployeeCreate(account_id=make_account("b").id, position="President"))
    assert _president_status(db) == PositionStatus.DEACTIVE.value


def test_deactivating_president_reopens_position(db, positions, make_account):
    president = create_employee(db, EmployeeCreate(account_id=make_account("a").id, position="President"))

    update_employee(db, president.id, EmployeeUpdate(status=EmployeeStatus.INACTIVE))
    assert _president_status(db) == PositionStatus.ACTIVE.value

    successor = create_employee(db, EmployeeCreate(account_id=make_account("b").id, position="President"))
    assert _president_status(db) == PositionStatus.DEACTIVE.value

    # Reactivating the former holder would make two
    with pytest.raises(ConflictError):
        update_employee(db, president.id, EmployeeUpdate(status=EmployeeStatus.ACTIVE))

    assert get_employee(db, president.id).status == EmployeeStatus.INACTIVE.value
    assert get_employee(db, successor.id).status == EmployeeStatus.ACTIVE.value


def test_moving_president_to_other_position_reopens_position(db, positions, make_account):
    president = create_employee(db, EmployeeCreate(account_id=make_account("a").id, position="President"))

    update_employee(db, president.id, EmployeeUpdate(position="Manager"))

    assert _president_status(db) == PositionStatus.ACTIVE.value


def test_president_can_be_updated_by_itself(db, positions, make_account, engineering):
    president = create_employee(db, EmployeeCreate(account_id=make_account("a").id, position="President"))

    updated = update_employee(db, president.id, EmployeeUpdate(position="President", department_id=engineering.id))

    assert updated.position == "President"
    assert _president_status(db) == PositionStatus.DEACTIVE.value


def test_deleting_president_reopens_position_and_records_deletion(db, positions, make_account, engineering):
    president = create_employee(db, EmployeeCreate(
        account_id=make_account("a").id,
        position="President",
        department_id=engineering.id,
    ))
    assert _president_status(db) == PositionStatus.DEACTIVE.value

    delete_employee(db, president.id)

    assert _president_status(db) == PositionStatus.ACTIVE.value
    deleted = _workflows(db, president.id, "Employee Deleted")
    assert len(deleted) == 1
    assert deleted[0].details == "Removed from Engineering (was President)"


# ====== UPDATE ======

def test_transfer_recounts_both_departments_and_records_transfer(
    db, make_account, engineering, sales, recount_spy
):
    employee = create_employee(db, EmployeeCreate(account_id=make_account("a").id, department_id=sales.id))
    recount_spy.clear()

    update_employee(db, employee.id, EmployeeUpdate(department_id=engineering.id))

    assert sorted(recount_spy) == sorted([sales.id, engineering.id])
    transfers = _workflows(db, employee.id, "Transfer")
    assert len(transfers) == 1
    assert transfers[0].details == "From: Sales → To: Engineering"
    _assert_counts_match(db)
    assert sales.employee_count == 0
    assert engineering.employee_count == 1


def test_leaving_all_departments_records_transfer(db, make_account, sales):
    employee = create_employee(db, EmployeeCreate(account_id=make_account("a").id, department_id=sales.id))

    update_employee(db, employee.id, EmployeeUpdate(department_id=None))

    transfers = _workflows(db, employee.id, "Transfer")
    assert transfers[0].details == "From: Sales → To: N/A"
    _assert_counts_match(db)


def test_no_transfer_without_department_change(db, make_account, sales, recount_spy):
    employee = create_employee(db, EmployeeCreate(account_id=make_account("a").id, department_id=sales.id))
    recount_spy.clear()

    update_employee(db, employee.id, EmployeeUpdate(hire_date=date(2025, 3, 1)))

    assert recount_spy == []
    assert _workflows(db, employee.id, "Transfer") == []


def test_field_updates_are_coalesced(db, make_account):
    manager = create_employee(db, EmployeeCreate(account_id=make_account("boss").id))
    employee = create_employee(db, EmployeeCreate(account_id=make_account("a").id))

    update_employee(db, employee.id, EmployeeUpdate(
        manager_id=manager.id,
        status=EmployeeStatus.INACTIVE,
    ))

    updates = _workflows(db, employee.id, "Field Updates")
    assert len(updates) == 1
    assert updates[0].details == "status: active → inactive; manager: N/A → EMP001"


def test_field_updates_use_display_names(db, positions, make_account, engineering, sales):
    employee = create_employee(db, EmployeeCreate(
        account_id=make_account("a").id,
        position="Developer",
        department_id=sales.id,
    ))
    make_account("b")

    update_employee(db, employee.id, EmployeeUpdate(
        email="b@example.com",
        position="Manager",
        department_id=engineering.id,
    ))

    updates = _workflows(db, employee.id, "Field Updates")
    assert updates[0].details == (
        "account: a@example.com → b@example.com; "
        "position: Developer → Manager; "
        "department: Sales → Engineering"
    )


def test_field_updates_emitted_when_nothing_changed(db, make_account):
    employee = create_employee(db, EmployeeCreate(account_id=make_account("a").id))

    update_employee(db, employee.id, EmployeeUpdate())

    updates = _workflows(db, employee.id, "Field Updates")
    assert len(updates) == 1
    assert updates[0].details == "No tracked fields changed"


def test_update_account_relink_conflicts(db, make_account):
    first = create_employee(db, EmployeeCreate(account_id=make_account("a").id))
    second = create_employee(db, EmployeeCreate(account_id=make_account("b").id))

    with pytest.raises(ConflictError):
        update_employee(db, second.id, EmployeeUpdate(account_id=first.account_id))

    # Re-linking to its own account is a no-op, not a conflict
    updated = update_employee(db, second.id, EmployeeUpdate(account_id=second.account_id))
    assert updated.account_id == second.account_id


def test_update_rejects_invalid_status(db, make_account):
    employee = create_employee(db, EmployeeCreate(account_id=make_account("a").id))

    with pytest.raises(InvalidValueError):
        update_employee(db, employee.id, EmployeeUpdate(status=None))
    with pytest.raises(InvalidValueError):
        update_employee(db, employee.id, EmployeeUpdate.model_construct(status="retired"))

    assert get_employee(db, employee.id).status == EmployeeStatus.ACTIVE.value


def test_update_missing_employee(db):
    with pytest.raises(NotFoundError):
        update_employee(db, "EMP404", EmployeeUpdate(status=EmployeeStatus.INACTIVE))


# ====== DELETE ======

def test_delete_recounts_and_keeps_history(db, make_account, engineering, recount_spy):
    employee = create_employee(db, EmployeeCreate(account_id=make_account("a").id, department_id=engineering.id))
    recount_spy.clear()

    delete_employee(db, employee.id)

    assert get_employee(db, employee.id) is None
    assert recount_spy == [engineering.id]
    _assert_counts_match(db)
    assert [w.type for w in _workflows(db, employee.id)] == ["Onboarding", "Employee Deleted"]


def test_delete_detaches_direct_reports(db, make_account):
    boss = create_employee(db, EmployeeCreate(account_id=make_account("boss").id))
    report = create_employee(db, EmployeeCreate(account_id=make_account("r").id, manager_id=boss.id))

    delete_employee(db, boss.id)

    remaining = get_employee(db, report.id)
    assert remaining.manager_id is None
    updates = _workflows(db, report.id, "Field Updates")
    assert updates[-1].details == "manager: EMP001 → N/A"


def test_delete_missing_employee(db):
    with pytest.raises(NotFoundError):
        delete_employee(db, "EMP404")


# ====== READS ======

def test_list_employees_filters(db, make_account, engineering, sales):
    create_employee(db, EmployeeCreate(account_id=make_account("a").id, department_id=engineering.id))
    create_employee(db, EmployeeCreate(account_id=make_account("b").id, department_id=sales.id))
    create_employee(db, EmployeeCreate(
        account_id=make_account("c").id,
        department_id=sales.id,
        status=EmployeeStatus.INACTIVE,
    ))

    assert [e.id for e in list_employees(db)] == ["EMP001", "EMP002", "EMP003"]
    assert [e.id for e in list_employees(db, department_id=sales.id)] == ["EMP002", "EMP003"]
    assert [e.id for e in list_employees(db, status=EmployeeStatus.INACTIVE)] == ["EMP003"]
    assert [e.id for e in list_employees(db, skip=1, limit=1)] == ["EMP002"]
