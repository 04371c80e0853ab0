import threading

import pytest

from registrar.core.errors import (
    ConflictError,
    InvalidTransitionError,
    PreconditionFailedError,
)
from registrar.models.enrollment import EnrollmentStatus
from registrar.models.user import User
from registrar.services import contracts as contract_service
from registrar.services import enrollments as enrollment_service
from registrar.services import reenrollment as reenrollment_service
from tests.support import (
    TestingSessionLocal,
    add_enrollment,
    contracts_for,
    get_enrollment_row,
    live_count,
)


def awaiting_acceptance(seed_data) -> int:
    """An enrollment as the batch leaves it: pending, stamped with the period."""
    return add_enrollment(
        seed_data.ana_id,
        seed_data.systems_id,
        EnrollmentStatus.PENDING,
        period_semester=1,
        period_year=2026,
    )


def run_concurrently(*targets):
    """Start every target at the same moment; return what each one produced."""
    barrier = threading.Barrier(len(targets))
    results = [None] * len(targets)

    def runner(index, target):
        db = TestingSessionLocal()
        try:
            barrier.wait()
            results[index] = target(db)
        except Exception as exc:
            results[index] = exc
        finally:
            db.close()

    threads = [
        threading.Thread(target=runner, args=(i, target)) for i, target in enumerate(targets)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)
    return results


def test_failed_contract_insert_keeps_enrollment_pending(seed_data, monkeypatch):
    enrollment_id = awaiting_acceptance(seed_data)

    def broken_insert(db, enrollment, user, template, semester, year):
        # the status change has already reached the database at this point
        db.flush()
        raise RuntimeError("contract storage unavailable")

    monkeypatch.setattr(contract_service, "create_acceptance_contract", broken_insert)

    with TestingSessionLocal() as db:
        user = db.get(User, seed_data.ana_user_id)
        with pytest.raises(RuntimeError):
            reenrollment_service.accept_reenrollment(db, enrollment_id, user)

    row = get_enrollment_row(enrollment_id)
    assert row.status == EnrollmentStatus.PENDING
    assert (row.period_semester, row.period_year) == (1, 2026)
    assert contracts_for(enrollment_id) == []


def test_accept_commits_status_and_contract_together(seed_data):
    enrollment_id = awaiting_acceptance(seed_data)

    with TestingSessionLocal() as db:
        user = db.get(User, seed_data.ana_user_id)
        enrollment, contract = reenrollment_service.accept_reenrollment(db, enrollment_id, user)
        assert enrollment.status == EnrollmentStatus.ACTIVE
        assert contract.enrollment_id == enrollment_id
        assert contract.is_accepted

    assert get_enrollment_row(enrollment_id).status == EnrollmentStatus.ACTIVE
    [stored] = contracts_for(enrollment_id)
    assert (stored.semester, stored.year) == (1, 2026)


def test_concurrent_accepts_create_exactly_one_contract(seed_data):
    enrollment_id = awaiting_acceptance(seed_data)

    def accept(db):
        user = db.get(User, seed_data.ana_user_id)
        _, contract = reenrollment_service.accept_reenrollment(db, enrollment_id, user)
        return contract.id

    results = run_concurrently(accept, accept)

    successes = [r for r in results if isinstance(r, int)]
    failures = [r for r in results if isinstance(r, Exception)]
    assert len(successes) == 1, results
    assert len(failures) == 1, results
    assert isinstance(failures[0], PreconditionFailedError)

    assert get_enrollment_row(enrollment_id).status == EnrollmentStatus.ACTIVE
    assert [c.id for c in contracts_for(enrollment_id)] == successes


def test_concurrent_creates_leave_one_live_enrollment(seed_data):
    def enroll_in(course_id):
        def create(db):
            return enrollment_service.create_enrollment(db, seed_data.ana_id, course_id).id

        return create

    results = run_concurrently(enroll_in(seed_data.systems_id), enroll_in(seed_data.nursing_id))

    successes = [r for r in results if isinstance(r, int)]
    failures = [r for r in results if isinstance(r, Exception)]
    assert len(successes) == 1, results
    assert len(failures) == 1, results
    assert isinstance(failures[0], ConflictError)
    assert live_count(seed_data.ana_id) == 1


def test_withdrawal_racing_acceptance_stays_consistent(seed_data):
    enrollment_id = awaiting_acceptance(seed_data)

    def accept(db):
        user = db.get(User, seed_data.ana_user_id)
        return reenrollment_service.accept_reenrollment(db, enrollment_id, user)[0].status

    def withdraw(db):
        user = db.get(User, seed_data.ana_user_id)
        return enrollment_service.withdraw_enrollment(db, enrollment_id, user).status

    results = run_concurrently(accept, withdraw)

    accepted, withdrawn = results
    assert withdrawn == EnrollmentStatus.CANCELLED, results
    assert get_enrollment_row(enrollment_id).status == EnrollmentStatus.CANCELLED

    contracts = contracts_for(enrollment_id)
    if contracts:
        # acceptance ran first and was then withdrawn
        assert accepted == EnrollmentStatus.ACTIVE
        assert len(contracts) == 1
    else:
        assert isinstance(accepted, PreconditionFailedError), results


def test_accept_returns_the_state_it_committed(seed_data):
    enrollment_id = awaiting_acceptance(seed_data)

    with TestingSessionLocal() as db:
        user = db.get(User, seed_data.ana_user_id)
        enrollment, contract = reenrollment_service.accept_reenrollment(db, enrollment_id, user)

        # a later writer in another session must not leak into the returned objects
        with TestingSessionLocal() as other:
            other_user = other.get(User, seed_data.ana_user_id)
            enrollment_service.withdraw_enrollment(other, enrollment_id, other_user)

        assert enrollment.status == EnrollmentStatus.ACTIVE
        assert contract.is_accepted

    assert get_enrollment_row(enrollment_id).status == EnrollmentStatus.CANCELLED


def test_batch_racing_an_admin_change_matches_a_serial_order(seed_data):
    raced_id = add_enrollment(seed_data.ana_id, seed_data.systems_id)
    untouched_id = add_enrollment(seed_data.bruno_id, seed_data.nursing_id)

    def batch(db):
        admin = db.get(User, seed_data.admin_user_id)
        return reenrollment_service.process_global_reenrollment(db, 1, 2026, admin)

    def complete(db):
        return enrollment_service.change_status(db, raced_id, EnrollmentStatus.COMPLETED).status

    batch_result, completed = run_concurrently(batch, complete)

    assert not isinstance(batch_result, Exception), batch_result
    assert untouched_id in batch_result.affected_enrollment_ids
    assert get_enrollment_row(untouched_id).status == EnrollmentStatus.PENDING

    raced = get_enrollment_row(raced_id)
    if raced_id in batch_result.affected_enrollment_ids:
        # batch first: the row is pending, so completing it is no longer legal
        assert raced.status == EnrollmentStatus.PENDING
        assert (raced.period_semester, raced.period_year) == (1, 2026)
        assert isinstance(completed, InvalidTransitionError), completed
        assert batch_result.total_students == 2
    else:
        # admin first: the batch never saw an active row to move
        assert completed == EnrollmentStatus.COMPLETED
        assert raced.status == EnrollmentStatus.COMPLETED
        assert raced.period_semester is None
        assert batch_result.affected_enrollment_ids == [untouched_id]
