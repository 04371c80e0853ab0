"""Enrollment status state machine.

The table below is the only source of legal status changes. Each edge lists
the triggers allowed to take it, so the same pair of statuses can be legal
for the reenrollment batch and illegal for an administrator (``active`` ->
``pending``). ``cancelled`` and ``completed`` are terminal: reactivating a
student means creating a new enrollment.
"""
import enum

from registrar.core.errors import InvalidTransitionError
from registrar.models.enrollment import TERMINAL_STATUSES
from registrar.models.enrollment import EnrollmentStatus as S


class Trigger(str, enum.Enum):
    ADMIN = "admin"
    WITHDRAWAL = "withdrawal"
    REENROLLMENT_BATCH = "reenrollment_batch"
    REENROLLMENT_ACCEPTANCE = "reenrollment_acceptance"


INITIAL_STATUS = S.PENDING

TRANSITIONS: dict[tuple[S, S], frozenset[Trigger]] = {
    (S.PENDING, S.ACTIVE): frozenset({Trigger.ADMIN, Trigger.REENROLLMENT_ACCEPTANCE}),
    (S.PENDING, S.CANCELLED): frozenset({Trigger.ADMIN, Trigger.WITHDRAWAL}),
    (S.ACTIVE, S.CANCELLED): frozenset({Trigger.ADMIN, Trigger.WITHDRAWAL}),
    (S.ACTIVE, S.COMPLETED): frozenset({Trigger.ADMIN}),
    (S.ACTIVE, S.PENDING): frozenset({Trigger.REENROLLMENT_BATCH}),
    # legacy marker states
    (S.CONTRACT, S.ACTIVE): frozenset({Trigger.ADMIN}),
    (S.CONTRACT, S.CANCELLED): frozenset({Trigger.ADMIN, Trigger.WITHDRAWAL}),
    (S.REENROLLMENT, S.PENDING): frozenset({Trigger.REENROLLMENT_BATCH}),
    (S.REENROLLMENT, S.CANCELLED): frozenset({Trigger.ADMIN}),
}


def can_transition(current: S, target: S, trigger: Trigger) -> bool:
    return trigger in TRANSITIONS.get((S(current), S(target)), frozenset())


def ensure_transition(current: S, target: S, trigger: Trigger) -> None:
    if not can_transition(current, target, trigger):
        raise InvalidTransitionError(current, target)


def allowed_targets(current: S, trigger: Trigger) -> list[S]:
    return [
        target
        for (source, target), triggers in TRANSITIONS.items()
        if source == S(current) and trigger in triggers
    ]


def is_terminal(status: S) -> bool:
    return S(status) in TERMINAL_STATUSES
