"""
Authorization Policy

Pure decision functions: given the actor, the target and whatever related
records the caller has already loaded, return a ``Decision``. No I/O happens
here. ``enforce`` turns a denial into ``Forbidden``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from poetracker.core.errors import Forbidden
from poetracker.core.models.enums import VERIFIER_ROLES, Role

if TYPE_CHECKING:
    from poetracker.core.models import Assessment, Assignment, Submission, User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Decision:
    """Outcome of a policy check."""

    allowed: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(True)


def deny(reason: str) -> Decision:
    return Decision(False, reason)


def enforce(decision: Decision) -> None:
    """Raise Forbidden when the decision is a denial."""
    if not decision.allowed:
        logger.warning(f"Authorization denied: {decision.reason}")
        raise Forbidden(f"Forbidden: {decision.reason}")


# ============================================================================
# Basic rules
# ============================================================================


def self_or_admin(actor: User, target_user_id: int) -> Decision:
    if actor.role == Role.ADMIN or actor.id == target_user_id:
        return ALLOW
    return deny("You can only access your own user information")


def role_gated(actor: User, allowed: Iterable[Role]) -> Decision:
    allowed = frozenset(allowed)
    if actor.role in allowed:
        return ALLOW
    return deny("Insufficient permissions")


def trainee_owns(actor: User, trainee_id: int) -> Decision:
    if actor.role == Role.TRAINEE and actor.id == trainee_id:
        return ALLOW
    return deny("You can only access your own data")


def assignment_covers(assignment: Assignment, trainee: User) -> bool:
    """Whether ``assignment`` gives its assessor jurisdiction over ``trainee``."""
    if assignment.trainee_id is not None:
        return assignment.trainee_id == trainee.id
    return (
        trainee.class_intake_id is not None
        and assignment.class_intake_id == trainee.class_intake_id
    )


def assessor_assigned(
    actor: User,
    trainee: User,
    assignments: Iterable[Assignment],
    unit_id: int | None = None,
) -> Decision:
    """Allow an assessor holding an assignment over ``trainee``.

    With ``unit_id`` the assignment must also be for that unit.
    """
    if actor.role != Role.ASSESSOR:
        return deny("Only assessors can act on assigned trainees")
    for assignment in assignments:
        if assignment.assessor_id != actor.id:
            continue
        if unit_id is not None and assignment.unit_id != unit_id:
            continue
        if assignment_covers(assignment, trainee):
            return ALLOW
    return deny("You are not assigned to this trainee")


# ============================================================================
# Composite rules
# ============================================================================


def can_view_submission(
    actor: User, submission: Submission, trainee: User, assignments: Iterable[Assignment]
) -> Decision:
    """Trainee owner, covering assessor, any verifier, or admin."""
    if actor.role == Role.ADMIN or actor.role in VERIFIER_ROLES:
        return ALLOW
    if actor.role == Role.TRAINEE:
        if actor.id == submission.trainee_id:
            return ALLOW
        return deny("You can only view your own submissions")
    return assessor_assigned(actor, trainee, assignments, unit_id=submission.unit_id)


def can_assess(
    actor: User, submission: Submission, trainee: User, assignments: Iterable[Assignment]
) -> Decision:
    """Only the assessor assigned to the submission's trainee and unit."""
    return assessor_assigned(actor, trainee, assignments, unit_id=submission.unit_id)


def can_view_assessment(
    actor: User,
    assessment: Assessment,
    submission: Submission,
    trainee: User,
    assignments: Iterable[Assignment],
) -> Decision:
    """Anyone who may view the submission, plus the assessor who wrote it."""
    if actor.role == Role.ASSESSOR and actor.id == assessment.assessor_id:
        return ALLOW
    return can_view_submission(actor, submission, trainee, assignments)


def can_verify(actor: User) -> Decision:
    if actor.role in VERIFIER_ROLES:
        return ALLOW
    return deny("Only internal or external verifiers can verify assessments")


def can_export_portfolio(
    actor: User, trainee: User, assignments: Iterable[Assignment]
) -> Decision:
    """Trainee owner, an assessor assigned to the trainee in any unit, or admin."""
    if actor.role == Role.ADMIN:
        return ALLOW
    if actor.role == Role.TRAINEE:
        if actor.id == trainee.id:
            return ALLOW
        return deny("You can only export your own portfolio")
    if actor.role == Role.ASSESSOR:
        return assessor_assigned(actor, trainee, assignments)
    return deny("Insufficient permissions")
