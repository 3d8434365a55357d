"""
Closed value sets used across models, schemas and the workflow.
"""

from enum import StrEnum


class Role(StrEnum):
    TRAINEE = "trainee"
    ASSESSOR = "assessor"
    INTERNAL_VERIFIER = "internal_verifier"
    EXTERNAL_VERIFIER = "external_verifier"
    ADMIN = "admin"


VERIFIER_ROLES = frozenset({Role.INTERNAL_VERIFIER, Role.EXTERNAL_VERIFIER})


class SubmissionStatus(StrEnum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    RESUBMIT = "resubmit"
    APPROVED = "approved"
    REJECTED = "rejected"


class AssessmentStatus(StrEnum):
    APPROVED = "approved"
    RESUBMIT = "resubmit"
    REJECTED = "rejected"


class VerifierType(StrEnum):
    INTERNAL = "internal"
    EXTERNAL = "external"


class VerificationStatus(StrEnum):
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    FLAGGED = "flagged"


class NotificationType(StrEnum):
    SUBMISSION = "submission"
    ASSESSMENT = "assessment"
    VERIFICATION = "verification"
    SYSTEM = "system"
