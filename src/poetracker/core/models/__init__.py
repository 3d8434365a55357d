"""
PoE Tracker SQLAlchemy Models
"""

from .activity import ActivityLog, Notification
from .base import Base, CreatedAtMixin, IntegerPrimaryKeyMixin, UTCDateTime, utcnow
from .enums import (
    VERIFIER_ROLES,
    AssessmentStatus,
    NotificationType,
    Role,
    SubmissionStatus,
    VerificationStatus,
    VerifierType,
)
from .structure import ClassIntake, Course, Department, Module, StudyLevel, Task, Unit
from .users import AuthToken, User
from .workflow import Assessment, Assignment, Submission, SubmissionFile, Verification

__all__ = [
    # Base
    "Base",
    "IntegerPrimaryKeyMixin",
    "CreatedAtMixin",
    "UTCDateTime",
    "utcnow",
    # Enums
    "Role",
    "VERIFIER_ROLES",
    "SubmissionStatus",
    "AssessmentStatus",
    "VerifierType",
    "VerificationStatus",
    "NotificationType",
    # Users
    "User",
    "AuthToken",
    # Structure
    "Department",
    "StudyLevel",
    "Course",
    "ClassIntake",
    "Module",
    "Unit",
    "Task",
    # Workflow
    "Assignment",
    "Submission",
    "SubmissionFile",
    "Assessment",
    "Verification",
    # Activity
    "Notification",
    "ActivityLog",
]
