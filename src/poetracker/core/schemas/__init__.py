"""Pydantic schemas for API validation."""

from .activity import (
    ActivityLogSchema,
    AssessmentOutcome,
    AssessorActivity,
    NotificationSchema,
    TraineePerformance,
)
from .criteria import CriteriaChecklist, CriterionValue
from .structure import (
    ClassIntakeCreate,
    ClassIntakeSchema,
    CourseCreate,
    CourseSchema,
    DepartmentCreate,
    DepartmentSchema,
    ModuleCreate,
    ModuleSchema,
    StudyLevelCreate,
    StudyLevelSchema,
    TaskCreate,
    TaskSchema,
    UnitCreate,
    UnitSchema,
)
from .users import (
    LoginRequest,
    MessageResponse,
    PasswordChange,
    TokenResponse,
    UserCreate,
    UserSchema,
    UserUpdate,
)
from .workflow import (
    AssessmentCreate,
    AssessmentDetail,
    AssessmentSchema,
    AssignmentCreate,
    AssignmentSchema,
    SubmissionCreate,
    SubmissionCreated,
    SubmissionDetail,
    SubmissionFileSchema,
    SubmissionSchema,
    VerificationCreate,
    VerificationSchema,
)

__all__ = [
    # Criteria
    "CriteriaChecklist",
    "CriterionValue",
    # Users
    "UserCreate",
    "UserUpdate",
    "UserSchema",
    "PasswordChange",
    "LoginRequest",
    "TokenResponse",
    "MessageResponse",
    # Structure
    "DepartmentCreate",
    "DepartmentSchema",
    "StudyLevelCreate",
    "StudyLevelSchema",
    "CourseCreate",
    "CourseSchema",
    "ClassIntakeCreate",
    "ClassIntakeSchema",
    "ModuleCreate",
    "ModuleSchema",
    "UnitCreate",
    "UnitSchema",
    "TaskCreate",
    "TaskSchema",
    # Workflow
    "AssignmentCreate",
    "AssignmentSchema",
    "SubmissionCreate",
    "SubmissionSchema",
    "SubmissionFileSchema",
    "SubmissionCreated",
    "SubmissionDetail",
    "AssessmentCreate",
    "AssessmentSchema",
    "AssessmentDetail",
    "VerificationCreate",
    "VerificationSchema",
    # Activity & reports
    "NotificationSchema",
    "ActivityLogSchema",
    "TraineePerformance",
    "AssessorActivity",
    "AssessmentOutcome",
]
