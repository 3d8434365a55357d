"""
Workflow Schemas

Assignments, submissions, files, assessments and verifications.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from poetracker.core.models.enums import (
    AssessmentStatus,
    SubmissionStatus,
    VerificationStatus,
    VerifierType,
)

from .criteria import CriteriaChecklist


# Assignment Schemas
class AssignmentCreate(BaseModel):
    """Schema for an admin assigning an assessor to a class (or one trainee) for a unit."""

    class_intake_id: int
    unit_id: int
    assessor_id: int
    trainee_id: int | None = Field(
        None, description="Restrict to one trainee; omit to cover the whole intake"
    )


class AssignmentSchema(AssignmentCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime


# Submission Schemas
class SubmissionCreate(BaseModel):
    """Form fields accompanying the uploaded evidence files."""

    title: str = Field(..., min_length=1, max_length=255)
    task_id: int
    unit_id: int
    description: str | None = None


class SubmissionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    trainee_id: int
    task_id: int
    unit_id: int
    title: str
    description: str | None
    status: SubmissionStatus
    submitted_at: datetime


class SubmissionFileSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    submission_id: int
    file_name: str
    file_type: str
    file_path: str
    file_size: int
    uploaded_at: datetime


# Assessment Schemas
class AssessmentCreate(BaseModel):
    submission_id: int
    status: AssessmentStatus
    feedback: str | None = None
    criteria: CriteriaChecklist = Field(default_factory=dict)


class AssessmentSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    submission_id: int
    assessor_id: int
    feedback: str | None
    criteria: CriteriaChecklist
    status: AssessmentStatus
    assessed_at: datetime


# Verification Schemas
class VerificationCreate(BaseModel):
    assessment_id: int
    status: VerificationStatus
    comments: str | None = None


class VerificationSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    assessment_id: int
    verifier_id: int
    verifier_type: VerifierType
    status: VerificationStatus
    comments: str | None
    verified_at: datetime


# Composite views
class SubmissionCreated(BaseModel):
    submission: SubmissionSchema
    files: list[SubmissionFileSchema]


class SubmissionDetail(BaseModel):
    submission: SubmissionSchema
    files: list[SubmissionFileSchema]
    assessments: list[AssessmentSchema]


class AssessmentDetail(BaseModel):
    assessment: AssessmentSchema
    verifications: list[VerificationSchema]
