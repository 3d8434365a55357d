"""
Workflow Models

Assignments, evidence submissions and their files, assessments and
verifications: the records the submission → assessment → verification
workflow moves through.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, CreatedAtMixin, IntegerPrimaryKeyMixin, UTCDateTime, str_enum, utcnow
from .enums import AssessmentStatus, SubmissionStatus, VerificationStatus, VerifierType


class Assignment(Base, IntegerPrimaryKeyMixin, CreatedAtMixin):
    """Grants an assessor jurisdiction over trainees' work in a unit.

    With ``trainee_id`` set the assignment covers that trainee only; without
    it, every trainee enrolled in ``class_intake_id``.
    """

    __tablename__ = "assignments"

    class_intake_id: Mapped[int] = mapped_column(ForeignKey("class_intakes.id"), nullable=False)
    unit_id: Mapped[int] = mapped_column(ForeignKey("units.id"), nullable=False, index=True)
    assessor_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    trainee_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)


class Submission(Base, IntegerPrimaryKeyMixin):
    """Evidence submitted by a trainee against a unit task.

    ``status`` mirrors the most recent assessment (pending until assessed).
    """

    __tablename__ = "submissions"

    trainee_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    task_id: Mapped[int] = mapped_column(ForeignKey("tasks.id"), nullable=False)
    unit_id: Mapped[int] = mapped_column(ForeignKey("units.id"), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[SubmissionStatus] = mapped_column(
        str_enum(SubmissionStatus), nullable=False, default=SubmissionStatus.PENDING
    )
    submitted_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)


class SubmissionFile(Base, IntegerPrimaryKeyMixin):
    """A stored evidence file. Never modified after upload."""

    __tablename__ = "submission_files"

    submission_id: Mapped[int] = mapped_column(
        ForeignKey("submissions.id"), nullable=False, index=True
    )
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_type: Mapped[str] = mapped_column(String(100), nullable=False, comment="MIME type")
    file_path: Mapped[str] = mapped_column(String(500), nullable=False, comment="Storage locator")
    file_size: Mapped[int] = mapped_column(Integer, nullable=False, comment="Bytes")
    uploaded_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)


class Assessment(Base, IntegerPrimaryKeyMixin):
    """An assessor's decision on a submission, with the completed checklist."""

    __tablename__ = "assessments"

    submission_id: Mapped[int] = mapped_column(
        ForeignKey("submissions.id"), nullable=False, index=True
    )
    assessor_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    criteria: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    status: Mapped[AssessmentStatus] = mapped_column(str_enum(AssessmentStatus), nullable=False)
    assessed_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)


class Verification(Base, IntegerPrimaryKeyMixin):
    """An internal or external verifier's audit of an assessment."""

    __tablename__ = "verifications"

    assessment_id: Mapped[int] = mapped_column(
        ForeignKey("assessments.id"), nullable=False, index=True
    )
    verifier_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    verifier_type: Mapped[VerifierType] = mapped_column(str_enum(VerifierType), nullable=False)
    status: Mapped[VerificationStatus] = mapped_column(
        str_enum(VerificationStatus), nullable=False
    )
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    verified_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)
