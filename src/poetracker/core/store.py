"""
Entity Store

Keyed collections for every domain entity, backed by an AsyncSession. Each
request gets its own store handle; nothing here is a module-level singleton.

Listings come back in insertion order unless the query says otherwise
(notifications and activity logs are newest first).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, TypeVar

from sqlalchemy import ColumnElement, desc, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from poetracker.core.errors import NotFoundError
from poetracker.core.models import (
    ActivityLog,
    Assessment,
    Assignment,
    Base,
    ClassIntake,
    Course,
    Module,
    Notification,
    Role,
    Submission,
    SubmissionFile,
    Task,
    Unit,
    User,
    Verification,
)

ModelT = TypeVar("ModelT", bound=Base)


class EntityStore:
    """create / get / update / list_by over the relational store."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ------------------------------------------------------------------
    # Generic collection operations
    # ------------------------------------------------------------------

    async def create(self, model: type[ModelT], **payload: Any) -> ModelT:
        """Insert a record and flush so its id and timestamps are assigned."""
        record = model(**payload)
        self.db.add(record)
        await self.db.flush()
        return record

    async def find(self, model: type[ModelT], record_id: int) -> ModelT | None:
        return await self.db.get(model, record_id)

    async def get(self, model: type[ModelT], record_id: int) -> ModelT:
        record = await self.db.get(model, record_id)
        if record is None:
            raise NotFoundError(f"{model.__name__} not found with ID: {record_id}")
        return record

    async def update(self, model: type[ModelT], record_id: int, **changes: Any) -> ModelT:
        """Merge ``changes`` into the record. Last write wins."""
        record = await self.get(model, record_id)
        for field, value in changes.items():
            setattr(record, field, value)
        await self.db.flush()
        return record

    async def list_by(
        self,
        model: type[ModelT],
        *criteria: ColumnElement[bool],
        order_by: Sequence[Any] | None = None,
    ) -> list[ModelT]:
        stmt = select(model).where(*criteria)
        if order_by:
            stmt = stmt.order_by(*order_by)
        else:
            stmt = stmt.order_by(model.id)  # type: ignore[attr-defined]
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def first_by(self, model: type[ModelT], *criteria: ColumnElement[bool]) -> ModelT | None:
        records = await self.list_by(model, *criteria)
        return records[0] if records else None

    async def exists(self, model: type[ModelT], *criteria: ColumnElement[bool]) -> bool:
        stmt = select(model.id).where(*criteria).limit(1)  # type: ignore[attr-defined]
        result = await self.db.execute(stmt)
        return result.first() is not None

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def user_by_username(self, username: str) -> User | None:
        return await self.first_by(User, User.username == username)

    async def users_by_role(self, role: Role, active_only: bool = False) -> list[User]:
        criteria = [User.role == role]
        if active_only:
            criteria.append(User.is_active.is_(True))
        return await self.list_by(User, *criteria)

    # ------------------------------------------------------------------
    # Organisational hierarchy
    # ------------------------------------------------------------------

    async def courses_by_department(self, department_id: int) -> list[Course]:
        return await self.list_by(Course, Course.department_id == department_id)

    async def courses_by_study_level(self, study_level_id: int) -> list[Course]:
        return await self.list_by(Course, Course.study_level_id == study_level_id)

    async def class_intakes_by_course(self, course_id: int) -> list[ClassIntake]:
        return await self.list_by(ClassIntake, ClassIntake.course_id == course_id)

    async def modules_by_course(self, course_id: int) -> list[Module]:
        return await self.list_by(Module, Module.course_id == course_id)

    async def units_by_course(self, course_id: int) -> list[Unit]:
        return await self.list_by(Unit, Unit.course_id == course_id)

    async def units_by_module(self, module_id: int) -> list[Unit]:
        return await self.list_by(Unit, Unit.module_id == module_id)

    async def tasks_by_unit(self, unit_id: int) -> list[Task]:
        return await self.list_by(Task, Task.unit_id == unit_id)

    # ------------------------------------------------------------------
    # Assignments
    # ------------------------------------------------------------------

    async def assignments_by_assessor(self, assessor_id: int) -> list[Assignment]:
        return await self.list_by(Assignment, Assignment.assessor_id == assessor_id)

    async def assignments_covering(
        self, trainee: User, unit_id: int | None = None
    ) -> list[Assignment]:
        """Assignments that give some assessor jurisdiction over ``trainee``."""
        coverage = Assignment.trainee_id == trainee.id
        if trainee.class_intake_id is not None:
            coverage = or_(
                coverage,
                (Assignment.trainee_id.is_(None))
                & (Assignment.class_intake_id == trainee.class_intake_id),
            )
        criteria = [coverage]
        if unit_id is not None:
            criteria.append(Assignment.unit_id == unit_id)
        return await self.list_by(Assignment, *criteria)

    # ------------------------------------------------------------------
    # Submissions, assessments, verifications
    # ------------------------------------------------------------------

    async def submissions_by_trainee(self, trainee_id: int) -> list[Submission]:
        return await self.list_by(Submission, Submission.trainee_id == trainee_id)

    async def submissions_for_assessor(self, assessor_id: int) -> list[Submission]:
        """Submissions whose trainee and unit fall under one of the assessor's assignments."""
        assignments = await self.assignments_by_assessor(assessor_id)
        if not assignments:
            return []

        clauses = []
        for assignment in assignments:
            if assignment.trainee_id is not None:
                trainee_clause = Submission.trainee_id == assignment.trainee_id
            else:
                intake_trainees = select(User.id).where(
                    User.class_intake_id == assignment.class_intake_id
                )
                trainee_clause = Submission.trainee_id.in_(intake_trainees)
            clauses.append(trainee_clause & (Submission.unit_id == assignment.unit_id))
        return await self.list_by(Submission, or_(*clauses))

    async def files_by_submission(self, submission_id: int) -> list[SubmissionFile]:
        return await self.list_by(SubmissionFile, SubmissionFile.submission_id == submission_id)

    async def assessments_by_submission(self, submission_id: int) -> list[Assessment]:
        return await self.list_by(Assessment, Assessment.submission_id == submission_id)

    async def verifications_by_assessment(self, assessment_id: int) -> list[Verification]:
        return await self.list_by(Verification, Verification.assessment_id == assessment_id)

    async def verifications_by_verifier(self, verifier_id: int) -> list[Verification]:
        return await self.list_by(Verification, Verification.verifier_id == verifier_id)

    # ------------------------------------------------------------------
    # Notifications and activity logs (newest first)
    # ------------------------------------------------------------------

    async def notifications_for_user(self, user_id: int) -> list[Notification]:
        return await self.list_by(
            Notification,
            Notification.user_id == user_id,
            order_by=[desc(Notification.created_at), desc(Notification.id)],
        )

    async def mark_all_read(self, user_id: int) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
        )
        return result.rowcount or 0

    async def activity_logs(self) -> list[ActivityLog]:
        return await self.list_by(
            ActivityLog, order_by=[desc(ActivityLog.timestamp), desc(ActivityLog.id)]
        )

    async def activity_logs_for_user(self, user_id: int) -> list[ActivityLog]:
        return await self.list_by(
            ActivityLog,
            ActivityLog.user_id == user_id,
            order_by=[desc(ActivityLog.timestamp), desc(ActivityLog.id)],
        )
