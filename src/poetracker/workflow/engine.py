"""
Workflow Engine

Drives evidence through submission → assessment → verification, plus the
account and assignment administration those steps depend on.

Every operation checks its preconditions before writing, commits its primary
change as one unit, and only then fans out notifications through the
best-effort ``Notifier``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from poetracker.core.errors import ConflictError, ValidationError
from poetracker.core.models import (
    Assessment,
    AssessmentStatus,
    Assignment,
    ClassIntake,
    Course,
    Department,
    Notification,
    NotificationType,
    Role,
    Submission,
    SubmissionFile,
    SubmissionStatus,
    Task,
    Unit,
    User,
    Verification,
    VerificationStatus,
    VerifierType,
)
from poetracker.core.policy import can_assess, can_verify, deny, enforce, self_or_admin
from poetracker.core.security import (
    hash_password,
    revoke_user_tokens,
    verify_password,
)
from poetracker.core.validation import (
    validate_assessment_criteria,
    validate_password,
    validate_title,
    validate_username,
)
from poetracker.workflow.side_effects import Notifier

if TYPE_CHECKING:
    from poetracker.core.schemas import (
        AssessmentCreate,
        AssignmentCreate,
        PasswordChange,
        SubmissionCreate,
        UserCreate,
        UserUpdate,
        VerificationCreate,
    )
    from poetracker.core.store import EntityStore
    from poetracker.storage.files import FileIntake, Upload

logger = logging.getLogger(__name__)

# Any decision other than an explicit approval or rejection sends the work back
SUBMISSION_STATUS_FOR: dict[AssessmentStatus, SubmissionStatus] = {
    AssessmentStatus.APPROVED: SubmissionStatus.APPROVED,
    AssessmentStatus.REJECTED: SubmissionStatus.REJECTED,
}

VERIFIER_TYPE_FOR: dict[Role, VerifierType] = {
    Role.INTERNAL_VERIFIER: VerifierType.INTERNAL,
    Role.EXTERNAL_VERIFIER: VerifierType.EXTERNAL,
}


def submission_status_for(decision: AssessmentStatus) -> SubmissionStatus:
    return SUBMISSION_STATUS_FOR.get(decision, SubmissionStatus.RESUBMIT)


class WorkflowEngine:
    """State transitions of the PoE workflow."""

    def __init__(
        self,
        store: EntityStore,
        notifier: Notifier | None = None,
        intake: FileIntake | None = None,
    ):
        """Initialize workflow engine.

        Args:
            store: Per-request entity store
            notifier: Notification writer (defaults to one over ``store``)
            intake: Evidence file intake, required only for ``submit_evidence``
        """
        self.store = store
        self.notifier = notifier or Notifier(store)
        self.intake = intake

    async def _reload_after_failed_side_effects(self, *records: object) -> None:
        # A rolled-back notification write expires every instance in the session
        if self.notifier.failures:
            for record in records:
                await self.store.db.refresh(record)

    # ========================================================================
    # Submissions
    # ========================================================================

    async def submit_evidence(
        self, trainee: User, data: SubmissionCreate, uploads: Sequence[Upload]
    ) -> tuple[Submission, list[SubmissionFile]]:
        """Create a pending submission with its evidence files.

        All files are checked before anything is written, so a rejected file
        never leaves a submission behind.

        Args:
            trainee: Submitting trainee
            data: Title, task, unit and description
            uploads: Uploaded evidence files

        Returns:
            The submission and its file records

        Raises:
            NotFoundError: Task or unit does not exist
            ValidationError: Blank title, task is not part of the unit, or a file
                is rejected
            UpstreamFailure: Files could not be stored
        """
        if self.intake is None:
            raise RuntimeError("submit_evidence requires a FileIntake")

        title = validate_title(data.title)
        task = await self.store.get(Task, data.task_id)
        unit = await self.store.get(Unit, data.unit_id)
        if task.unit_id != unit.id:
            raise ValidationError(
                f"Task {task.id} does not belong to unit {unit.id}", field="task_id"
            )

        incoming = await self.intake.accept(uploads)
        stored = self.intake.store(incoming)

        try:
            submission = await self.store.create(
                Submission,
                trainee_id=trainee.id,
                task_id=task.id,
                unit_id=unit.id,
                title=title,
                description=data.description,
                status=SubmissionStatus.PENDING,
            )
            files = [
                await self.store.create(
                    SubmissionFile,
                    submission_id=submission.id,
                    file_name=f.file_name,
                    file_type=f.file_type,
                    file_path=f.file_path,
                    file_size=f.file_size,
                )
                for f in stored
            ]
            await self.store.commit()
        except Exception:
            await self.store.rollback()
            self.intake.discard(stored)
            raise

        logger.info(
            f"Trainee {trainee.id} submitted evidence {submission.id} "
            f"for unit {unit.id} task {task.id} ({len(files)} files)"
        )

        # Notify whichever assessors cover this trainee for the unit (possibly none)
        assignments = await self.store.assignments_covering(trainee, unit_id=unit.id)
        assessor_ids = list(dict.fromkeys(a.assessor_id for a in assignments))
        await self.notifier.notify_all(
            assessor_ids,
            "New Submission Received",
            f"A new submission for {title} has been received "
            "and requires your review",
            NotificationType.SUBMISSION,
            linked_item_id=submission.id,
        )

        await self._reload_after_failed_side_effects(submission, *files, trainee)
        return submission, files

    # ========================================================================
    # Assessments
    # ========================================================================

    async def record_assessment(self, assessor: User, data: AssessmentCreate) -> Assessment:
        """Record an assessor's decision and move the submission's status with it.

        Raises:
            NotFoundError: Submission does not exist
            Forbidden: Caller is not assigned to the trainee for this unit
            ValidationError: Checklist labels not in the task's criteria
        """
        submission = await self.store.get(Submission, data.submission_id)
        trainee = await self.store.get(User, submission.trainee_id)
        assignments = await self.store.assignments_covering(trainee, unit_id=submission.unit_id)
        enforce(can_assess(assessor, submission, trainee, assignments))

        task = await self.store.get(Task, submission.task_id)
        criteria = validate_assessment_criteria(data.criteria, task.criteria)

        assessment = await self.store.create(
            Assessment,
            submission_id=submission.id,
            assessor_id=assessor.id,
            feedback=data.feedback,
            criteria=criteria,
            status=data.status,
        )
        submission.status = submission_status_for(data.status)
        await self.store.commit()

        logger.info(
            f"Assessor {assessor.id} assessed submission {submission.id}: {data.status} "
            f"(submission now {submission.status})"
        )

        # Read everything the notifications need before the first write
        assessment_id = assessment.id
        trainee_id = submission.trainee_id
        title = submission.title
        verifier_ids = []
        if data.status == AssessmentStatus.APPROVED:
            internal_verifiers = await self.store.users_by_role(Role.INTERNAL_VERIFIER)
            verifier_ids = [u.id for u in internal_verifiers]

        await self.notifier.notify(
            trainee_id,
            "Assessment Feedback Available",
            f"Your submission for {title} has been assessed",
            NotificationType.ASSESSMENT,
            linked_item_id=assessment_id,
        )
        await self.notifier.notify_all(
            verifier_ids,
            "Verification Required",
            "A new assessment needs verification",
            NotificationType.VERIFICATION,
            linked_item_id=assessment_id,
        )

        await self._reload_after_failed_side_effects(assessment, submission, assessor)
        return assessment

    # ========================================================================
    # Verifications
    # ========================================================================

    async def record_verification(self, verifier: User, data: VerificationCreate) -> Verification:
        """Record a verifier's audit of an assessment.

        The verifier type follows the caller's role. A verifier acts at most
        once per assessment.

        Raises:
            Forbidden: Caller is not a verifier
            NotFoundError: Assessment does not exist
            ConflictError: Caller already verified this assessment
        """
        enforce(can_verify(verifier))
        assessment = await self.store.get(Assessment, data.assessment_id)

        already_verified = await self.store.exists(
            Verification,
            Verification.assessment_id == assessment.id,
            Verification.verifier_id == verifier.id,
        )
        if already_verified:
            raise ConflictError("You have already verified this assessment")

        verifier_type = VERIFIER_TYPE_FOR[verifier.role]
        verification = await self.store.create(
            Verification,
            assessment_id=assessment.id,
            verifier_id=verifier.id,
            verifier_type=verifier_type,
            status=data.status,
            comments=data.comments,
        )
        await self.store.commit()

        logger.info(
            f"{verifier_type.capitalize()} verifier {verifier.id} verified assessment "
            f"{assessment.id}: {data.status}"
        )

        # Read everything the notifications need before the first write
        verification_id = verification.id
        assessor_id = assessment.assessor_id
        trainee_id = None
        if data.status == VerificationStatus.REJECTED:
            submission = await self.store.get(Submission, assessment.submission_id)
            trainee_id = submission.trainee_id
        external_ids = []
        if (
            data.status == VerificationStatus.CONFIRMED
            and verifier_type == VerifierType.INTERNAL
        ):
            external_verifiers = await self.store.users_by_role(Role.EXTERNAL_VERIFIER)
            external_ids = [u.id for u in external_verifiers]

        await self.notifier.notify(
            assessor_id,
            "Verification Completed",
            "Your assessment has been verified",
            NotificationType.VERIFICATION,
            linked_item_id=verification_id,
        )
        if trainee_id is not None:
            await self.notifier.notify(
                trainee_id,
                "Assessment Verification Issue",
                "There was an issue with your assessment verification",
                NotificationType.VERIFICATION,
                linked_item_id=verification_id,
            )
        await self.notifier.notify_all(
            external_ids,
            "External Verification Required",
            "An assessment is ready for external verification",
            NotificationType.VERIFICATION,
            linked_item_id=verification_id,
        )

        await self._reload_after_failed_side_effects(verification, verifier)
        return verification

    # ========================================================================
    # Assignments
    # ========================================================================

    async def create_assignment(self, admin: User, data: AssignmentCreate) -> Assignment:
        """Give an assessor jurisdiction over an intake (or one trainee) for a unit.

        Raises:
            NotFoundError: Intake, unit, assessor or trainee does not exist
            ValidationError: Assessor/trainee has the wrong role, or the
                trainee is not enrolled in the intake
        """
        await self.store.get(ClassIntake, data.class_intake_id)
        unit = await self.store.get(Unit, data.unit_id)

        assessor = await self.store.get(User, data.assessor_id)
        if assessor.role != Role.ASSESSOR:
            raise ValidationError(f"User {assessor.id} is not an assessor", field="assessor_id")

        if data.trainee_id is not None:
            trainee = await self.store.get(User, data.trainee_id)
            if trainee.role != Role.TRAINEE:
                raise ValidationError(f"User {trainee.id} is not a trainee", field="trainee_id")
            if trainee.class_intake_id != data.class_intake_id:
                raise ValidationError(
                    f"Trainee {trainee.id} is not enrolled in class intake "
                    f"{data.class_intake_id}",
                    field="trainee_id",
                )

        assignment = await self.store.create(
            Assignment,
            class_intake_id=data.class_intake_id,
            unit_id=unit.id,
            assessor_id=assessor.id,
            trainee_id=data.trainee_id,
        )
        await self.store.commit()
        logger.info(
            f"Admin {admin.id} assigned assessor {assessor.id} to unit {unit.id} "
            f"(assignment {assignment.id})"
        )

        await self.notifier.notify(
            assessor.id,
            "New Trainee Assigned",
            f"You have been assigned to a new trainee for Unit {unit.id}",
            NotificationType.SYSTEM,
            linked_item_id=assignment.id,
        )

        await self._reload_after_failed_side_effects(assignment, admin)
        return assignment

    # ========================================================================
    # Notifications
    # ========================================================================

    async def mark_notification_read(self, user: User, notification_id: int) -> Notification:
        """Mark one of the user's notifications as read.

        Raises:
            NotFoundError: Notification does not exist
            Forbidden: Notification belongs to another user
        """
        notification = await self.store.get(Notification, notification_id)
        if notification.user_id != user.id:
            enforce(deny("You can only update your own notifications"))
        notification.is_read = True
        await self.store.commit()
        return notification

    async def mark_all_notifications_read(self, user: User) -> int:
        updated = await self.store.mark_all_read(user.id)
        await self.store.commit()
        return updated

    # ========================================================================
    # Accounts
    # ========================================================================

    async def register_user(self, data: UserCreate) -> User:
        """Create an account (admin only).

        Raises:
            ValidationError: Bad username or password
            ConflictError: Username already taken
            NotFoundError: Referenced department/course/intake does not exist
        """
        username = validate_username(data.username)
        password = validate_password(data.password, username)

        if await self.store.user_by_username(username) is not None:
            raise ConflictError(f"Username {username!r} already exists")

        if data.department_id is not None:
            await self.store.get(Department, data.department_id)
        if data.course_id is not None:
            await self.store.get(Course, data.course_id)
        if data.class_intake_id is not None:
            await self.store.get(ClassIntake, data.class_intake_id)

        user = await self.store.create(
            User,
            username=username,
            password_hash=hash_password(password),
            full_name=data.full_name.strip(),
            email=data.email.strip(),
            role=data.role,
            department_id=data.department_id,
            course_id=data.course_id,
            class_intake_id=data.class_intake_id,
            is_active=data.is_active,
        )
        await self.store.commit()
        logger.info(f"Created {user.role} account {user.id} ({username})")
        return user

    async def deactivate_user(self, admin: User, user_id: int) -> User:
        """Flip the account's active flag off and end its sessions.

        Raises:
            NotFoundError: User does not exist
            ConflictError: Admin tried to deactivate their own account
        """
        user = await self.store.get(User, user_id)
        if user.id == admin.id:
            raise ConflictError("You cannot deactivate your own account")

        user.is_active = False
        await revoke_user_tokens(self.store, user.id)
        await self.store.commit()
        logger.info(f"Admin {admin.id} deactivated user {user.id}")
        return user

    async def update_profile(self, actor: User, user_id: int, data: UserUpdate) -> User:
        """Change display name and/or contact address. Role never changes."""
        enforce(self_or_admin(actor, user_id))
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        user = await self.store.update(User, user_id, **changes)
        await self.store.commit()
        return user

    async def change_password(self, actor: User, user_id: int, data: PasswordChange) -> User:
        """Replace the caller's own password after checking the current one.

        Raises:
            Forbidden: Changing someone else's password
            ValidationError: Current password wrong, or new password unacceptable
        """
        if actor.id != user_id:
            enforce(deny("You can only change your own password"))
        if not verify_password(data.current_password, actor.password_hash):
            raise ValidationError("Current password is incorrect", field="current_password")
        new_password = validate_password(data.new_password, actor.username)

        actor.password_hash = hash_password(new_password)
        await self.store.commit()
        logger.info(f"User {actor.id} changed their password")
        return actor
