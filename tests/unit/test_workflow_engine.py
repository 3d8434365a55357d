"""
Unit Tests for the Workflow Engine

Submission → assessment → verification transitions, their preconditions and
the notifications each one fans out.
"""

import io

import pytest

from poetracker.core.errors import ConflictError, FileRejectedError, Forbidden, ValidationError
from poetracker.core.models import (
    Assessment,
    AssessmentStatus,
    Assignment,
    Notification,
    NotificationType,
    Role,
    Submission,
    SubmissionFile,
    SubmissionStatus,
    Task,
    Unit,
    VerificationStatus,
    VerifierType,
)
from poetracker.core.schemas import (
    AssessmentCreate,
    AssignmentCreate,
    PasswordChange,
    SubmissionCreate,
    UserCreate,
    UserUpdate,
    VerificationCreate,
)
from poetracker.core.security import verify_password
from poetracker.storage.files import FileIntake
from poetracker.workflow import WorkflowEngine, submission_status_for


class FakeUpload:
    def __init__(self, filename: str, content_type: str, content: bytes = b"%PDF-1.4"):
        self.filename = filename
        self.content_type = content_type
        self._buffer = io.BytesIO(content)

    async def read(self, size: int = -1) -> bytes:
        return self._buffer.read(size)


@pytest.fixture
def engine(store) -> WorkflowEngine:
    return WorkflowEngine(store, intake=FileIntake())


@pytest.fixture
async def intake_assignment(store, hierarchy, assessor) -> Assignment:
    assignment = await store.create(
        Assignment,
        class_intake_id=hierarchy.intake.id,
        unit_id=hierarchy.unit.id,
        assessor_id=assessor.id,
    )
    await store.commit()
    return assignment


@pytest.fixture
def break_notifications(store, monkeypatch):
    """Call to make every later notification write fail; other writes go through."""
    original_create = store.create

    async def failing_create(model, **payload):
        if model is Notification:
            raise RuntimeError("inbox unavailable")
        return await original_create(model, **payload)

    def install() -> None:
        monkeypatch.setattr(store, "create", failing_create)

    return install


async def submit(engine, trainee, hierarchy, uploads=()) -> Submission:
    data = SubmissionCreate(
        title="ER Diagram", task_id=hierarchy.task.id, unit_id=hierarchy.unit.id
    )
    submission, _ = await engine.submit_evidence(trainee, data, list(uploads))
    return submission


async def titles_for(store, user_id: int) -> list[str]:
    return [n.title for n in await store.notifications_for_user(user_id)]


class TestSubmissionStatusMapping:
    @pytest.mark.parametrize(
        ("decision", "expected"),
        [
            (AssessmentStatus.APPROVED, SubmissionStatus.APPROVED),
            (AssessmentStatus.REJECTED, SubmissionStatus.REJECTED),
            (AssessmentStatus.RESUBMIT, SubmissionStatus.RESUBMIT),
        ],
    )
    def test_mapping(self, decision, expected):
        assert submission_status_for(decision) == expected


class TestSubmitEvidence:
    async def test_creates_pending_submission_with_files(self, engine, store, trainee, hierarchy):
        data = SubmissionCreate(
            title="  ER Diagram ", task_id=hierarchy.task.id, unit_id=hierarchy.unit.id
        )
        uploads = [FakeUpload("erd.pdf", "application/pdf"), FakeUpload("photo.png", "image/png")]

        submission, files = await engine.submit_evidence(trainee, data, uploads)

        assert submission.status == SubmissionStatus.PENDING
        assert submission.title == "ER Diagram"
        assert submission.trainee_id == trainee.id
        assert [f.file_name for f in files] == ["erd.pdf", "photo.png"]
        assert all(f.submission_id == submission.id for f in files)

    async def test_without_assignment_nobody_is_notified(self, engine, store, trainee, hierarchy):
        await submit(engine, trainee, hierarchy)

        assert await store.list_by(Notification) == []

    async def test_covering_assessor_notified_once(
        self, engine, store, trainee, hierarchy, assessor, intake_assignment
    ):
        # A second, trainee-specific assignment for the same assessor and unit
        await store.create(
            Assignment,
            class_intake_id=hierarchy.intake.id,
            unit_id=hierarchy.unit.id,
            assessor_id=assessor.id,
            trainee_id=trainee.id,
        )
        await store.commit()

        submission = await submit(engine, trainee, hierarchy)

        notifications = await store.notifications_for_user(assessor.id)
        assert len(notifications) == 1
        assert notifications[0].title == "New Submission Received"
        assert notifications[0].type == NotificationType.SUBMISSION
        assert notifications[0].linked_item_id == submission.id

    async def test_failed_notifications_keep_submission(
        self, engine, store, make_user, trainee, hierarchy, intake_assignment, break_notifications
    ):
        second = await make_user(Role.ASSESSOR)
        await store.create(
            Assignment,
            class_intake_id=hierarchy.intake.id,
            unit_id=hierarchy.unit.id,
            assessor_id=second.id,
        )
        await store.commit()
        break_notifications()

        submission, files = await engine.submit_evidence(
            trainee,
            SubmissionCreate(
                title="ER Diagram", task_id=hierarchy.task.id, unit_id=hierarchy.unit.id
            ),
            [FakeUpload("erd.pdf", "application/pdf")],
        )

        assert engine.notifier.failures == 2
        assert submission.status == SubmissionStatus.PENDING
        assert [f.submission_id for f in files] == [submission.id]
        assert [s.id for s in await store.submissions_by_trainee(trainee.id)] == [submission.id]

    async def test_task_outside_unit_rejected(self, engine, store, trainee, hierarchy):
        other_unit = await store.create(
            Unit, name="Networking", code="NW101", course_id=hierarchy.course.id
        )
        other_task = await store.create(Task, unit_id=other_unit.id, name="Subnetting")
        await store.commit()
        data = SubmissionCreate(title="x", task_id=other_task.id, unit_id=hierarchy.unit.id)

        with pytest.raises(ValidationError) as exc_info:
            await engine.submit_evidence(trainee, data, [])

        assert exc_info.value.field == "task_id"

    async def test_rejected_file_leaves_nothing_behind(
        self, engine, store, trainee, hierarchy, storage_dirs
    ):
        upload_dir, _ = storage_dirs
        uploads = [FakeUpload("erd.pdf", "application/pdf"), FakeUpload("run.sh", "text/x-sh")]

        with pytest.raises(FileRejectedError):
            await submit(engine, trainee, hierarchy, uploads)

        assert await store.list_by(Submission) == []
        assert await store.list_by(SubmissionFile) == []
        assert not upload_dir.exists() or list(upload_dir.iterdir()) == []


class TestRecordAssessment:
    async def test_unassigned_assessor_forbidden(self, engine, store, trainee, hierarchy, assessor):
        submission = await submit(engine, trainee, hierarchy)

        with pytest.raises(Forbidden):
            await engine.record_assessment(
                assessor,
                AssessmentCreate(submission_id=submission.id, status=AssessmentStatus.APPROVED),
            )

        assert await store.list_by(Assessment) == []
        assert (await store.get(Submission, submission.id)).status == SubmissionStatus.PENDING

    async def test_status_mirrors_latest_assessment(
        self, engine, store, trainee, hierarchy, assessor, intake_assignment
    ):
        submission = await submit(engine, trainee, hierarchy)

        for decision in (AssessmentStatus.RESUBMIT, AssessmentStatus.APPROVED):
            await engine.record_assessment(
                assessor, AssessmentCreate(submission_id=submission.id, status=decision)
            )
            current = await store.get(Submission, submission.id)
            assert current.status == submission_status_for(decision)

        # Permissive: an approved submission can still be re-assessed
        await engine.record_assessment(
            assessor,
            AssessmentCreate(submission_id=submission.id, status=AssessmentStatus.REJECTED),
        )
        assert (await store.get(Submission, submission.id)).status == SubmissionStatus.REJECTED
        assert len(await store.assessments_by_submission(submission.id)) == 3

    async def test_approval_notifies_trainee_and_every_internal_verifier(
        self, engine, store, make_user, trainee, hierarchy, assessor, intake_assignment
    ):
        verifiers = [await make_user(Role.INTERNAL_VERIFIER) for _ in range(2)]
        external = await make_user(Role.EXTERNAL_VERIFIER)
        submission = await submit(engine, trainee, hierarchy)

        assessment = await engine.record_assessment(
            assessor,
            AssessmentCreate(
                submission_id=submission.id,
                status=AssessmentStatus.APPROVED,
                feedback="Well done",
                criteria={"Entities correctly identified": True},
            ),
        )

        assert await titles_for(store, trainee.id) == ["Assessment Feedback Available"]
        for verifier in verifiers:
            notifications = await store.notifications_for_user(verifier.id)
            assert [n.title for n in notifications] == ["Verification Required"]
            assert notifications[0].linked_item_id == assessment.id
        assert await titles_for(store, external.id) == []

    async def test_resubmit_does_not_notify_verifiers(
        self, engine, store, make_user, trainee, hierarchy, assessor, intake_assignment
    ):
        verifier = await make_user(Role.INTERNAL_VERIFIER)
        submission = await submit(engine, trainee, hierarchy)

        await engine.record_assessment(
            assessor,
            AssessmentCreate(submission_id=submission.id, status=AssessmentStatus.RESUBMIT),
        )

        assert await titles_for(store, verifier.id) == []

    async def test_unknown_criterion_rejected(
        self, engine, store, trainee, hierarchy, assessor, intake_assignment
    ):
        submission = await submit(engine, trainee, hierarchy)

        with pytest.raises(ValidationError):
            await engine.record_assessment(
                assessor,
                AssessmentCreate(
                    submission_id=submission.id,
                    status=AssessmentStatus.APPROVED,
                    criteria={"Not on the checklist": True},
                ),
            )

        assert await store.list_by(Assessment) == []

    async def test_notification_failure_keeps_assessment(
        self, engine, store, trainee, hierarchy, assessor, intake_assignment, break_notifications
    ):
        submission = await submit(engine, trainee, hierarchy)
        submission_id = submission.id
        break_notifications()

        assessment = await engine.record_assessment(
            assessor,
            AssessmentCreate(submission_id=submission_id, status=AssessmentStatus.APPROVED),
        )

        assert engine.notifier.failures == 1
        assert assessment.status == AssessmentStatus.APPROVED
        stored = await store.get(Submission, submission_id)
        assert stored.status == SubmissionStatus.APPROVED

    async def test_failed_fan_out_to_several_verifiers_keeps_assessment(
        self,
        engine,
        store,
        make_user,
        trainee,
        hierarchy,
        assessor,
        intake_assignment,
        break_notifications,
    ):
        for _ in range(2):
            await make_user(Role.INTERNAL_VERIFIER)
        submission = await submit(engine, trainee, hierarchy)
        submission_id = submission.id
        break_notifications()

        assessment = await engine.record_assessment(
            assessor,
            AssessmentCreate(submission_id=submission_id, status=AssessmentStatus.APPROVED),
        )

        # Trainee plus both internal verifiers
        assert engine.notifier.failures == 3
        assert assessment.submission_id == submission_id
        assert [a.id for a in await store.assessments_by_submission(submission_id)] == [
            assessment.id
        ]


class TestRecordVerification:
    @pytest.fixture
    async def approved_assessment(self, engine, trainee, hierarchy, assessor, intake_assignment):
        submission = await submit(engine, trainee, hierarchy)
        return await engine.record_assessment(
            assessor,
            AssessmentCreate(submission_id=submission.id, status=AssessmentStatus.APPROVED),
        )

    async def test_verifier_type_follows_role(
        self, engine, internal_verifier, external_verifier, approved_assessment
    ):
        data = VerificationCreate(
            assessment_id=approved_assessment.id, status=VerificationStatus.FLAGGED
        )

        internal = await engine.record_verification(internal_verifier, data)
        external = await engine.record_verification(external_verifier, data)

        assert internal.verifier_type == VerifierType.INTERNAL
        assert external.verifier_type == VerifierType.EXTERNAL

    async def test_second_verification_by_same_verifier_conflicts(
        self, engine, store, internal_verifier, approved_assessment
    ):
        data = VerificationCreate(
            assessment_id=approved_assessment.id, status=VerificationStatus.CONFIRMED
        )
        await engine.record_verification(internal_verifier, data)

        with pytest.raises(ConflictError):
            await engine.record_verification(internal_verifier, data)

        assert len(await store.verifications_by_assessment(approved_assessment.id)) == 1

    async def test_non_verifier_forbidden(self, engine, assessor, approved_assessment):
        with pytest.raises(Forbidden):
            await engine.record_verification(
                assessor,
                VerificationCreate(
                    assessment_id=approved_assessment.id, status=VerificationStatus.CONFIRMED
                ),
            )

    async def test_internal_confirmation_notifies_assessor_and_external_verifiers(
        self, engine, store, make_user, assessor, internal_verifier, approved_assessment
    ):
        externals = [await make_user(Role.EXTERNAL_VERIFIER) for _ in range(2)]

        await engine.record_verification(
            internal_verifier,
            VerificationCreate(
                assessment_id=approved_assessment.id, status=VerificationStatus.CONFIRMED
            ),
        )

        assert await titles_for(store, assessor.id) == [
            "Verification Completed",
            "New Submission Received",
        ]
        for external in externals:
            assert await titles_for(store, external.id) == ["External Verification Required"]

    async def test_external_confirmation_does_not_fan_out(
        self, engine, store, make_user, external_verifier, approved_assessment
    ):
        other_external = await make_user(Role.EXTERNAL_VERIFIER)

        await engine.record_verification(
            external_verifier,
            VerificationCreate(
                assessment_id=approved_assessment.id, status=VerificationStatus.CONFIRMED
            ),
        )

        assert await titles_for(store, other_external.id) == []

    async def test_rejection_notifies_trainee(
        self, engine, store, trainee, internal_verifier, approved_assessment
    ):
        await engine.record_verification(
            internal_verifier,
            VerificationCreate(
                assessment_id=approved_assessment.id,
                status=VerificationStatus.REJECTED,
                comments="Criteria not evidenced",
            ),
        )

        assert "Assessment Verification Issue" in await titles_for(store, trainee.id)

    async def test_failed_notifications_keep_rejection(
        self, engine, store, internal_verifier, approved_assessment, break_notifications
    ):
        assessment_id = approved_assessment.id
        break_notifications()

        verification = await engine.record_verification(
            internal_verifier,
            VerificationCreate(assessment_id=assessment_id, status=VerificationStatus.REJECTED),
        )

        # Assessor and trainee
        assert engine.notifier.failures == 2
        assert verification.status == VerificationStatus.REJECTED
        assert len(await store.verifications_by_assessment(assessment_id)) == 1

    async def test_failed_fan_out_to_external_verifiers_keeps_confirmation(
        self,
        engine,
        store,
        make_user,
        internal_verifier,
        approved_assessment,
        break_notifications,
    ):
        for _ in range(2):
            await make_user(Role.EXTERNAL_VERIFIER)
        assessment_id = approved_assessment.id
        break_notifications()

        verification = await engine.record_verification(
            internal_verifier,
            VerificationCreate(assessment_id=assessment_id, status=VerificationStatus.CONFIRMED),
        )

        assert engine.notifier.failures == 3
        assert verification.verifier_type == VerifierType.INTERNAL


class TestAdministration:
    async def test_assignment_requires_assessor_role(self, engine, admin, trainee, hierarchy):
        with pytest.raises(ValidationError) as exc_info:
            await engine.create_assignment(
                admin,
                AssignmentCreate(
                    class_intake_id=hierarchy.intake.id,
                    unit_id=hierarchy.unit.id,
                    assessor_id=trainee.id,
                ),
            )
        assert exc_info.value.field == "assessor_id"

    async def test_trainee_assignment_requires_same_intake(
        self, engine, store, make_user, admin, assessor, hierarchy
    ):
        elsewhere = await make_user(Role.TRAINEE)

        with pytest.raises(ValidationError) as exc_info:
            await engine.create_assignment(
                admin,
                AssignmentCreate(
                    class_intake_id=hierarchy.intake.id,
                    unit_id=hierarchy.unit.id,
                    assessor_id=assessor.id,
                    trainee_id=elsewhere.id,
                ),
            )
        assert exc_info.value.field == "trainee_id"

    async def test_assignment_notifies_assessor(self, engine, store, admin, assessor, hierarchy):
        assignment = await engine.create_assignment(
            admin,
            AssignmentCreate(
                class_intake_id=hierarchy.intake.id,
                unit_id=hierarchy.unit.id,
                assessor_id=assessor.id,
            ),
        )

        notifications = await store.notifications_for_user(assessor.id)
        assert [n.title for n in notifications] == ["New Trainee Assigned"]
        assert notifications[0].type == NotificationType.SYSTEM
        assert notifications[0].linked_item_id == assignment.id

    async def test_register_user_rejects_duplicate_username(self, engine, admin):
        data = UserCreate(
            username="admin",
            password="secret123",
            full_name="Another Admin",
            email="other@example.com",
            role=Role.ADMIN,
        )
        with pytest.raises(ConflictError):
            await engine.register_user(data)

    async def test_register_user_hashes_password(self, engine):
        user = await engine.register_user(
            UserCreate(
                username="new_trainee",
                password="secret123",
                full_name="New Trainee",
                email="new@example.com",
                role=Role.TRAINEE,
            )
        )

        assert user.password_hash != "secret123"
        assert verify_password("secret123", user.password_hash)

    async def test_admin_cannot_deactivate_self(self, engine, admin):
        with pytest.raises(ConflictError):
            await engine.deactivate_user(admin, admin.id)

    async def test_deactivate_user(self, engine, admin, trainee):
        user = await engine.deactivate_user(admin, trainee.id)
        assert user.is_active is False

    async def test_update_profile_of_someone_else_forbidden(self, engine, trainee, assessor):
        with pytest.raises(Forbidden):
            await engine.update_profile(assessor, trainee.id, UserUpdate(full_name="Hacked"))

    async def test_update_profile_ignores_omitted_fields(self, engine, trainee):
        email = trainee.email
        user = await engine.update_profile(trainee, trainee.id, UserUpdate(full_name="Renamed"))

        assert user.full_name == "Renamed"
        assert user.email == email

    async def test_change_password_checks_current(self, engine, trainee):
        with pytest.raises(ValidationError) as exc_info:
            await engine.change_password(
                trainee,
                trainee.id,
                PasswordChange(current_password="wrong", new_password="brand-new-1"),
            )
        assert exc_info.value.field == "current_password"

        await engine.change_password(
            trainee,
            trainee.id,
            PasswordChange(current_password="secret123", new_password="brand-new-1"),
        )
        assert verify_password("brand-new-1", trainee.password_hash)

    async def test_mark_someone_elses_notification_forbidden(
        self, engine, store, trainee, assessor
    ):
        notification = await store.create(
            Notification,
            user_id=assessor.id,
            title="t",
            message="m",
            type=NotificationType.SYSTEM,
        )
        await store.commit()

        with pytest.raises(Forbidden):
            await engine.mark_notification_read(trainee, notification.id)
