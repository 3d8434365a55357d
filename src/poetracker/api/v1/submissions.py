"""
Submissions API

Trainees upload evidence (multipart form with files); assessors, verifiers and
admins review it.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from poetracker.api.deps import (
    get_current_user,
    get_recorder,
    get_store,
    get_workflow,
    require_roles,
)
from poetracker.core.models import Role, Submission, User
from poetracker.core.policy import can_view_submission, enforce
from poetracker.core.schemas import (
    AssessmentSchema,
    SubmissionCreate,
    SubmissionCreated,
    SubmissionDetail,
    SubmissionFileSchema,
    SubmissionSchema,
)
from poetracker.core.store import EntityStore
from poetracker.workflow import ActivityRecorder, WorkflowEngine

router = APIRouter(prefix="/submissions", tags=["Submissions"])


@router.get("", response_model=list[SubmissionSchema])
async def list_submissions(
    current_user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
) -> list[Submission]:
    """Submissions visible to the caller.

    Trainees see their own, assessors those of trainees they are assigned to,
    verifiers and admins everything.
    """
    if current_user.role == Role.TRAINEE:
        return await store.submissions_by_trainee(current_user.id)
    if current_user.role == Role.ASSESSOR:
        return await store.submissions_for_assessor(current_user.id)
    return await store.list_by(Submission)


@router.get("/{submission_id}", response_model=SubmissionDetail)
async def get_submission(
    submission_id: int,
    current_user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
) -> SubmissionDetail:
    """A submission with its files and every assessment, oldest first."""
    submission = await store.get(Submission, submission_id)

    trainee = await store.get(User, submission.trainee_id)
    assignments = []
    if current_user.role == Role.ASSESSOR:
        assignments = await store.assignments_covering(trainee, unit_id=submission.unit_id)
    enforce(can_view_submission(current_user, submission, trainee, assignments))

    files = await store.files_by_submission(submission.id)
    assessments = await store.assessments_by_submission(submission.id)
    return SubmissionDetail(
        submission=SubmissionSchema.model_validate(submission),
        files=[SubmissionFileSchema.model_validate(f) for f in files],
        assessments=[AssessmentSchema.model_validate(a) for a in assessments],
    )


@router.post("", response_model=SubmissionCreated, status_code=status.HTTP_201_CREATED)
async def create_submission(
    title: str = Form(..., min_length=1, max_length=255),
    task_id: int = Form(...),
    unit_id: int = Form(...),
    description: str | None = Form(None),
    files: list[UploadFile] | None = File(None, description="Evidence files, 20 MiB each"),
    trainee: User = Depends(require_roles(Role.TRAINEE)),
    workflow: WorkflowEngine = Depends(get_workflow),
    recorder: ActivityRecorder = Depends(get_recorder),
) -> SubmissionCreated:
    """Submit evidence for a unit task.

    Every file is checked (type, size, count) before anything is stored; a
    rejected file means no submission is created.
    """
    data = SubmissionCreate(
        title=title, task_id=task_id, unit_id=unit_id, description=description
    )
    submission, stored_files = await workflow.submit_evidence(trainee, data, files or [])

    response = SubmissionCreated(
        submission=SubmissionSchema.model_validate(submission),
        files=[SubmissionFileSchema.model_validate(f) for f in stored_files],
    )
    await recorder.record(
        trainee.id,
        "created_submission",
        {"submission_id": submission.id, "file_count": len(stored_files)},
    )
    return response
