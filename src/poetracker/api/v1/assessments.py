"""
Assessments API
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from fastapi import APIRouter, Depends, status

from poetracker.api.deps import (
    get_current_user,
    get_recorder,
    get_store,
    get_workflow,
    require_roles,
)
from poetracker.core.models import Assessment, Role, Submission, User
from poetracker.core.policy import can_view_assessment, enforce
from poetracker.core.schemas import (
    AssessmentCreate,
    AssessmentDetail,
    AssessmentSchema,
    VerificationSchema,
)
from poetracker.core.store import EntityStore
from poetracker.workflow import ActivityRecorder, WorkflowEngine

router = APIRouter(prefix="/assessments", tags=["Assessments"])


@router.post("", response_model=AssessmentSchema, status_code=status.HTTP_201_CREATED)
async def create_assessment(
    data: AssessmentCreate,
    assessor: User = Depends(require_roles(Role.ASSESSOR)),
    workflow: WorkflowEngine = Depends(get_workflow),
    recorder: ActivityRecorder = Depends(get_recorder),
) -> AssessmentSchema:
    """
    Assess a submission.

    Only the assessor assigned to the submission's trainee for its unit may
    assess it. The submission's status follows the decision; the trainee is
    notified, and on approval so is every internal verifier.
    """
    assessment = await workflow.record_assessment(assessor, data)
    response = AssessmentSchema.model_validate(assessment)
    await recorder.record(
        assessor.id,
        "created_assessment",
        {"assessment_id": assessment.id, "submission_id": assessment.submission_id},
    )
    return response


@router.get("/{assessment_id}", response_model=AssessmentDetail)
async def get_assessment(
    assessment_id: int,
    current_user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
) -> AssessmentDetail:
    """An assessment with every verification recorded against it."""
    assessment = await store.get(Assessment, assessment_id)
    submission = await store.get(Submission, assessment.submission_id)
    trainee = await store.get(User, submission.trainee_id)
    assignments = []
    if current_user.role == Role.ASSESSOR:
        assignments = await store.assignments_covering(trainee, unit_id=submission.unit_id)
    enforce(can_view_assessment(current_user, assessment, submission, trainee, assignments))

    verifications = await store.verifications_by_assessment(assessment.id)
    return AssessmentDetail(
        assessment=AssessmentSchema.model_validate(assessment),
        verifications=[VerificationSchema.model_validate(v) for v in verifications],
    )
