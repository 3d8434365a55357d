"""
Verifications API

Internal and external verifiers audit assessments.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from fastapi import APIRouter, Depends, status

from poetracker.api.deps import get_recorder, get_store, get_workflow, require_roles
from poetracker.core.models import Role, User, Verification
from poetracker.core.schemas import VerificationCreate, VerificationSchema
from poetracker.core.store import EntityStore
from poetracker.workflow import ActivityRecorder, WorkflowEngine

router = APIRouter(prefix="/verifications", tags=["Verifications"])


@router.get("", response_model=list[VerificationSchema])
async def list_verifications(
    current_user: User = Depends(
        require_roles(Role.INTERNAL_VERIFIER, Role.EXTERNAL_VERIFIER, Role.ADMIN)
    ),
    store: EntityStore = Depends(get_store),
) -> list[Verification]:
    """A verifier's own verifications; every verification for an admin."""
    if current_user.role == Role.ADMIN:
        return await store.list_by(Verification)
    return await store.verifications_by_verifier(current_user.id)


@router.post("", response_model=VerificationSchema, status_code=status.HTTP_201_CREATED)
async def create_verification(
    data: VerificationCreate,
    verifier: User = Depends(require_roles(Role.INTERNAL_VERIFIER, Role.EXTERNAL_VERIFIER)),
    workflow: WorkflowEngine = Depends(get_workflow),
    recorder: ActivityRecorder = Depends(get_recorder),
) -> VerificationSchema:
    """
    Verify an assessment.

    The assessor is always notified. A rejection also notifies the trainee; an
    internal confirmation hands the assessment on to every external verifier.
    """
    verification = await workflow.record_verification(verifier, data)
    response = VerificationSchema.model_validate(verification)
    await recorder.record(
        verifier.id,
        "created_verification",
        {"verification_id": verification.id, "assessment_id": verification.assessment_id},
    )
    return response
