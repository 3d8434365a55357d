"""
Reports API

Aggregated statistics for admins, assessors and verifiers.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from fastapi import APIRouter, Depends

from poetracker.api.deps import get_store, require_roles
from poetracker.core.models import Role, User
from poetracker.core.schemas import AssessmentOutcome, AssessorActivity, TraineePerformance
from poetracker.core.store import EntityStore
from poetracker.reporting import ReportAggregator

router = APIRouter(prefix="/reports", tags=["Reports"])


async def get_aggregator(store: EntityStore = Depends(get_store)) -> ReportAggregator:
    return ReportAggregator(store)


@router.get("/trainee-performance", response_model=list[TraineePerformance])
async def trainee_performance(
    current_user: User = Depends(require_roles(Role.ADMIN, Role.ASSESSOR)),
    aggregator: ReportAggregator = Depends(get_aggregator),
) -> list[TraineePerformance]:
    """Per-trainee submission outcomes and turnaround.

    Assessors only see trainees covered by their assignments.
    """
    if current_user.role == Role.ASSESSOR:
        trainee_ids = await aggregator.trainees_covered_by(current_user.id)
        return await aggregator.trainee_performance(trainee_ids)
    return await aggregator.trainee_performance()


@router.get("/assessor-activity", response_model=list[AssessorActivity])
async def assessor_activity(
    _admin: User = Depends(require_roles(Role.ADMIN)),
    aggregator: ReportAggregator = Depends(get_aggregator),
) -> list[AssessorActivity]:
    return await aggregator.assessor_activity()


@router.get("/assessment-outcomes", response_model=list[AssessmentOutcome])
async def assessment_outcomes(
    _user: User = Depends(
        require_roles(
            Role.ADMIN, Role.ASSESSOR, Role.INTERNAL_VERIFIER, Role.EXTERNAL_VERIFIER
        )
    ),
    aggregator: ReportAggregator = Depends(get_aggregator),
) -> list[AssessmentOutcome]:
    return await aggregator.assessment_outcomes()
