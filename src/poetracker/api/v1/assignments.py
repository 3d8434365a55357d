"""
Assignments API

Links assessors to the trainees (a whole intake or one trainee) whose work
they grade in a unit.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from fastapi import APIRouter, Depends, status

from poetracker.api.deps import get_recorder, get_store, get_workflow, require_roles
from poetracker.core.models import Assignment, Role, User
from poetracker.core.schemas import AssignmentCreate, AssignmentSchema
from poetracker.core.store import EntityStore
from poetracker.workflow import ActivityRecorder, WorkflowEngine

router = APIRouter(prefix="/assignments", tags=["Assignments"])


@router.get("", response_model=list[AssignmentSchema])
async def list_assignments(
    current_user: User = Depends(require_roles(Role.ADMIN, Role.ASSESSOR)),
    store: EntityStore = Depends(get_store),
) -> list[Assignment]:
    """All assignments for admins; an assessor sees their own."""
    if current_user.role == Role.ASSESSOR:
        return await store.assignments_by_assessor(current_user.id)
    return await store.list_by(Assignment)


@router.post("", response_model=AssignmentSchema, status_code=status.HTTP_201_CREATED)
async def create_assignment(
    data: AssignmentCreate,
    admin: User = Depends(require_roles(Role.ADMIN)),
    workflow: WorkflowEngine = Depends(get_workflow),
    recorder: ActivityRecorder = Depends(get_recorder),
) -> AssignmentSchema:
    """Assign an assessor; the assessor is notified."""
    assignment = await workflow.create_assignment(admin, data)
    response = AssignmentSchema.model_validate(assignment)
    await recorder.record(admin.id, "created_assignment", {"assignment_id": assignment.id})
    return response
