"""
Units and Tasks API

Gradable units and the tasks (with criteria checklists) trainees submit
evidence against.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from fastapi import APIRouter, Depends, status

from poetracker.api.deps import get_current_user, get_recorder, get_store, require_roles
from poetracker.core.errors import ValidationError
from poetracker.core.models import Course, Module, Role, Task, Unit, User
from poetracker.core.schemas import TaskCreate, TaskSchema, UnitCreate, UnitSchema
from poetracker.core.store import EntityStore
from poetracker.workflow import ActivityRecorder

router = APIRouter(tags=["Units"], dependencies=[Depends(get_current_user)])


@router.get("/units", response_model=list[UnitSchema])
async def list_units(store: EntityStore = Depends(get_store)) -> list[Unit]:
    return await store.list_by(Unit)


@router.get("/units/{unit_id}", response_model=UnitSchema)
async def get_unit(unit_id: int, store: EntityStore = Depends(get_store)) -> Unit:
    return await store.get(Unit, unit_id)


@router.get("/units/{unit_id}/tasks", response_model=list[TaskSchema])
async def list_unit_tasks(unit_id: int, store: EntityStore = Depends(get_store)) -> list[Task]:
    await store.get(Unit, unit_id)
    return await store.tasks_by_unit(unit_id)


@router.post("/units", response_model=UnitSchema, status_code=status.HTTP_201_CREATED)
async def create_unit(
    data: UnitCreate,
    admin: User = Depends(require_roles(Role.ADMIN)),
    store: EntityStore = Depends(get_store),
    recorder: ActivityRecorder = Depends(get_recorder),
) -> UnitSchema:
    """Create a unit under a course, optionally inside one of its modules."""
    await store.get(Course, data.course_id)
    if data.module_id is not None:
        module = await store.get(Module, data.module_id)
        if module.course_id != data.course_id:
            raise ValidationError(
                f"Module {module.id} does not belong to course {data.course_id}",
                field="module_id",
            )

    unit = await store.create(Unit, **data.model_dump())
    await store.commit()
    response = UnitSchema.model_validate(unit)
    await recorder.record(admin.id, "created_unit", {"unit_id": unit.id})
    return response


@router.get("/tasks/{task_id}", response_model=TaskSchema)
async def get_task(task_id: int, store: EntityStore = Depends(get_store)) -> Task:
    return await store.get(Task, task_id)


@router.post("/tasks", response_model=TaskSchema, status_code=status.HTTP_201_CREATED)
async def create_task(
    data: TaskCreate,
    admin: User = Depends(require_roles(Role.ADMIN)),
    store: EntityStore = Depends(get_store),
    recorder: ActivityRecorder = Depends(get_recorder),
) -> TaskSchema:
    """Create a task with its criteria checklist template."""
    await store.get(Unit, data.unit_id)
    criteria = {label.strip(): value for label, value in data.criteria.items()}
    if "" in criteria:
        raise ValidationError("Criterion labels cannot be blank", field="criteria")

    task = await store.create(
        Task,
        unit_id=data.unit_id,
        name=data.name,
        description=data.description,
        criteria=criteria,
    )
    await store.commit()
    response = TaskSchema.model_validate(task)
    await recorder.record(admin.id, "created_task", {"task_id": task.id, "unit_id": task.unit_id})
    return response
