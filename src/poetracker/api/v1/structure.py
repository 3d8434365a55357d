"""
Organisational Structure API

Departments, study levels, courses, class intakes and modules. Any signed-in
user may read the hierarchy; only admins may extend it.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from fastapi import APIRouter, Depends, status

from poetracker.api.deps import get_current_user, get_recorder, get_store, require_roles
from poetracker.core.models import (
    ClassIntake,
    Course,
    Department,
    Module,
    Role,
    StudyLevel,
    Unit,
    User,
)
from poetracker.core.schemas import (
    ClassIntakeCreate,
    ClassIntakeSchema,
    CourseCreate,
    CourseSchema,
    DepartmentCreate,
    DepartmentSchema,
    ModuleCreate,
    ModuleSchema,
    StudyLevelCreate,
    StudyLevelSchema,
    UnitSchema,
)
from poetracker.core.store import EntityStore
from poetracker.workflow import ActivityRecorder

router = APIRouter(tags=["Structure"], dependencies=[Depends(get_current_user)])

admin_only = require_roles(Role.ADMIN)


# ============================================================================
# Departments
# ============================================================================


@router.get("/departments", response_model=list[DepartmentSchema])
async def list_departments(store: EntityStore = Depends(get_store)) -> list[Department]:
    return await store.list_by(Department)


@router.get("/departments/{department_id}", response_model=DepartmentSchema)
async def get_department(
    department_id: int, store: EntityStore = Depends(get_store)
) -> Department:
    return await store.get(Department, department_id)


@router.get("/departments/{department_id}/courses", response_model=list[CourseSchema])
async def list_department_courses(
    department_id: int, store: EntityStore = Depends(get_store)
) -> list[Course]:
    await store.get(Department, department_id)
    return await store.courses_by_department(department_id)


@router.post(
    "/departments", response_model=DepartmentSchema, status_code=status.HTTP_201_CREATED
)
async def create_department(
    data: DepartmentCreate,
    admin: User = Depends(admin_only),
    store: EntityStore = Depends(get_store),
    recorder: ActivityRecorder = Depends(get_recorder),
) -> DepartmentSchema:
    department = await store.create(Department, **data.model_dump())
    await store.commit()
    response = DepartmentSchema.model_validate(department)
    await recorder.record(admin.id, "created_department", {"department_id": department.id})
    return response


# ============================================================================
# Study levels
# ============================================================================


@router.get("/study-levels", response_model=list[StudyLevelSchema])
async def list_study_levels(store: EntityStore = Depends(get_store)) -> list[StudyLevel]:
    return await store.list_by(StudyLevel, order_by=[StudyLevel.order, StudyLevel.id])


@router.get("/study-levels/{study_level_id}", response_model=StudyLevelSchema)
async def get_study_level(
    study_level_id: int, store: EntityStore = Depends(get_store)
) -> StudyLevel:
    return await store.get(StudyLevel, study_level_id)


@router.get("/study-levels/{study_level_id}/courses", response_model=list[CourseSchema])
async def list_study_level_courses(
    study_level_id: int, store: EntityStore = Depends(get_store)
) -> list[Course]:
    await store.get(StudyLevel, study_level_id)
    return await store.courses_by_study_level(study_level_id)


@router.post(
    "/study-levels", response_model=StudyLevelSchema, status_code=status.HTTP_201_CREATED
)
async def create_study_level(
    data: StudyLevelCreate,
    admin: User = Depends(admin_only),
    store: EntityStore = Depends(get_store),
    recorder: ActivityRecorder = Depends(get_recorder),
) -> StudyLevelSchema:
    study_level = await store.create(StudyLevel, **data.model_dump())
    await store.commit()
    response = StudyLevelSchema.model_validate(study_level)
    await recorder.record(admin.id, "created_study_level", {"study_level_id": study_level.id})
    return response


# ============================================================================
# Courses
# ============================================================================


@router.get("/courses", response_model=list[CourseSchema])
async def list_courses(store: EntityStore = Depends(get_store)) -> list[Course]:
    return await store.list_by(Course)


@router.get("/courses/{course_id}", response_model=CourseSchema)
async def get_course(course_id: int, store: EntityStore = Depends(get_store)) -> Course:
    return await store.get(Course, course_id)


@router.get("/courses/{course_id}/class-intakes", response_model=list[ClassIntakeSchema])
async def list_course_intakes(
    course_id: int, store: EntityStore = Depends(get_store)
) -> list[ClassIntake]:
    await store.get(Course, course_id)
    return await store.class_intakes_by_course(course_id)


@router.get("/courses/{course_id}/modules", response_model=list[ModuleSchema])
async def list_course_modules(
    course_id: int, store: EntityStore = Depends(get_store)
) -> list[Module]:
    await store.get(Course, course_id)
    return await store.modules_by_course(course_id)


@router.get("/courses/{course_id}/units", response_model=list[UnitSchema])
async def list_course_units(course_id: int, store: EntityStore = Depends(get_store)) -> list[Unit]:
    await store.get(Course, course_id)
    return await store.units_by_course(course_id)


@router.post("/courses", response_model=CourseSchema, status_code=status.HTTP_201_CREATED)
async def create_course(
    data: CourseCreate,
    admin: User = Depends(admin_only),
    store: EntityStore = Depends(get_store),
    recorder: ActivityRecorder = Depends(get_recorder),
) -> CourseSchema:
    await store.get(Department, data.department_id)
    await store.get(StudyLevel, data.study_level_id)
    course = await store.create(Course, **data.model_dump())
    await store.commit()
    response = CourseSchema.model_validate(course)
    await recorder.record(admin.id, "created_course", {"course_id": course.id})
    return response


# ============================================================================
# Class intakes
# ============================================================================


@router.get("/class-intakes", response_model=list[ClassIntakeSchema])
async def list_class_intakes(store: EntityStore = Depends(get_store)) -> list[ClassIntake]:
    return await store.list_by(ClassIntake)


@router.get("/class-intakes/{class_intake_id}", response_model=ClassIntakeSchema)
async def get_class_intake(
    class_intake_id: int, store: EntityStore = Depends(get_store)
) -> ClassIntake:
    return await store.get(ClassIntake, class_intake_id)


@router.post(
    "/class-intakes", response_model=ClassIntakeSchema, status_code=status.HTTP_201_CREATED
)
async def create_class_intake(
    data: ClassIntakeCreate,
    admin: User = Depends(admin_only),
    store: EntityStore = Depends(get_store),
    recorder: ActivityRecorder = Depends(get_recorder),
) -> ClassIntakeSchema:
    await store.get(Course, data.course_id)
    class_intake = await store.create(ClassIntake, **data.model_dump())
    await store.commit()
    response = ClassIntakeSchema.model_validate(class_intake)
    await recorder.record(admin.id, "created_class_intake", {"class_intake_id": class_intake.id})
    return response


# ============================================================================
# Modules
# ============================================================================


@router.get("/modules", response_model=list[ModuleSchema])
async def list_modules(store: EntityStore = Depends(get_store)) -> list[Module]:
    return await store.list_by(Module)


@router.get("/modules/{module_id}", response_model=ModuleSchema)
async def get_module(module_id: int, store: EntityStore = Depends(get_store)) -> Module:
    return await store.get(Module, module_id)


@router.get("/modules/{module_id}/units", response_model=list[UnitSchema])
async def list_module_units(module_id: int, store: EntityStore = Depends(get_store)) -> list[Unit]:
    await store.get(Module, module_id)
    return await store.units_by_module(module_id)


@router.post("/modules", response_model=ModuleSchema, status_code=status.HTTP_201_CREATED)
async def create_module(
    data: ModuleCreate,
    admin: User = Depends(admin_only),
    store: EntityStore = Depends(get_store),
    recorder: ActivityRecorder = Depends(get_recorder),
) -> ModuleSchema:
    await store.get(Course, data.course_id)
    module = await store.create(Module, **data.model_dump())
    await store.commit()
    response = ModuleSchema.model_validate(module)
    await recorder.record(admin.id, "created_module", {"module_id": module.id})
    return response
