"""
Organisational Hierarchy Schemas

Departments, study levels, courses, class intakes, modules, units and tasks.
"""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .criteria import CriteriaChecklist


# Department Schemas
class DepartmentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    code: str = Field(..., min_length=1, max_length=20)
    description: str | None = None


class DepartmentSchema(DepartmentCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int


# Study Level Schemas
class StudyLevelCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    order: int = Field(..., ge=0, description="Sort position")


class StudyLevelSchema(StudyLevelCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int


# Course Schemas
class CourseCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    code: str = Field(..., min_length=1, max_length=20)
    department_id: int
    study_level_id: int
    description: str | None = None


class CourseSchema(CourseCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int


# Class Intake Schemas
class ClassIntakeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    course_id: int
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def check_dates(self) -> "ClassIntakeCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ClassIntakeSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    course_id: int
    start_date: date
    end_date: date


# Module Schemas
class ModuleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    code: str = Field(..., min_length=1, max_length=20)
    course_id: int
    description: str | None = None
    credits: int = Field(default=0, ge=0)


class ModuleSchema(ModuleCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int


# Unit Schemas
class UnitCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    code: str = Field(..., min_length=1, max_length=20)
    course_id: int
    module_id: int | None = None
    description: str | None = None
    credits: int = Field(default=0, ge=0)


class UnitSchema(UnitCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int


# Task Schemas
class TaskCreate(BaseModel):
    unit_id: int
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    criteria: CriteriaChecklist = Field(
        default_factory=dict, description="Ordered checklist: criterion label → expectation"
    )


class TaskSchema(TaskCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
