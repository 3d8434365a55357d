"""
Organisational Hierarchy Models

Department → Course (with StudyLevel) → ClassIntake / Module, and the gradable
Units and Tasks hanging off a Course.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from sqlalchemy import JSON, Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, IntegerPrimaryKeyMixin


class Department(Base, IntegerPrimaryKeyMixin):
    """Academic department (e.g. Engineering, Business Studies)."""

    __tablename__ = "departments"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    code: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class StudyLevel(Base, IntegerPrimaryKeyMixin):
    """Qualification level (e.g. Level 3, Level 6 - Diploma)."""

    __tablename__ = "study_levels"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    order: Mapped[int] = mapped_column(Integer, nullable=False, comment="Sort position")


class Course(Base, IntegerPrimaryKeyMixin):
    """A course offered by one department at one study level."""

    __tablename__ = "courses"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    code: Mapped[str] = mapped_column(String(20), nullable=False)
    department_id: Mapped[int] = mapped_column(ForeignKey("departments.id"), nullable=False)
    study_level_id: Mapped[int] = mapped_column(ForeignKey("study_levels.id"), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class ClassIntake(Base, IntegerPrimaryKeyMixin):
    """A cohort of trainees starting a course together."""

    __tablename__ = "class_intakes"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)


class Module(Base, IntegerPrimaryKeyMixin):
    """A block of study within a course."""

    __tablename__ = "modules"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    code: Mapped[str] = mapped_column(String(20), nullable=False)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    credits: Mapped[int] = mapped_column(Integer, default=0)


class Unit(Base, IntegerPrimaryKeyMixin):
    """A gradable topic. Owns the tasks trainees submit evidence against."""

    __tablename__ = "units"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    code: Mapped[str] = mapped_column(String(20), nullable=False)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), nullable=False)
    module_id: Mapped[int | None] = mapped_column(ForeignKey("modules.id"), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    credits: Mapped[int] = mapped_column(Integer, default=0)


class Task(Base, IntegerPrimaryKeyMixin):
    """A unit task with its grading checklist.

    ``criteria`` is an ordered mapping of criterion label to expectation and
    is the template assessors complete.
    """

    __tablename__ = "tasks"

    unit_id: Mapped[int] = mapped_column(ForeignKey("units.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    criteria: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)

