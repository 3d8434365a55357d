"""
Demo Data Loader

Populates an empty store with the administrator account and a sample
organisational hierarchy (departments → courses → intakes/modules → units →
tasks) so a fresh instance is usable straight away.

Runs at startup when SEED_DEMO_DATA is set; does nothing once any user exists.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING, Any

from poetracker.config import settings
from poetracker.core.models import (
    ClassIntake,
    Course,
    Department,
    Module,
    Role,
    StudyLevel,
    Task,
    Unit,
    User,
)
from poetracker.core.security import hash_password

if TYPE_CHECKING:
    from poetracker.core.store import EntityStore

logger = logging.getLogger(__name__)


DEPARTMENTS: list[dict[str, str]] = [
    {"name": "Engineering", "code": "ENG", "description": "Engineering and technical studies"},
    {"name": "Business Studies", "code": "BUS", "description": "Business and management"},
    {"name": "Information Technology", "code": "IT", "description": "IT and computing"},
]

STUDY_LEVELS: list[dict[str, Any]] = [
    {"name": "Level 3", "description": "Basic vocational qualification", "order": 1},
    {"name": "Level 4 - Artisan", "description": "Artisan qualification", "order": 2},
    {"name": "Level 5 - Craft Artisan", "description": "Craft artisan qualification", "order": 3},
    {"name": "Level 6 - Diploma", "description": "Diploma qualification", "order": 4},
]

# department code, study level order
COURSES: list[dict[str, Any]] = [
    {
        "name": "Software Development",
        "code": "SD101",
        "description": "Software development and programming",
        "department": "IT",
        "level": 2,
    },
    {
        "name": "Network Administration",
        "code": "NA101",
        "description": "Network setup and administration",
        "department": "IT",
        "level": 2,
    },
    {
        "name": "Mechanical Engineering",
        "code": "ME101",
        "description": "Mechanical engineering principles and practice",
        "department": "ENG",
        "level": 3,
    },
    {
        "name": "Business Administration",
        "code": "BA101",
        "description": "Business management and administration",
        "department": "BUS",
        "level": 4,
    },
]

MODULES: list[dict[str, str]] = [
    {"name": "Programming Fundamentals", "code": "PRG101", "course": "SD101"},
    {"name": "Database Systems", "code": "DB101", "course": "SD101"},
    {"name": "Networking Fundamentals", "code": "NET101", "course": "NA101"},
    {"name": "Engineering Principles", "code": "ENG101", "course": "ME101"},
    {"name": "Business Management", "code": "BUS101", "course": "BA101"},
]

UNITS: list[dict[str, Any]] = [
    {
        "name": "Database Design",
        "code": "DB101",
        "course": "SD101",
        "module": "DB101",
        "description": "Introduction to database design principles",
        "tasks": [
            {
                "name": "ER Modeling",
                "description": "Create entity-relationship diagrams",
                "criteria": [
                    "Entities correctly identified",
                    "Relationships properly defined",
                    "Attributes appropriately placed",
                    "Cardinality correctly specified",
                ],
            },
            {
                "name": "Normalization & SQL",
                "description": "Normalize database to 3NF and write SQL queries",
                "criteria": [
                    "Database normalized to 3NF",
                    "SQL DDL statements correct",
                    "SQL DML statements functioning",
                    "Queries retrieve correct data",
                ],
            },
        ],
    },
    {
        "name": "Programming Fundamentals",
        "code": "PRG101",
        "course": "SD101",
        "module": "PRG101",
        "description": "Introduction to programming concepts",
        "tasks": [
            {
                "name": "OOP Concepts",
                "description": "Implement object-oriented programming concepts",
                "criteria": [
                    "Classes properly defined",
                    "Inheritance correctly implemented",
                    "Encapsulation principles followed",
                    "Polymorphism demonstrated",
                ],
            },
            {
                "name": "Application Development",
                "description": "Develop a simple application using OOP",
                "criteria": [
                    "Requirements fulfilled",
                    "OOP principles applied",
                    "Code documented",
                    "Error handling implemented",
                    "UI/UX meets standards",
                ],
            },
        ],
    },
    {
        "name": "Networking",
        "code": "NET101",
        "course": "NA101",
        "module": "NET101",
        "description": "Introduction to computer networks",
        "tasks": [
            {
                "name": "Network Protocols",
                "description": "Analyze and implement network protocols",
                "criteria": [
                    "Protocol layers identified",
                    "Protocol functions explained",
                    "Implementation works correctly",
                    "Security considerations addressed",
                ],
            },
        ],
    },
    {
        "name": "Cybersecurity",
        "code": "SEC101",
        "course": "NA101",
        "module": None,
        "description": "Introduction to cybersecurity principles",
        "tasks": [
            {
                "name": "Security Principles",
                "description": "Explain and implement security principles",
                "criteria": [
                    "CIA triad explained",
                    "Threat modeling performed",
                    "Security controls identified",
                    "Implementation secure",
                ],
            },
        ],
    },
]


async def seed_demo_data(store: EntityStore) -> bool:
    """Load the admin account and sample hierarchy into an empty store.

    Returns:
        True if data was loaded, False if the store already had users
    """
    if await store.exists(User):
        logger.info("Store already has users, skipping demo data")
        return False

    await store.create(
        User,
        username="admin",
        password_hash=hash_password(settings.DEFAULT_ADMIN_PASSWORD),
        full_name="Administrator",
        email="admin@example.com",
        role=Role.ADMIN,
        is_active=True,
    )

    # Step 1: Departments and study levels
    departments = {}
    for data in DEPARTMENTS:
        departments[data["code"]] = await store.create(Department, **data)
    levels = {}
    for data in STUDY_LEVELS:
        levels[data["order"]] = await store.create(StudyLevel, **data)

    # Step 2: Courses, each with a 2023 intake
    courses = {}
    for data in COURSES:
        course = await store.create(
            Course,
            name=data["name"],
            code=data["code"],
            description=data["description"],
            department_id=departments[data["department"]].id,
            study_level_id=levels[data["level"]].id,
        )
        courses[course.code] = course
        await store.create(
            ClassIntake,
            name=f"{course.name} Intake 2023",
            course_id=course.id,
            start_date=date(2023, 1, 15),
            end_date=date(2024 if data["level"] == 2 else 2025, 12, 15),
        )

    # Step 3: Modules
    modules = {}
    for data in MODULES:
        modules[data["code"]] = await store.create(
            Module, name=data["name"], code=data["code"], course_id=courses[data["course"]].id
        )

    # Step 4: Units and their tasks
    task_count = 0
    for data in UNITS:
        unit = await store.create(
            Unit,
            name=data["name"],
            code=data["code"],
            course_id=courses[data["course"]].id,
            module_id=modules[data["module"]].id if data["module"] else None,
            description=data["description"],
        )
        for task in data["tasks"]:
            await store.create(
                Task,
                unit_id=unit.id,
                name=task["name"],
                description=task["description"],
                criteria=dict.fromkeys(task["criteria"], True),
            )
            task_count += 1

    await store.commit()
    logger.info(
        f"Loaded demo data: {len(DEPARTMENTS)} departments, {len(COURSES)} courses, "
        f"{len(UNITS)} units, {task_count} tasks"
    )
    return True
