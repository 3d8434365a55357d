"""
Pytest Configuration and Fixtures

Shared test fixtures for unit and API tests. Every test gets a fresh
in-memory SQLite store and its own upload/export directories.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import configure_mappers

from poetracker.config import settings
from poetracker.core.database import build_engine, get_db
from poetracker.core.models import (
    Assignment,
    Base,
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
from poetracker.core.security import hash_password, issue_token
from poetracker.core.store import EntityStore
from poetracker.main import app

# Ensure all mappers are configured
configure_mappers()

DEFAULT_PASSWORD = "secret123"

TASK_CRITERIA = {
    "Entities correctly identified": True,
    "Relationships properly defined": True,
    "Cardinality correctly specified": True,
}


@pytest.fixture(autouse=True)
def storage_dirs(tmp_path, monkeypatch):
    """Point evidence uploads and rendered portfolios at the test's tmp dir."""
    upload_dir = tmp_path / "uploads"
    export_dir = tmp_path / "exports"
    monkeypatch.setattr(settings, "UPLOAD_DIR", upload_dir)
    monkeypatch.setattr(settings, "EXPORT_DIR", export_dir)
    return upload_dir, export_dir


@pytest.fixture
async def async_engine():
    """Create async engine for testing."""
    engine = build_engine("sqlite+aiosqlite:///:memory:")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(async_engine) -> AsyncSession:
    """Create database session for testing."""
    async_session = async_sessionmaker(
        async_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
    async with async_session() as session:
        yield session


@pytest.fixture
def store(db_session: AsyncSession) -> EntityStore:
    return EntityStore(db_session)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncClient:
    """Create test client with database dependency override."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# ============================================================================
# Factories
# ============================================================================


@dataclass
class Hierarchy:
    department: Department
    study_level: StudyLevel
    course: Course
    intake: ClassIntake
    module: Module
    unit: Unit
    task: Task


@pytest.fixture
async def hierarchy(store: EntityStore) -> Hierarchy:
    """Department → course → intake/module → unit → task with a criteria checklist."""
    department = await store.create(Department, name="Information Technology", code="IT")
    study_level = await store.create(StudyLevel, name="Level 4 - Artisan", order=2)
    course = await store.create(
        Course,
        name="Software Development",
        code="SD101",
        department_id=department.id,
        study_level_id=study_level.id,
    )
    intake = await store.create(
        ClassIntake,
        name="Software Development Intake 2023",
        course_id=course.id,
        start_date=date(2023, 1, 15),
        end_date=date(2024, 12, 15),
    )
    module = await store.create(Module, name="Database Systems", code="DB101", course_id=course.id)
    unit = await store.create(
        Unit, name="Database Design", code="DB101", course_id=course.id, module_id=module.id
    )
    task = await store.create(Task, unit_id=unit.id, name="ER Modeling", criteria=TASK_CRITERIA)
    await store.commit()
    return Hierarchy(department, study_level, course, intake, module, unit, task)


UserFactory = Callable[..., Awaitable[User]]


@pytest.fixture
def make_user(store: EntityStore) -> UserFactory:
    """Factory creating committed users: ``await make_user(Role.TRAINEE, class_intake_id=...)``."""
    counter = {"n": 0}

    async def factory(
        role: Role,
        username: str | None = None,
        password: str = DEFAULT_PASSWORD,
        is_active: bool = True,
        **placement: int | None,
    ) -> User:
        counter["n"] += 1
        username = username or f"{role.value.replace('_', '')}{counter['n']}"
        user = await store.create(
            User,
            username=username,
            password_hash=hash_password(password),
            full_name=f"{role.value.replace('_', ' ').title()} {counter['n']}",
            email=f"{username}@example.com",
            role=role,
            is_active=is_active,
            **placement,
        )
        await store.commit()
        return user

    return factory


@pytest.fixture
async def admin(make_user: UserFactory) -> User:
    return await make_user(Role.ADMIN, username="admin")


@pytest.fixture
async def trainee(make_user: UserFactory, hierarchy: Hierarchy) -> User:
    return await make_user(
        Role.TRAINEE,
        username="trainee",
        course_id=hierarchy.course.id,
        class_intake_id=hierarchy.intake.id,
    )


@pytest.fixture
async def assessor(make_user: UserFactory) -> User:
    return await make_user(Role.ASSESSOR, username="assessor")


@pytest.fixture
async def internal_verifier(make_user: UserFactory) -> User:
    return await make_user(Role.INTERNAL_VERIFIER, username="iv")


@pytest.fixture
async def external_verifier(make_user: UserFactory) -> User:
    return await make_user(Role.EXTERNAL_VERIFIER, username="ev")


@pytest.fixture
def auth_headers(store: EntityStore) -> Callable[[User], Awaitable[dict[str, str]]]:
    """Issue a real session token: ``headers = await auth_headers(user)``."""

    async def headers_for(user: User) -> dict[str, str]:
        token = await issue_token(store, user)
        return {"Authorization": f"Bearer {token}"}

    return headers_for


@pytest.fixture
async def assignment(store: EntityStore, hierarchy: Hierarchy, assessor: User) -> Assignment:
    """The assessor covers the whole intake for the hierarchy's unit."""
    record = await store.create(
        Assignment,
        class_intake_id=hierarchy.intake.id,
        unit_id=hierarchy.unit.id,
        assessor_id=assessor.id,
    )
    await store.commit()
    return record


EvidenceFile = tuple[str, tuple[str, bytes, str]]


def evidence_file(
    name: str = "erd.pdf",
    content: bytes = b"%PDF-1.4 evidence",
    content_type: str = "application/pdf",
) -> EvidenceFile:
    return ("files", (name, content, content_type))


@pytest.fixture
def post_submission(client: AsyncClient, hierarchy: Hierarchy, auth_headers):
    """POST a multipart submission as ``user``; returns the raw response."""

    async def post(
        user: User, files: list[EvidenceFile] | None = None, title: str = "ER Diagram"
    ):
        return await client.post(
            "/api/v1/submissions",
            data={
                "title": title,
                "task_id": str(hierarchy.task.id),
                "unit_id": str(hierarchy.unit.id),
                "description": "Entity relationship model",
            },
            files=files if files is not None else [evidence_file()],
            headers=await auth_headers(user),
        )

    return post
