"""Pytest fixtures: an isolated database per test and a wired API client."""

import asyncio

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool
from sqlmodel import SQLModel

import ccred.models  # noqa: F401  registers the tables
from ccred.db.store import Records
from ccred.handlers.files import FileStore
from ccred.handlers.projects import create_project
from ccred.handlers.workflow import approve_submission, submit_for_verification
from ccred.models.common import ProjectLocation
from ccred.models.project import ProjectCategory, ProjectCreate
from ccred.models.upload import DataType, DataUpload
from ccred.models.verification import ApprovalDecision
from ccred.utils.ids import new_id


async def _create_tables(engine):
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


@pytest_asyncio.fixture
async def records():
    """Record stores over a fresh in-memory database."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    await _create_tables(engine)
    sessionmaker = async_sessionmaker(engine, expire_on_commit=False)
    async with sessionmaker() as session:
        yield Records(session)
    await engine.dispose()


async def make_project(records, name="Amaravati Green Belt", category=ProjectCategory.REFORESTATION):
    return await create_project(records, ProjectCreate(
        name=name,
        category=category,
        location=ProjectLocation(country="India", state="Andhra Pradesh", district="Guntur"),
        estimated_credits=50000
    ))


async def make_upload(records, project):
    upload = DataUpload(
        id=new_id("UPL"),
        project_id=project.id,
        data_type=DataType.FIELD_SURVEY,
        field_metadata={"collection_date": "2024-03-01", "equipment": "GPS tablet"},
        uploaded_by="field-team"
    )
    return await records.uploads.insert(upload)


async def make_approved_submission(records, project, credits_generated=120.0):
    upload = await make_upload(records, project)
    submission = await submit_for_verification(records, upload.id)
    return await approve_submission(
        records,
        submission.id,
        ApprovalDecision(credits_generated=credits_generated, quality_score=92, reviewed_by="verra-auditor")
    )


@pytest_asyncio.fixture
async def project(records):
    return await make_project(records)


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def client(tmp_path, upload_dir):
    """API client bound to a temporary database file and upload directory."""
    from main import app
    from ccred.core.database import get_records, get_session
    from ccred.handlers.files import get_file_store

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ccred-test.db'}", poolclass=NullPool)
    asyncio.run(_create_tables(engine))
    sessionmaker = async_sessionmaker(engine, expire_on_commit=False)

    async def override_records():
        async with sessionmaker() as session:
            yield Records(session)

    async def override_session():
        async with sessionmaker() as session:
            yield session

    app.dependency_overrides[get_records] = override_records
    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_file_store] = lambda: FileStore(upload_dir, 1024 * 1024)
    yield TestClient(app)
    app.dependency_overrides.clear()
    asyncio.run(engine.dispose())
