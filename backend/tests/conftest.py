from __future__ import annotations

import os
import uuid
from datetime import date
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from leavedesk.db import get_session
from leavedesk.main import app
from leavedesk.models import LeavePeriod, SQLModel
from leavedesk.models.enums import LeaveStatus, LeaveType, WorkflowStep
from leavedesk.services.employee import EmployeeInfo, InMemoryEmployeeDirectory, set_employee_directory
from leavedesk.services.notification import (
    InMemoryNotificationSink,
    LoggingNotificationSink,
    set_notification_sink,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

    from sqlalchemy.ext.asyncio import AsyncEngine

_TEST_DATABASE_URL = os.environ.get("LEAVEDESK_TEST_DATABASE_URL", "sqlite+aiosqlite://")


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """Create an async engine with all tables.

    Defaults to a private in-memory SQLite database; set
    LEAVEDESK_TEST_DATABASE_URL to run against Postgres.
    """
    if _TEST_DATABASE_URL.startswith("sqlite"):
        _engine = create_async_engine(
            _TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        _engine = create_async_engine(_TEST_DATABASE_URL)
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await _engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Yield a database session wrapped in a transaction that rolls back after each test."""
    async with engine.connect() as conn:
        txn = await conn.begin()
        session = AsyncSession(bind=conn, expire_on_commit=False)
        yield session
        await session.close()
        await txn.rollback()


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database session dependency overridden."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def directory() -> Iterator[InMemoryEmployeeDirectory]:
    """Install a fresh in-memory employee directory."""
    svc = InMemoryEmployeeDirectory()
    set_employee_directory(svc)
    yield svc
    set_employee_directory(InMemoryEmployeeDirectory())


@pytest.fixture
def sink() -> Iterator[InMemoryNotificationSink]:
    """Capture notices instead of logging them."""
    captured = InMemoryNotificationSink()
    set_notification_sink(captured)
    yield captured
    set_notification_sink(LoggingNotificationSink())


# ---------------------------------------------------------------------------
# Builders shared by the pure-logic tests
# ---------------------------------------------------------------------------


def make_employee(
    department: str | None = "Sorting",
    role: str | None = "Operator",
    *,
    first_name: str = "Test",
    last_name: str = "Employee",
    email: str | None = "test@example.com",
    birth_date: date | None = None,
    start_date: date | None = None,
) -> EmployeeInfo:
    return EmployeeInfo(
        id=uuid.uuid4(),
        first_name=first_name,
        last_name=last_name,
        email=email,
        department=department,
        manager_name="Chef d'équipe",
        role=role,
        birth_date=birth_date,
        start_date=start_date,
    )


def make_period(
    start: date,
    end: date,
    *,
    employee_id: uuid.UUID | None = None,
    group_id: uuid.UUID | None = None,
    leave_type: LeaveType = LeaveType.VACATION,
    status: LeaveStatus = LeaveStatus.PENDING,
    step: WorkflowStep = WorkflowStep.MANAGER,
) -> LeavePeriod:
    return LeavePeriod(
        employee_id=employee_id or uuid.uuid4(),
        type=leave_type.value,
        start_date=start,
        end_date=end,
        status=status.value,
        workflow_step=step.value,
        request_group_id=group_id,
    )
