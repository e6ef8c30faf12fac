"""Pytest fixtures for payroll tests."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import AsyncGenerator
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from hrms_payroll.database import create_session_factory
from hrms_payroll.models import (
    AttendanceRecord,
    AttendanceStatus,
    Base,
    Employee,
    EmploymentType,
    Organization,
)

# In-memory SQLite shared by every session of one test
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

PERIOD_START = date(2024, 1, 1)
PERIOD_END = date(2024, 1, 31)
PAY_DATE = date(2024, 2, 5)


@pytest.fixture
async def engine():
    """Create a fresh test database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def organization(session: AsyncSession) -> Organization:
    org = Organization(organization_id=uuid4(), name="Acme Corp")
    session.add(org)
    await session.commit()
    return org


@pytest.fixture
async def salaried_employee(session: AsyncSession, organization: Organization) -> Employee:
    """Full-time employee paid 5000.00 per period."""
    employee = Employee(
        employee_id=uuid4(),
        organization_id=organization.organization_id,
        employee_number="E001",
        first_name="Jane",
        last_name="Doe",
        employment_type=EmploymentType.FULL_TIME.value,
        salary_amount=Decimal("5000.00"),
        is_active=True,
    )
    session.add(employee)
    await session.commit()
    return employee


@pytest.fixture
async def hourly_employee(session: AsyncSession, organization: Organization) -> Employee:
    """Part-time employee paid 20.00 per hour."""
    employee = Employee(
        employee_id=uuid4(),
        organization_id=organization.organization_id,
        employee_number="E002",
        first_name="John",
        last_name="Smith",
        employment_type=EmploymentType.PART_TIME.value,
        hourly_rate=Decimal("20.00"),
        is_active=True,
    )
    session.add(employee)
    await session.commit()
    return employee


@pytest.fixture
async def hourly_attendance(
    session: AsyncSession, hourly_employee: Employee
) -> list[AttendanceRecord]:
    """20 present days of 8 regular hours, overtime totalling 10 hours,
    plus one absent day whose hours must be ignored."""
    records = []
    for day in range(20):
        records.append(
            AttendanceRecord(
                employee_id=hourly_employee.employee_id,
                attendance_date=PERIOD_START + timedelta(days=day),
                status=AttendanceStatus.PRESENT.value,
                regular_hours=Decimal("8.00"),
                overtime_hours=Decimal("2.00") if day < 5 else None,
            )
        )
    records.append(
        AttendanceRecord(
            employee_id=hourly_employee.employee_id,
            attendance_date=PERIOD_START + timedelta(days=25),
            status=AttendanceStatus.ABSENT.value,
            regular_hours=Decimal("8.00"),
            overtime_hours=Decimal("4.00"),
        )
    )
    session.add_all(records)
    await session.commit()
    return records
