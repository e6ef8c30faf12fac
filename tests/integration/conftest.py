"""Integration test fixtures: the FastAPI app over the in-memory test database."""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from hrms_payroll.api.app import create_app
from hrms_payroll.api.dependencies import get_db_session

API = "/api/v1"


@pytest.fixture
def app(session_factory) -> FastAPI:
    """App whose requests use the per-test database."""
    app = create_app()

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    return app


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def org_headers(organization) -> dict[str, str]:
    return {"X-Organization-ID": str(organization.organization_id)}
