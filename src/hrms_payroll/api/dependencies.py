"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from hrms_payroll.database import init_db
from hrms_payroll.services import PayrollRunService, PayrollStatisticsService


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    _, session_factory = init_db()
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def get_organization_id(
    x_organization_id: Annotated[str | None, Header()] = None
) -> UUID:
    """Extract organization ID from header."""
    if not x_organization_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Organization-ID header is required",
        )
    try:
        return UUID(x_organization_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid X-Organization-ID format",
        )


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
OrganizationId = Annotated[UUID, Depends(get_organization_id)]


def get_payroll_run_service(db: DbSession) -> PayrollRunService:
    return PayrollRunService(db)


def get_statistics_service(db: DbSession) -> PayrollStatisticsService:
    return PayrollStatisticsService(db)


RunService = Annotated[PayrollRunService, Depends(get_payroll_run_service)]
StatisticsService = Annotated[PayrollStatisticsService, Depends(get_statistics_service)]
