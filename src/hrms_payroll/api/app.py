"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hrms_payroll.api.routes import (
    health_router,
    payroll_runs_router,
    payslips_router,
    reports_router,
)
from hrms_payroll.config import configure_logging, get_settings
from hrms_payroll.database import dispose_db, init_db
from hrms_payroll.exceptions import (
    ConcurrentTransitionError,
    InvalidTransitionError,
    NotFoundError,
    PayrollError,
    PayrollProcessingError,
    PayrollRunAlreadyExistsError,
    PayrollValidationError,
    PayslipFinalizedError,
)

logger = logging.getLogger(__name__)

# Most specific first
ERROR_STATUS_CODES: list[tuple[type[PayrollError], int]] = [
    (PayrollRunAlreadyExistsError, status.HTTP_409_CONFLICT),
    (PayrollValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidTransitionError, status.HTTP_409_CONFLICT),
    (PayslipFinalizedError, status.HTTP_409_CONFLICT),
    (ConcurrentTransitionError, status.HTTP_409_CONFLICT),
    (PayrollProcessingError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def status_code_for(exc: PayrollError) -> int:
    """HTTP status for a payroll error."""
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    configure_logging()
    init_db()
    yield
    await dispose_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="HRMS Payroll API",
        description="Payroll run lifecycle and payslip calculation",
        version="0.1.0",
        debug=get_settings().debug,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(PayrollError)
    async def payroll_error_handler(request: Request, exc: PayrollError) -> JSONResponse:
        """Map typed payroll errors onto the error envelope."""
        status_code = status_code_for(exc)
        if status_code >= 500:
            logger.error("Request %s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status_code,
            content={"detail": str(exc), "code": exc.code},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(payroll_runs_router, prefix="/api/v1")
    app.include_router(payslips_router, prefix="/api/v1")
    app.include_router(reports_router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()
