"""FastAPI application for sheet-calc."""

import uuid
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sheet_calc.config import settings, validate_settings_on_startup
from sheet_calc.models import (
    ERROR_RESULT,
    AddCellRequest,
    CascadeWarning,
    CellResponse,
    ErrorDetail,
    HealthResponse,
)
from sheet_calc.services.sheet_service import CellResult, SheetService
from sheet_calc.services.sheet_store import InMemorySheetStore, SheetStore
from sheet_calc.utils.exceptions import CalculationError, ErrorCode, SheetCalcError
from sheet_calc.utils.logging import (
    clear_context,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)

# Configure structured logging using settings
configure_logging(
    level=settings.log_level_int,
    use_structured_formatter=True,
)
logger = get_logger(__name__)

VERSION = "0.1.0"


def _cell_response(result: CellResult) -> CellResponse:
    warnings = [
        CascadeWarning(cell=failure.cell_name, message=failure.message)
        for failure in result.warnings
    ]
    return CellResponse(
        value=result.value,
        result=result.result,
        warnings=warnings or None,
    )


def create_app(store: SheetStore | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        store: Cell store to serve. A fresh in-memory store is used when
            not given.
    """
    app = FastAPI(
        title="Sheet Calc API",
        description=(
            "Stores cells of case-insensitive sheets and calculates formula "
            "cells that refer to other cells of the same sheet."
        ),
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.sheet_service = SheetService(
        store if store is not None else InMemorySheetStore(),
        max_depth=settings.max_resolution_depth,
        cascade_enabled=settings.cascade_enabled,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    validate_settings_on_startup(settings)

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next: Any) -> Any:
        """Assign a request ID for log correlation and echo it back.

        An incoming X-Request-ID header is reused; otherwise a new one is
        generated.
        """
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        set_request_id(request_id)
        request.state.request_id = request_id

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_context()

    @app.exception_handler(SheetCalcError)
    async def sheet_calc_exception_handler(
        request: Request, exc: SheetCalcError
    ) -> JSONResponse:
        """Turn domain exceptions into structured error responses."""
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.warning(
            f"Request failed: {exc.message}",
            error_code=exc.error_code.value,
            http_status=exc.http_status,
        )
        return JSONResponse(
            status_code=exc.http_status,
            content=ErrorDetail(
                detail=exc.message,
                error_code=exc.error_code.value,
                details=exc.details if exc.details else None,
                request_id=request_id,
            ).model_dump(exclude_none=True),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        """Custom exception handler for HTTP exceptions."""
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.warning(
            f"HTTP Error: {exc.detail}",
            status_code=exc.status_code,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorDetail(
                detail=str(exc.detail),
                request_id=request_id,
            ).model_dump(exclude_none=True),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all handler that hides internals unless debug is on."""
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.exception(
            f"Unexpected error: {type(exc).__name__}",
            error_type=type(exc).__name__,
        )
        if settings.debug:
            detail = f"Internal server error: {type(exc).__name__}: {exc}"
        else:
            detail = "An error occurred."

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorDetail.from_error_code(
                ErrorCode.INTERNAL_ERROR,
                detail=detail,
                request_id=request_id,
            ).model_dump(exclude_none=True),
        )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> dict[str, Any]:
        """Check the health status of the service."""
        logger.debug("Health check requested")
        return {
            "status": "healthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "version": VERSION,
        }

    @app.post(
        "/api/v1/{sheet_name}/{cell_name}",
        response_model=CellResponse,
        response_model_exclude_none=True,
        status_code=status.HTTP_201_CREATED,
        tags=["Cells"],
        responses={
            400: {"model": ErrorDetail, "description": "Blank sheet or cell name"},
            422: {
                "model": CellResponse,
                "description": "Value cannot be calculated; nothing was stored",
            },
        },
    )
    def add_cell(
        request: Request, sheet_name: str, cell_name: str, body: AddCellRequest
    ) -> Any:
        """Create or overwrite a cell.

        The value is calculated before it is stored. If that fails the
        value is echoed back with result ``ERROR`` and status 422, and the
        stored cell (if any) keeps its previous value.

        Cells whose formulas mention the written cell are re-calculated;
        those that no longer calculate are listed under ``warnings``.
        """
        service: SheetService = request.app.state.sheet_service
        try:
            result = service.add_cell(sheet_name, cell_name, body.value)
        except CalculationError:
            return JSONResponse(
                status_code=422,
                content=CellResponse(value=body.value, result=ERROR_RESULT).model_dump(
                    exclude_none=True
                ),
            )
        return _cell_response(result)

    @app.get(
        "/api/v1/{sheet_name}",
        response_model=dict[str, CellResponse],
        response_model_exclude_none=True,
        tags=["Sheets"],
        responses={404: {"model": ErrorDetail, "description": "Sheet not found"}},
    )
    def get_sheet(request: Request, sheet_name: str) -> dict[str, CellResponse]:
        """Get every cell of a sheet with its current result."""
        service: SheetService = request.app.state.sheet_service
        cells = service.get_sheet(sheet_name)
        logger.debug("Sheet retrieved", sheet=sheet_name, cells=len(cells))
        return {name: _cell_response(result) for name, result in cells.items()}

    @app.get(
        "/api/v1/{sheet_name}/{cell_name}",
        response_model=CellResponse,
        response_model_exclude_none=True,
        tags=["Cells"],
        responses={404: {"model": ErrorDetail, "description": "Cell not found"}},
    )
    def get_cell(request: Request, sheet_name: str, cell_name: str) -> CellResponse:
        """Get a cell with its current result.

        A formula that cannot be calculated reports result ``ERROR``.
        """
        service: SheetService = request.app.state.sheet_service
        return _cell_response(service.get_cell(sheet_name, cell_name))

    logger.info("FastAPI application created successfully")
    return app


# Create the application instance
app = create_app()
