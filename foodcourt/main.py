"""
FastAPI Application Entry Point

Campus Food Court API - vendors, menus and orders.
Serves data from PostgreSQL while it is reachable and from the built-in
fallback data set while it is not.

Endpoints:
    - GET /health, /api/health: Liveness, uptime and database state
    - GET /api/vendors: Active vendors
    - GET /api/menu/{vendor_id}, /api/menu?vendorId=: Available menu items
    - GET /api/foods: Every menu item
    - GET /api/orders: Most recent orders
    - GET /api/orders/{order_id}: Single order
    - POST /api/orders: Create order
    - PATCH /api/orders/{order_id}/status: Update order status

Version: 1.0.0
"""

import asyncio
import logging
import os
import sys
import time
from contextlib import asynccontextmanager, suppress
from datetime import datetime, timezone
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from foodcourt.core.config import Settings, get_settings, setup_logging
from foodcourt.database import DataStore, StoreError, StoreUnavailableError
from foodcourt.middleware import RequestLoggerMiddleware
from foodcourt.models import SCHEMA_VERSION
from foodcourt.repositories import (
    BaseFoodCourtRepository,
    MockFoodCourtRepository,
    SqlFoodCourtRepository,
    get_repository,
)
from foodcourt.schemas import (
    ErrorResponse,
    HealthResponse,
    MenuItemResponse,
    OrderCreate,
    OrderResponse,
    OrderStatusUpdate,
    OrderStatusUpdateResponse,
    VendorResponse,
)

logger = logging.getLogger(__name__)

EXIT_FAULT = 1

router = APIRouter()


# =============================================================================
# FAULT HANDLING
# =============================================================================

def terminate(code: int = EXIT_FAULT) -> None:
    """Flush logs and end the process immediately."""
    logging.shutdown()
    os._exit(code)


def handle_loop_exception(loop: asyncio.AbstractEventLoop, context: dict) -> None:
    """
    Event loop exception handler.

    Exceptions nobody awaited (background tasks, callbacks) are
    unrecoverable: log them and exit with EXIT_FAULT.
    """
    exc = context.get("exception")
    if exc is None or isinstance(exc, asyncio.CancelledError):
        loop.default_exception_handler(context)
        return

    logger.critical(
        f"Unhandled exception outside a request: {context.get('message', '')}",
        exc_info=exc,
    )
    terminate()


def handle_uncaught_exception(exc_type, exc_value, exc_traceback) -> None:
    """sys.excepthook: log the fault; the interpreter then exits with status 1."""
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return
    logger.critical("Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback))


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    settings: Settings = app.state.settings
    store: DataStore = app.state.data_store

    # Startup
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Fallback data: {'enabled' if settings.fallback_enabled else 'disabled'}")
    logger.info("=" * 60)

    asyncio.get_running_loop().set_exception_handler(handle_loop_exception)

    if await store.connect():
        await store.init_schema()

    monitor: Optional[asyncio.Task] = None
    if settings.db_health_check_interval > 0:
        monitor = asyncio.create_task(store.run_monitor(settings.db_health_check_interval))
        logger.info(f"✅ Database monitor every {settings.db_health_check_interval}s")

    logger.info("✅ Application ready!")

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    if monitor is not None:
        monitor.cancel()
        with suppress(asyncio.CancelledError):
            await monitor
    await store.dispose()
    logger.info("✅ Cleanup complete")


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@router.get("/", tags=["Root"])
async def root(request: Request) -> dict[str, str]:
    """API root with navigation links."""
    settings: Settings = request.app.state.settings
    return {
        "message": f"🍔 Welcome to {settings.app_name}",
        "version": settings.app_version,
        "documentation": "/docs",
        "health": "/health",
        "api": "/api",
    }


@router.get("/health", response_model=HealthResponse, tags=["Health"], summary="System Health Check")
@router.get("/api/health", response_model=HealthResponse, tags=["Health"], include_in_schema=False)
async def health_check(request: Request) -> HealthResponse:
    """Report liveness and database state. Always 200."""
    settings: Settings = request.app.state.settings
    store: DataStore = request.app.state.data_store

    return HealthResponse(
        status="healthy" if store.connected else "degraded",
        timestamp=datetime.now(timezone.utc),
        uptime=round(time.monotonic() - request.app.state.started_at, 3),
        service=settings.app_name,
        version=settings.app_version,
        schema_version=SCHEMA_VERSION,
        database="connected" if store.connected else "disconnected",
    )


# =============================================================================
# VENDOR & MENU ENDPOINTS
# =============================================================================

@router.get("/api/vendors", response_model=List[VendorResponse], tags=["Vendors"])
async def list_vendors(
    repo: BaseFoodCourtRepository = Depends(get_repository),
) -> List[VendorResponse]:
    """List active vendors."""
    return await repo.list_vendors()


@router.get("/api/menu/{vendor_id}", response_model=List[MenuItemResponse], tags=["Menu"])
async def vendor_menu(
    vendor_id: int,
    repo: BaseFoodCourtRepository = Depends(get_repository),
) -> List[MenuItemResponse]:
    """List available menu items of one vendor (empty for unknown vendors)."""
    return await repo.list_menu(vendor_id)


@router.get("/api/menu", response_model=List[MenuItemResponse], tags=["Menu"])
async def menu(
    vendor_id: Optional[int] = Query(None, alias="vendorId"),
    repo: BaseFoodCourtRepository = Depends(get_repository),
) -> List[MenuItemResponse]:
    """List available menu items, optionally for one vendor."""
    return await repo.list_menu(vendor_id)


@router.get("/api/foods", response_model=List[MenuItemResponse], tags=["Menu"])
async def list_foods(
    repo: BaseFoodCourtRepository = Depends(get_repository),
) -> List[MenuItemResponse]:
    """List every menu item regardless of vendor or availability."""
    return await repo.list_foods()


# =============================================================================
# ORDER ENDPOINTS
# =============================================================================

@router.get("/api/orders", response_model=List[OrderResponse], tags=["Orders"])
async def list_orders(
    request: Request,
    repo: BaseFoodCourtRepository = Depends(get_repository),
) -> List[OrderResponse]:
    """Most recent orders, newest first."""
    return await repo.list_orders(request.app.state.settings.orders_list_limit)


@router.get(
    "/api/orders/{order_id}",
    response_model=OrderResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Orders"],
)
async def get_order(
    order_id: int,
    repo: BaseFoodCourtRepository = Depends(get_repository),
) -> OrderResponse:
    """Get a specific order by ID."""
    order = await repo.get_order(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.post(
    "/api/orders",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    tags=["Orders"],
    summary="Create Order",
)
async def create_order(
    order_data: OrderCreate,
    repo: BaseFoodCourtRepository = Depends(get_repository),
) -> OrderResponse:
    """
    Create a new order with status ``pending``.

    The vendor must exist and be active.
    """
    logger.info(f"Creating order for: {order_data.customer_name}")

    if not await repo.vendor_exists(order_data.vendor_id):
        raise HTTPException(status_code=400, detail=f"Vendor {order_data.vendor_id} not found")

    return await repo.create_order(order_data)


@router.patch(
    "/api/orders/{order_id}/status",
    response_model=OrderStatusUpdateResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    tags=["Orders"],
)
@router.put("/api/orders/{order_id}/status", response_model=OrderStatusUpdateResponse, include_in_schema=False)
async def update_order_status(
    order_id: int,
    update: OrderStatusUpdate,
    repo: BaseFoodCourtRepository = Depends(get_repository),
) -> OrderStatusUpdateResponse:
    """Set the status of an order."""
    order = await repo.update_order_status(order_id, update.status)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")

    return OrderStatusUpdateResponse(
        message="Order status updated",
        order_id=order.id,
        status=order.status,
    )


# =============================================================================
# ERROR HANDLERS
# =============================================================================

def _error(status_code: int, error: str, detail: Any = None) -> JSONResponse:
    body = ErrorResponse(error=error, detail=detail)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed payloads are rejected with 400."""
    logger.warning(f"Rejected {request.method} {request.url.path}: {len(exc.errors())} invalid field(s)")
    # Raw inputs are left out; they may hold values JSON cannot carry (Infinity, NaN)
    errors = [{key: e[key] for key in ("type", "loc", "msg") if key in e} for e in exc.errors()]
    return _error(400, "Invalid request", jsonable_encoder(errors))


async def store_exception_handler(request: Request, exc: StoreError) -> JSONResponse:
    settings: Settings = request.app.state.settings
    if isinstance(exc, StoreUnavailableError):
        return _error(503, "Database unavailable")

    logger.error(f"Database error on {request.method} {request.url.path}: {exc.message}")
    return _error(500, "Database error", exc.message if settings.debug else None)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    settings: Settings = request.app.state.settings
    logger.exception(f"Unhandled exception: {exc}")

    return _error(
        500,
        "Internal Server Error",
        str(exc) if settings.debug else "An unexpected error occurred",
    )


async def catch_unhandled_exceptions(request: Request, call_next):
    """
    Turn unexpected exceptions into the 500 JSON body inside the middleware
    stack, so CORS and the request logger still see the response.
    """
    try:
        return await call_next(request)
    except Exception as exc:
        return await global_exception_handler(request, exc)


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

def create_app(settings: Optional[Settings] = None, data_store: Optional[DataStore] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to use (defaults to the cached environment settings)
        data_store: Pre-built DataStore (defaults to one built from settings)
    """
    settings = settings or get_settings()
    setup_logging(settings=settings)

    app = FastAPI(
        title=settings.app_name,
        description="Vendors, menus and orders for the campus food court.",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    store = data_store or DataStore(settings)
    app.state.settings = settings
    app.state.data_store = store
    app.state.sql_repository = SqlFoodCourtRepository(store)
    app.state.mock_repository = MockFoodCourtRepository()
    app.state.started_at = time.monotonic()

    app.include_router(router)

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StoreError, store_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    app.middleware("http")(catch_unhandled_exceptions)
    # Added last so it wraps everything, including the request logger
    app.add_middleware(RequestLoggerMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
        allow_headers=["Content-Type", "Authorization"],
    )

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    sys.excepthook = handle_uncaught_exception
    settings = get_settings()
    logger.info(f"📍 Health check: http://localhost:{settings.api_port}/health")
    logger.info(f"📍 API base URL: http://localhost:{settings.api_port}/api")
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_config=None)


if __name__ == "__main__":
    run()
