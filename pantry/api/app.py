"""
Pantry inventory HTTP API.

JSON endpoints over the inventory service. Every route except /health
requires a bearer token.
"""

import asyncio
import math
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, Query, Request

from pantry import __version__
from pantry.config.config_manager import ConfigManager, get_config_manager
from pantry.database.db_manager import DatabaseManager, create_database_manager, store_deadline
from pantry.models import ItemInput, QuantityAdjustment
from pantry.services import InventoryService
from pantry.utils import get_logger
from pantry.api.auth import get_current_user
from pantry.api.errors import setup_exception_handlers

public_router = APIRouter()
router = APIRouter(dependencies=[Depends(get_current_user)])


def get_inventory_service(request: Request) -> InventoryService:
    return request.app.state.inventory_service


async def run_with_timeout(request: Request, func: Callable, *args, **kwargs) -> Any:
    """
    Run a blocking service call in a worker thread under the request deadline.

    The store enforces api.request_timeout_seconds: a unit of work that has
    not committed in time is rolled back and StoreTimeoutError is raised.
    The call is awaited to completion, so the response always matches what
    the store applied.
    """
    timeout = request.app.state.config.get("api.request_timeout_seconds", 10.0)
    with store_deadline(time.monotonic() + timeout):
        return await asyncio.to_thread(func, *args, **kwargs)


@public_router.get("/health")
async def health_check(request: Request) -> Dict:
    """Health check endpoint."""
    service = getattr(request.app.state, "inventory_service", None)
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "store": "connected" if service else "disconnected",
    }


@router.get("/items")
async def list_items(
    request: Request,
    search: Optional[str] = None,
    category: Optional[str] = None,
    sort_by: str = Query("updatedAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    page: int = 1,
    limit: Optional[int] = None,
    service: InventoryService = Depends(get_inventory_service),
) -> Dict:
    """
    List items with search, category filter, sorting and pagination.

    Returns:
        Items on the requested page and pagination info
    """
    if limit is None:
        limit = request.app.state.config.get("query.default_page_size", 20)

    items, total = await run_with_timeout(
        request,
        service.list_items,
        search=search,
        category=category,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        page_size=limit,
    )

    return {
        "items": [item.to_api() for item in items],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": math.ceil(total / limit),
        },
    }


@router.get("/items/low-stock")
async def list_low_stock_items(
    request: Request,
    service: InventoryService = Depends(get_inventory_service),
) -> Dict:
    """Items at or below their reorder threshold."""
    items = await run_with_timeout(request, service.get_low_stock_items)
    return {"items": [item.to_api() for item in items]}


@router.post("/items", status_code=201)
async def create_item(
    request: Request,
    payload: ItemInput,
    user_id: str = Depends(get_current_user),
    service: InventoryService = Depends(get_inventory_service),
) -> Dict:
    """
    Create an item owned by the caller.

    Returns:
        The created item
    """
    item = await run_with_timeout(request, service.create_item, payload, user_id)
    return item.to_api()


@router.get("/items/{item_id}")
async def get_item(
    request: Request,
    item_id: str,
    service: InventoryService = Depends(get_inventory_service),
) -> Dict:
    """Get one item."""
    item = await run_with_timeout(request, service.get_item, item_id)
    return item.to_api()


@router.put("/items/{item_id}")
async def update_item(
    request: Request,
    item_id: str,
    payload: Dict[str, Any] = Body(...),
    user_id: str = Depends(get_current_user),
    service: InventoryService = Depends(get_inventory_service),
) -> Dict:
    """
    Replace all editable fields of an item.

    The body is validated by the service after the item is found, so an
    unknown id is reported as 404 whatever the body holds.

    Returns:
        The updated item
    """
    item = await run_with_timeout(request, service.update_item, item_id, payload, user_id)
    return item.to_api()


@router.delete("/items/{item_id}")
async def delete_item(
    request: Request,
    item_id: str,
    user_id: str = Depends(get_current_user),
    service: InventoryService = Depends(get_inventory_service),
) -> Dict:
    """Delete an item; its audit trail is kept."""
    item = await run_with_timeout(request, service.delete_item, item_id, user_id)
    return {"message": "Item deleted successfully", "id": item.item_id}


@router.post("/items/{item_id}/adjust")
async def adjust_quantity(
    request: Request,
    item_id: str,
    payload: QuantityAdjustment,
    user_id: str = Depends(get_current_user),
    service: InventoryService = Depends(get_inventory_service),
) -> Dict:
    """
    Apply a signed quantity change.

    Returns:
        The updated item and the old/new quantities
    """
    item, adjustment = await run_with_timeout(
        request,
        service.adjust_quantity,
        item_id,
        payload.delta,
        user_id,
        reason=payload.reason,
    )
    return {"item": item.to_api(), "adjustment": adjustment.to_api()}


@router.get("/items/{item_id}/audit")
async def get_audit_log(
    request: Request,
    item_id: str,
    limit: Optional[int] = None,
    service: InventoryService = Depends(get_inventory_service),
) -> Dict:
    """Audit trail of an item, newest first."""
    if limit is None:
        limit = request.app.state.config.get("audit.default_limit", 50)

    logs = await run_with_timeout(request, service.get_audit_log, item_id, limit=limit)
    return {"logs": [entry.to_api() for entry in logs]}


@router.get("/categories")
async def list_categories(
    request: Request,
    service: InventoryService = Depends(get_inventory_service),
) -> Dict:
    """Distinct item categories, sorted."""
    categories = await run_with_timeout(request, service.get_categories)
    return {"categories": categories}


@router.get("/stats")
async def get_stats(
    request: Request,
    service: InventoryService = Depends(get_inventory_service),
) -> Dict:
    """Inventory totals and low-stock count."""
    stats = await run_with_timeout(request, service.get_stats)
    return stats.to_api()


def create_app(
    config: Optional[ConfigManager] = None,
    db_manager: Optional[DatabaseManager] = None,
) -> FastAPI:
    """
    Build the API application.

    The database handle is opened once at startup and closed at shutdown.

    Args:
        config: Configuration (defaults to the global one)
        db_manager: Existing database manager (defaults to database.path)

    Returns:
        FastAPI application
    """
    config = config or get_config_manager()
    logger = get_logger("api")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db = db_manager or create_database_manager(
            config.get("database.path", "data/pantry.db"),
            config.get("database.timeout_seconds", 5.0),
        )
        db.initialize_database()
        app.state.inventory_service = InventoryService(
            db,
            max_page_size=config.get("query.max_page_size", 100),
            audit_max_limit=config.get("audit.max_limit", 500),
        )
        logger.info("Pantry API started")
        try:
            yield
        finally:
            app.state.inventory_service = None
            db.close()
            logger.info("Pantry API stopped")

    app = FastAPI(
        title="Pantry Inventory API",
        description="Kitchen inventory tracking with an append-only audit trail",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config

    setup_exception_handlers(app)
    app.include_router(public_router)
    app.include_router(router)

    return app
