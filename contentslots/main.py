"""
Content Slots Service - FastAPI application.
HTTP surface over the content slot repository.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse

from contentslots.config import settings
from contentslots.database import (
    ContentSlotRepository,
    DuplicateEntryError,
    StorageError,
    close_db_pool,
    get_content_slot_repository,
    get_db_pool,
)
from contentslots.logging_config import configure_logging
from contentslots.models import (
    ContentSlotIdResponse,
    ContentSlotListResponse,
    ContentSlotPayload,
    ContentSlotResponse,
    ErrorResponse,
    HealthResponse,
)

configure_logging(settings.LOG_LEVEL)

logger = structlog.get_logger()


# Lifespan context manager
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("content_slots_service_starting", table_prefix=settings.DB_TABLE_PREFIX)
    try:
        await get_db_pool()
    except Exception as e:
        logger.error("database_unavailable", error=str(e))

    yield

    # Shutdown
    logger.info("content_slots_service_stopping")
    await close_db_pool()


app = FastAPI(
    title="Content Slots Service",
    description="Grid-positioned content slots with per-slot options",
    version="1.0.0",
    lifespan=lifespan
)


async def get_repository() -> ContentSlotRepository:
    """Repository dependency; an unreachable database raises StorageError (503)."""
    return await get_content_slot_repository()


@app.exception_handler(DuplicateEntryError)
async def duplicate_entry_handler(request: Request, exc: DuplicateEntryError):
    return JSONResponse(
        status_code=409,
        content=ErrorResponse(error="Duplicate entry", code=exc.code).model_dump()
    )


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    return JSONResponse(
        status_code=503,
        content=ErrorResponse(error="Storage unavailable", code=exc.code).model_dump()
    )


@app.post("/content-slots", response_model=ContentSlotIdResponse, status_code=201)
async def create_content_slot(
    payload: ContentSlotPayload,
    repo: ContentSlotRepository = Depends(get_repository)
):
    """Create a content slot with its options."""
    content_slot_id = await repo.create_content_slot(
        payload.component_type,
        payload.view_id,
        payload.column_start,
        payload.row_start,
        payload.column_end,
        payload.row_end,
        payload.options
    )
    return ContentSlotIdResponse(id=content_slot_id)


@app.get("/content-slots", response_model=ContentSlotListResponse)
async def list_content_slots_by_component_type(
    component_type: str,
    repo: ContentSlotRepository = Depends(get_repository)
):
    """List content slots showing a component type (options not loaded)."""
    content_slots = await repo.get_content_slots_by_component_type(component_type)
    return ContentSlotListResponse(
        content_slots=[ContentSlotResponse(**slot.to_dict()) for slot in content_slots]
    )


@app.get("/content-slots/{content_slot_id}", response_model=ContentSlotResponse)
async def get_content_slot(
    content_slot_id: int,
    repo: ContentSlotRepository = Depends(get_repository)
):
    """Get one content slot with its options."""
    content_slot = await repo.get_one(content_slot_id)
    if not content_slot:
        raise HTTPException(status_code=404, detail="Content slot not found")

    return ContentSlotResponse(**content_slot.to_dict())


@app.get("/views/{view_id}/content-slots", response_model=ContentSlotListResponse)
async def list_content_slots_by_view(
    view_id: int,
    repo: ContentSlotRepository = Depends(get_repository)
):
    """List the content slots of a view with their options."""
    content_slots = await repo.get_content_slots_by_view_id(view_id)
    return ContentSlotListResponse(
        content_slots=[ContentSlotResponse(**slot.to_dict()) for slot in content_slots]
    )


@app.put("/content-slots/{content_slot_id}", response_model=ContentSlotIdResponse)
async def update_content_slot(
    content_slot_id: int,
    payload: ContentSlotPayload,
    repo: ContentSlotRepository = Depends(get_repository)
):
    """
    Replace a content slot and its options.

    The returned id is null when neither the slot nor its options changed.
    """
    result: Optional[int] = await repo.update_content_slot(
        content_slot_id,
        payload.component_type,
        payload.view_id,
        payload.column_start,
        payload.row_start,
        payload.column_end,
        payload.row_end,
        payload.options
    )
    return ContentSlotIdResponse(id=result)


@app.delete("/content-slots/{content_slot_id}", status_code=204)
async def delete_content_slot(
    content_slot_id: int,
    repo: ContentSlotRepository = Depends(get_repository)
):
    """Delete a content slot."""
    if await repo.delete_one(content_slot_id) is None:
        raise HTTPException(status_code=404, detail="Content slot not found")

    return Response(status_code=204)


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    try:
        pool = await get_db_pool()
        async with pool.acquire(timeout=settings.DB_ACQUIRE_TIMEOUT) as conn:
            await conn.fetchval("SELECT 1")

        return HealthResponse(status="healthy", database="connected")
    except Exception as e:
        logger.error("health_check_failed", error=str(e))
        return HealthResponse(status="unhealthy", database="disconnected")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.SERVICE_PORT)
