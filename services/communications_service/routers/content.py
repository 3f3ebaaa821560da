"""Slides and app copy endpoints."""

import uuid

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_caller
from libs.auth.models import CallerIdentity
from libs.db.session import get_async_db
from services.communications_service.schemas import (
    ContentBlockCreate,
    ContentBlockResponse,
    ContentBlockUpdate,
    SlideCreate,
    SlideResponse,
    SlideUpdate,
)
from services.communications_service.services import content_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/content", tags=["content"])


@router.get("/slides", response_model=list[SlideResponse])
async def list_slides(db: AsyncSession = Depends(get_async_db)):
    """Public: active slides in display order."""
    return await content_ops.list_slides(db)


@router.get("/slides/all", response_model=list[SlideResponse])
async def list_all_slides(
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await content_ops.list_all_slides(db, caller)


@router.post(
    "/slides", response_model=SlideResponse, status_code=status.HTTP_201_CREATED
)
async def create_slide(
    body: SlideCreate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await content_ops.create_slide(db, caller, body)


@router.patch("/slides/{slide_id}", response_model=SlideResponse)
async def update_slide(
    slide_id: uuid.UUID,
    body: SlideUpdate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await content_ops.update_slide(db, caller, slide_id=slide_id, data=body)


@router.delete("/slides/{slide_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_slide(
    slide_id: uuid.UUID,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    await content_ops.delete_slide(db, caller, slide_id=slide_id)


@router.get("/blocks", response_model=list[ContentBlockResponse])
async def list_content(db: AsyncSession = Depends(get_async_db)):
    return await content_ops.list_content(db)


@router.get("/blocks/all", response_model=list[ContentBlockResponse])
async def list_all_content(
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await content_ops.list_all_content(db, caller)


@router.get("/blocks/by-key/{key}", response_model=ContentBlockResponse)
async def get_content_by_key(key: str, db: AsyncSession = Depends(get_async_db)):
    return await content_ops.get_content_by_key(db, key)


@router.post(
    "/blocks",
    response_model=ContentBlockResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_content(
    body: ContentBlockCreate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await content_ops.create_content(db, caller, body)


@router.patch("/blocks/{block_id}", response_model=ContentBlockResponse)
async def update_content(
    block_id: uuid.UUID,
    body: ContentBlockUpdate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await content_ops.update_content(db, caller, block_id=block_id, data=body)


@router.delete("/blocks/{block_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_content(
    block_id: uuid.UUID,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    await content_ops.delete_content(db, caller, block_id=block_id)
