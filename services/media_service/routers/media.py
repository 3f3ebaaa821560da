"""Media upload endpoints."""

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import get_caller
from libs.auth.models import CallerIdentity
from services.media_service.schemas import (
    ResolvedUrlResponse,
    UploadUrlRequest,
    UploadUrlResponse,
)
from services.media_service.services import media_ops
from services.media_service.storage import StorageService, get_storage_service

router = APIRouter(tags=["media"])


@router.post("/upload-url", response_model=UploadUrlResponse)
async def create_upload_url(
    body: UploadUrlRequest,
    caller: CallerIdentity = Depends(get_caller),
    storage: StorageService = Depends(get_storage_service),
):
    """Signed URL the client PUTs the file to."""
    return media_ops.create_upload_url(caller, filename=body.filename, storage=storage)


@router.get("/url", response_model=ResolvedUrlResponse)
async def resolve_url(
    path: str = Query(..., min_length=1),
    storage: StorageService = Depends(get_storage_service),
):
    return {"path": path, "url": media_ops.resolve_url(path=path, storage=storage)}
