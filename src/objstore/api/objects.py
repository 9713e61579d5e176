"""Objects API router - /upload, /download and /list endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response
from pydantic import BaseModel

from objstore.core.objects.store import ObjectListing, ObjectStore
from objstore.exceptions import (
    DurableLayerError,
    InvalidObjectKeyError,
    ObjectAlreadyExistsError,
)
from objstore.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["objects"])


# -----------------------------------------------------------------------------
# Response Models
# -----------------------------------------------------------------------------


class UploadResponse(BaseModel):
    """Response for POST /upload/{key}."""

    key: str
    size: int
    status: str = "saved"


# -----------------------------------------------------------------------------
# Dependency Injection
# -----------------------------------------------------------------------------


def get_object_store(request: Request) -> ObjectStore:
    """Get the ObjectStore built during application startup."""
    return request.app.state.object_store


ObjectStoreDep = Annotated[ObjectStore, Depends(get_object_store)]


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------


@router.post("/upload/{key}")
async def upload_object(
    key: str,
    request: Request,
    store: ObjectStoreDep,
) -> UploadResponse:
    """Store the raw request body under `key`."""
    data = await request.body()

    try:
        obj = await store.save(key, data)
    except InvalidObjectKeyError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ObjectAlreadyExistsError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except DurableLayerError as e:
        logger.error("Upload failed", key=key, error=str(e))
        raise HTTPException(status_code=500, detail=f"Upload failed: {e}")

    return UploadResponse(key=obj.key, size=obj.size)


@router.get("/download/{key}")
async def download_object(key: str, store: ObjectStoreDep) -> Response:
    """Return the stored bytes of `key`."""
    try:
        body = await store.load(key)
    except InvalidObjectKeyError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except DurableLayerError as e:
        logger.error("Download failed", key=key, error=str(e))
        raise HTTPException(status_code=500, detail=f"Download failed: {e}")

    if body is None:
        raise HTTPException(status_code=404, detail=f"Object {key} not found")

    return Response(content=body, media_type="application/octet-stream")


@router.get("/list", response_model=list[ObjectListing])
async def list_objects(store: ObjectStoreDep) -> list[ObjectListing]:
    """List every stored object and whether it is cached in memory."""
    try:
        return await store.list_objects()
    except DurableLayerError as e:
        logger.error("Listing failed", error=str(e))
        raise HTTPException(status_code=500, detail=f"Listing failed: {e}")
