"""
Content router: per-resource read/save endpoints for the admin panel and public site
"""
from fastapi import APIRouter, Body, Depends, HTTPException, status
from typing import Any, List
import logging
from datetime import datetime, timezone

from app.dependencies import get_content_service
from app.apps.content.schemas import (
    ContentStruct,
    DbStatusResponse,
    DriversSaveResponse,
    PingResponse,
    ResourceId,
    SaveResponse,
)
from app.apps.content.services import ContentService, InvalidContentPayload
from app.apps.content.services.content_service import validate_resource_payload
from app.apps.content.utils.driver_ranking import rank_drivers
from app.apps.content.utils.sitemap import DEFAULT_SITEMAP, SITEMAP_ID, with_core_links

logger = logging.getLogger(__name__)

router = APIRouter()


async def _read(service: ContentService, content_id: str, label: str) -> Any:
    try:
        return await service.get_content(content_id, [])
    except Exception as e:
        logger.error(f"Error reading {label}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to read {label}"
        )


async def _save(service: ContentService, content_id: str, payload: Any, label: str) -> SaveResponse:
    try:
        ok = await service.save_content(content_id, payload)
    except InvalidContentPayload as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Error saving {label}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save {label}"
        )

    if not ok:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save {label}"
        )
    return SaveResponse(success=True)


@router.get("/ping", response_model=PingResponse)
async def ping():
    """Liveness check used by the admin panel"""
    return PingResponse(pong=True, time=datetime.now(timezone.utc).isoformat())


@router.get("/db-status", response_model=DbStatusResponse)
async def db_status(service: ContentService = Depends(get_content_service)):
    """Database connectivity check (SELECT 1)"""
    reachable = await service.db_store.ping()
    if not reachable:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "status": "error",
                "message": "Database connection failed",
                "healthy": service.health.is_healthy(),
            }
        )
    return DbStatusResponse(
        status="connected",
        details="Database is reachable",
        healthy=service.health.is_healthy(),
    )


# Site content (pages)
@router.get("/site-content")
async def get_site_content(service: ContentService = Depends(get_content_service)):
    return await _read(service, ResourceId.SITE_CONTENT.value, "site content")


@router.get("/get-content")
async def get_content(service: ContentService = Depends(get_content_service)):
    """Alias of /site-content kept for the public site"""
    return await _read(service, ResourceId.SITE_CONTENT.value, "content")


@router.post("/save-content", response_model=SaveResponse)
async def save_content(
    payload: Any = Body(...),
    service: ContentService = Depends(get_content_service),
):
    """Save pages; pages missing from the payload are kept"""
    return await _save(service, ResourceId.SITE_CONTENT.value, payload, "content")


# Events
@router.get("/events")
async def get_events(service: ContentService = Depends(get_content_service)):
    return await _read(service, ResourceId.EVENTS.value, "events")


@router.post("/events", response_model=SaveResponse)
async def save_events(
    payload: Any = Body(...),
    service: ContentService = Depends(get_content_service),
):
    return await _save(service, ResourceId.EVENTS.value, payload, "events")


# News
@router.get("/news")
async def get_news(service: ContentService = Depends(get_content_service)):
    return await _read(service, ResourceId.NEWS.value, "news")


@router.post("/news", response_model=SaveResponse)
async def save_news(
    payload: Any = Body(...),
    service: ContentService = Depends(get_content_service),
):
    return await _save(service, ResourceId.NEWS.value, payload, "news")


# Gallery photos
@router.get("/gallery-photos")
async def get_gallery_photos(service: ContentService = Depends(get_content_service)):
    return await _read(service, ResourceId.GALLERY_PHOTOS.value, "gallery photos")


@router.post("/gallery-photos", response_model=SaveResponse)
async def save_gallery_photos(
    payload: Any = Body(...),
    service: ContentService = Depends(get_content_service),
):
    return await _save(service, ResourceId.GALLERY_PHOTOS.value, payload, "gallery photos")


# Videos
@router.get("/videos")
async def get_videos(service: ContentService = Depends(get_content_service)):
    return await _read(service, ResourceId.VIDEOS.value, "videos")


@router.post("/videos", response_model=SaveResponse)
async def save_videos(
    payload: Any = Body(...),
    service: ContentService = Depends(get_content_service),
):
    return await _save(service, ResourceId.VIDEOS.value, payload, "videos")


# Drivers
@router.get("/drivers")
async def get_drivers(service: ContentService = Depends(get_content_service)):
    return await _read(service, ResourceId.DRIVERS.value, "drivers")


@router.post("/drivers", response_model=DriversSaveResponse)
async def save_drivers(
    payload: Any = Body(...),
    service: ContentService = Depends(get_content_service),
):
    """
    Save driver standings.
    Drivers of each category are re-ranked by points before saving;
    the response echoes the categories that were stored.
    """
    try:
        accepted = validate_resource_payload(ResourceId.DRIVERS.value, payload)
    except InvalidContentPayload as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    categories: List[Any] = rank_drivers(accepted)
    await _save(service, ResourceId.DRIVERS.value, categories, "drivers")
    return DriversSaveResponse(success=True, data=categories)


# Composite document
@router.get("/content-struct", response_model=ContentStruct)
async def get_content_struct(service: ContentService = Depends(get_content_service)):
    """Every resource plus schemaVersion / updatedAt"""
    return await _read(service, service.struct_id, "content structure")


@router.post("/content-struct", response_model=SaveResponse)
async def save_content_struct(
    payload: Any = Body(...),
    service: ContentService = Depends(get_content_service),
):
    """Resources present in the payload replace the stored ones; others are untouched"""
    return await _save(service, service.struct_id, payload, "content structure")


# Admin sitemap (written through /content/sitemap)
@router.get("/sitemap")
async def get_sitemap(service: ContentService = Depends(get_content_service)):
    sitemap = await service.get_content(SITEMAP_ID, DEFAULT_SITEMAP)
    return with_core_links(sitemap)


# Generic access by id (legacy ids are stored as-is)
@router.get("/content/{content_id}")
async def get_content_by_id(
    content_id: str,
    service: ContentService = Depends(get_content_service),
):
    return await _read(service, content_id, content_id)


@router.post("/content/{content_id}", response_model=SaveResponse)
async def save_content_by_id(
    content_id: str,
    payload: Any = Body(...),
    service: ContentService = Depends(get_content_service),
):
    return await _save(service, content_id, payload, content_id)
