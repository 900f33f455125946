"""
Shared dependencies for FastAPI routes
"""
from fastapi import HTTPException, Request, status

from app.apps.content.services import ContentService


def get_content_service(request: Request) -> ContentService:
    """
    Content service created on startup
    Usage: async def endpoint(service: ContentService = Depends(get_content_service))
    """
    service = getattr(request.app.state, "content_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Content service is not initialized"
        )
    return service
