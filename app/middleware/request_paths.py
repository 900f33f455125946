"""
Request logging and trailing-slash normalization for /api routes
"""
import logging

logger = logging.getLogger(__name__)


class ApiPathMiddleware:
    """
    Logs every HTTP request and strips a trailing slash from /api/... paths
    so "/api/events/" routes like "/api/events".
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] == "http":
            path = scope["path"]
            logger.info(f"{scope['method']} {path}")
            if path.startswith("/api/") and len(path) > 5 and path.endswith("/"):
                scope = dict(scope)
                scope["path"] = path.rstrip("/")
        await self.app(scope, receive, send)


def setup_api_paths(app):
    """
    Usage:
        from app.middleware.request_paths import setup_api_paths
        setup_api_paths(app)
    """
    app.add_middleware(ApiPathMiddleware)
