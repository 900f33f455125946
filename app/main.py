"""
FastAPI application entry point
Main application initialization
"""
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from datetime import datetime, timezone
from app.config import DEBUG, MODE, PORT, WEB_DATA_DIR, DB_INIT_RETRIES
from app.middleware.cors import setup_cors
from app.middleware.request_paths import setup_api_paths
from app.database import close_db
from app.apps.content.services import create_content_service
import logging

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if DEBUG else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Forsaj Content API",
    description="Content storage for the Forsaj Club admin panel and public site",
    version="1.2.6",
    debug=DEBUG,
)

# Setup middleware
setup_cors(app)
setup_api_paths(app)


@app.on_event("startup")
async def startup_event():
    """Create the content service and connect to the database in the background"""
    logger.info(f"Starting application in {MODE} mode")
    try:
        WEB_DATA_DIR.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Failed to ensure directory: {WEB_DATA_DIR} ({e})")

    service = create_content_service()
    app.state.content_service = service
    # Requests are served from files until the database is ready
    service.start_connect(retries=DB_INIT_RETRIES)
    logger.info("Application started successfully")


@app.on_event("shutdown")
async def shutdown_event():
    """Close database connections on shutdown"""
    logger.info("Shutting down application")
    service = getattr(app.state, "content_service", None)
    if service is not None:
        await service.shutdown()
    await close_db()
    logger.info("Application shut down successfully")


@app.get("/")
async def root():
    """Root endpoint"""
    return JSONResponse({
        "message": "Forsaj Backend API is running. Use /health for details.",
        "version": app.version,
        "mode": MODE,
        "status": "running"
    })


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    service = getattr(app.state, "content_service", None)
    return JSONResponse({
        "status": "ok",
        "mode": MODE,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "healthy" if service is not None and service.health.is_healthy() else "unavailable",
    })


# Include routers
from app.apps.content.router import router as content_router
app.include_router(content_router, prefix="/api", tags=["content"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=PORT,
        reload=DEBUG,
        log_level="debug" if DEBUG else "info"
    )
