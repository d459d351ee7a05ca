"""
PM Scan Engine - Main FastAPI Application
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Generation ledger endpoints; snapshot loaded on startup
v1.0.0 (2026-10-05): Initial FastAPI application (scan + PM generation)
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from config import settings, init_directories
from api import scan, pm_generation, admin
from services.entity_store import get_store
from services.sheet_client import RemoteError

init_directories()

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(f'{settings.LOGS_DIR}/api.log'),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    # Initialize database
    from models import init_db
    await init_db()

    # Load entity snapshot
    if settings.LOAD_SNAPSHOT_ON_STARTUP and settings.SHEET_API_URL:
        try:
            await get_store().reload()
        except RemoteError as e:
            # Scans answer 503 until /api/admin/reload succeeds
            logger.error(f"Initial snapshot load failed: {e}")
    else:
        logger.info("Snapshot load skipped (no SHEET_API_URL or disabled)")

    yield

    logger.info("Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Scan resolution and preventive maintenance work order generation",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure properly in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(scan.router, prefix="/api", tags=["Scan"])
app.include_router(pm_generation.router, prefix="/api", tags=["PM Generation"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])


@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    store = get_store()
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "app": settings.APP_NAME,
        "snapshot_loaded": store.is_loaded,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
        workers=settings.API_WORKERS
    )
