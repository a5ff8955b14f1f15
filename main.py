import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from tinylink.config import settings
from tinylink.dependencies import get_storage
from tinylink.logging_config import setup_logging
from tinylink.api.v1 import links, redirect
from tinylink.storage.factory import StorageFactory

setup_logging(
    level=settings.log_level,
    log_file=settings.log_file or None,
    json_format=settings.log_json,
)

STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Release the shared link storage on shutdown"""
    yield
    await StorageFactory.shutdown()
    get_storage.cache_clear()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Short links with click tracking",
    debug=settings.debug,
    lifespan=lifespan,
)


@app.get("/")
def read_root():
    """Root endpoint with API information"""
    return {
        "message": f"{settings.app_name} backend running",
        "version": settings.app_version,
        "api": "/api/links",
        "base_url": settings.base_url,
        "docs": "/docs",
    }


@app.get("/healthz")
def health_check():
    """Health check endpoint"""
    return {
        "ok": True,
        "version": settings.app_version,
        "uptime": round(time.monotonic() - STARTED_AT, 3),
        "environment": settings.environment,
    }


######## Include routers
app.include_router(links.router, prefix="/api")
# Catch-all /{code} goes last so it never shadows the routes above
app.include_router(redirect.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.host, port=settings.port, reload=settings.debug)
