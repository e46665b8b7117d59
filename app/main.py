# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Superhero Catalog API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   poetry run uvicorn app.main:app --reload
#   poetry run python -m app.main   (uses API_HOST / API_PORT)
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    SuperheroCatalogException,
    superhero_catalog_exception_handler,
    validation_exception_handler,
)
from app.routers import health, superheroes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    The Supabase client is created lazily on the first store call, so
    startup only logs the effective configuration.
    """
    logger.info(f"Starting Superhero Catalog API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    logger.info(
        f"Record table: {settings.SUPERHEROES_TABLE}, "
        f"storage bucket: {settings.STORAGE_BUCKET}/{settings.STORAGE_FOLDER}"
    )

    yield

    logger.info("Shutting down Superhero Catalog API")


# Create FastAPI application
app = FastAPI(
    title="Superhero Catalog API",
    description="""
## Superhero Catalog

Create, browse, edit and delete superheroes with up to 5 images per upload.

### Quick Start

```bash
# 1. Create a superhero
curl -X POST http://localhost:5501/resources \\
  -F "nickname=Nightcrawler" -F "real_name=Kurt Wagner" \\
  -F "origin_description=Born in Bavaria" -F "catch_phrase=Bamf!" \\
  -F "superpowers=teleportation" -F "images=@kurt.png"

# 2. List the newest five
curl "http://localhost:5501/resources?page=1&limit=5"

# 3. Remove one image
curl -X DELETE "http://localhost:5501/resources/{id}/image?url=..."
```
""",
    version=health.API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Superheroes",
            "description": "Create, list, update and delete superheroes and their images",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(SuperheroCatalogException)
async def handle_superhero_catalog_exception(request: Request, exc: SuperheroCatalogException):
    """Handle custom Superhero Catalog exceptions."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: [{exc.code}] {exc.message}")
    return await superhero_catalog_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    """Handle malformed requests (missing query params, bad multipart)."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

app.include_router(
    health.router,
    tags=["Health"]
)

app.include_router(
    superheroes.router,
    prefix="/resources",
    tags=["Superheroes"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Superhero Catalog API",
        "version": health.API_VERSION,
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.is_development,
    )
