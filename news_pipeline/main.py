"""
News Pipeline API

FastAPI service that provides:
1. /api/v1/news/ingest - Enrich and store a submitted article
2. /api/v1/news/ingest/url, /ingest/rss - Scrape a page or feed, then enrich
3. /api/v1/news/{id}, /api/v1/news/ - Read stored articles
4. /health - Health check with the active storage backend

Architecture:
- FastAPI for REST API
- Provider fallback chains (OpenRouter, Pexels, YouTube, Wikipedia, Google) with offline mocks
- Redis as the durable store, local JSON file when Redis is unreachable
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.routes import router
from .core.config import Settings, get_settings
from .core.logging import setup_logging
from .exceptions import IngestionError, NewsNotFoundError, PersistenceError, ProcessingError
from .middleware.security import SecurityMiddleware
from .services.document_store import create_redis_client
from .services.news import build_news_service

logger = logging.getLogger(__name__)

SERVICE_NAME = "SWEN AI News Pipeline"


def create_app(settings: Optional[Settings] = None, http_client: Optional[httpx.AsyncClient] = None) -> FastAPI:
    """Build the API. ``http_client`` overrides the outbound client (tests)."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events."""
        logger.info(f"🚀 Starting {SERVICE_NAME} ({settings.app_env})...")
        client = http_client or httpx.AsyncClient(
            headers={"User-Agent": settings.user_agent},
            timeout=settings.provider_timeout_seconds,
        )
        redis_client = create_redis_client(settings)
        news_service = build_news_service(settings, client, redis_client)

        app.state.settings = settings
        app.state.http_client = client
        app.state.news_service = news_service
        logger.info(f"✅ Storage backend: {await news_service.gateway.backend_name()}")

        yield

        logger.info("🔄 Shutting down...")
        await news_service.gateway.close()
        if http_client is None:
            await client.aclose()
        logger.info("✅ Shutdown complete")

    app = FastAPI(
        title="News Pipeline API",
        description="REST API for AI-enriched news ingestion",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(SecurityMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Request logging middleware."""
        start = time.time()
        response = await call_next(request)
        duration = time.time() - start
        logger.info(f"{request.method} {request.url.path} - {response.status_code} ({duration:.3f}s)")
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        details = [
            f"{'.'.join(str(part) for part in error['loc'] if part != 'body')}: {error['msg']}"
            for error in exc.errors()
        ]
        return JSONResponse(status_code=400, content={"error": "Validation error", "details": details})

    @app.exception_handler(NewsNotFoundError)
    async def not_found_handler(request: Request, exc: NewsNotFoundError):
        return JSONResponse(
            status_code=404,
            content={"error": "News article not found", "message": "The requested news article does not exist"},
        )

    @app.exception_handler(ProcessingError)
    async def processing_error_handler(request: Request, exc: ProcessingError):
        return JSONResponse(status_code=500, content={"error": "Failed to process news article"})

    @app.exception_handler(IngestionError)
    async def ingestion_error_handler(request: Request, exc: IngestionError):
        logger.error(f"❌ Ingestion failed in {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"error": "Failed to ingest news source", "message": str(exc)})

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(request: Request, exc: PersistenceError):
        return JSONResponse(status_code=500, content={"error": "Storage operation failed", "message": str(exc)})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle all exceptions."""
        logger.error(f"❌ Error in {request.url.path}: {exc}", exc_info=True)
        message = str(exc) if settings.app_env == "development" else "Something went wrong"
        return JSONResponse(status_code=500, content={"error": "Internal server error", "message": message})

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": SERVICE_NAME,
            "storage": await request.app.state.news_service.gateway.backend_name(),
        }

    @app.get("/")
    async def root():
        return {
            "message": "SWEN AI-Enriched News Pipeline",
            "version": "1.0.0",
            "endpoints": {"health": "/health", "news": "/api/v1/news"},
        }

    app.include_router(router, prefix="/api/v1/news")
    return app


setup_logging(get_settings().log_level)
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("news_pipeline.main:app", host="0.0.0.0", port=get_settings().port, reload=True)
