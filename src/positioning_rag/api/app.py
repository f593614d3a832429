"""FastAPI application for positioning generation."""

from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from positioning_rag.config import settings
from positioning_rag.dto import (
    CacheClearResponse,
    CacheStatsResponse,
    HealthCheckResponse,
    HighlightRequest,
    HighlightResponse,
    PositioningRequest,
    PositioningResponse,
)

from .dependencies import HandlerDep, lifespan

app = FastAPI(
    title="Positioning RAG API",
    description="Retrieval-augmented positioning copy generation with phrase highlighting",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint with API information."""
    return {
        "name": "Positioning RAG API",
        "version": "0.1.0",
        "endpoints": {
            "generate": "/positioning/generate",
            "highlights": "/positioning/highlights",
            "cache": "/cache",
            "health": "/health",
            "status": "/status",
            "docs": "/docs",
        },
    }


@app.post("/positioning/generate", response_model=PositioningResponse)
async def generate_positioning(request: PositioningRequest, handler: HandlerDep) -> PositioningResponse:
    """Generate positioning copy grounded by similar reference examples."""
    return await handler.generate(request)


@app.post("/positioning/highlights", response_model=HighlightResponse)
async def compute_highlights(request: HighlightRequest, handler: HandlerDep) -> HighlightResponse:
    """Attribute fragments of (possibly edited) copy to the request fields."""
    return await handler.highlight(request)


@app.get("/cache/stats", response_model=CacheStatsResponse)
async def cache_stats(handler: HandlerDep) -> CacheStatsResponse:
    """Get cache and pipeline statistics."""
    return await handler.get_stats()


@app.delete("/cache", response_model=CacheClearResponse)
async def clear_cache(handler: HandlerDep) -> CacheClearResponse:
    """Clear all generation cache entries."""
    return await handler.clear_cache()


@app.post("/cache/cleanup", response_model=CacheClearResponse)
async def cleanup_cache(handler: HandlerDep) -> CacheClearResponse:
    """Remove expired generation cache entries."""
    return await handler.cleanup_cache()


@app.get("/health", response_model=HealthCheckResponse)
async def health(handler: HandlerDep) -> HealthCheckResponse:
    """Health check endpoint."""
    return await handler.health_check()


@app.get("/status", response_model=dict[str, Any])
async def retrieval_status(handler: HandlerDep) -> dict[str, Any]:
    """Retrieval configuration and in-process cache usage."""
    return await handler.status()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "positioning_rag.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
