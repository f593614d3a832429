"""HTTP handlers for positioning operations.

Handlers convert between DTOs (API contracts) and pipeline calls.
They handle HTTP concerns like status codes, validation, and error handling.
"""

import asyncio
import logging
import time

from fastapi import HTTPException, status

from positioning_rag.dto import (
    CacheClearResponse,
    CacheStatsResponse,
    GeneratedContentResponse,
    HealthCheckResponse,
    HighlightRequest,
    HighlightResponse,
    HighlightRunItem,
    HighlightSpanItem,
    PositioningRequest,
    PositioningResponse,
    ReferenceExampleItem,
)
from positioning_rag.entities import HighlightRun, HighlightSpan
from positioning_rag.services import PositioningPipeline

logger = logging.getLogger(__name__)


def _highlight_response(text: str, spans: list[HighlightSpan], runs: list[HighlightRun]) -> HighlightResponse:
    return HighlightResponse(
        text=text,
        spans=[
            HighlightSpanItem(start=s.start, end=s.end, category=s.category.value, color=s.color)
            for s in spans
        ],
        runs=[
            HighlightRunItem(
                text=r.text,
                start=r.start,
                category=r.category.value if r.category else None,
                color=r.color,
            )
            for r in runs
        ],
    )


class PositioningHandler:
    """HTTP handlers for positioning operations.

    This handler delegates business logic to PositioningPipeline
    and handles HTTP-specific concerns like:
    - Converting DTOs to entities and back
    - Setting appropriate status codes
    - Error handling and responses

    Example:
        ```python
        handler = PositioningHandler(pipeline=pipeline)

        @app.post("/positioning/generate", response_model=PositioningResponse)
        async def generate(request: PositioningRequest):
            return await handler.generate(request)
        ```
    """

    def __init__(self, pipeline: PositioningPipeline) -> None:
        """Initialize the positioning handler.

        Args:
            pipeline: The positioning pipeline (required).
        """
        self._pipeline = pipeline

    async def generate(self, request: PositioningRequest) -> PositioningResponse:
        """Handle POST /positioning/generate requests.

        The pipeline degrades to fallback copy on collaborator failures, so
        a 500 here means a programming error rather than an outage.
        """
        try:
            start_time = time.time()
            result = await self._pipeline.run(request.to_entity())
            duration_ms = (time.time() - start_time) * 1000

            return PositioningResponse(
                content=GeneratedContentResponse(**result.content.to_dict()),
                highlights=_highlight_response(result.content.display_text, result.spans, result.runs),
                from_cache=result.from_cache,
                is_fallback=result.is_fallback,
                cache_key=result.cache_key,
                examples=[
                    ReferenceExampleItem(
                        company=scored.example.company,
                        tagline=scored.example.tagline,
                        similarity=scored.similarity,
                    )
                    for scored in result.examples
                ],
                duration_ms=duration_ms,
            )

        except Exception as e:
            logger.exception("Positioning generation failed")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to generate positioning: {e}",
            ) from e

    async def highlight(self, request: HighlightRequest) -> HighlightResponse:
        """Handle POST /positioning/highlights requests."""
        try:
            spans, runs = self._pipeline.highlight(request.text, request.messaging.to_entity())
            return _highlight_response(request.text, spans, runs)

        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to compute highlights: {e}",
            ) from e

    async def get_stats(self) -> CacheStatsResponse:
        """Handle GET /cache/stats requests.

        Raises:
            HTTPException: If a cache backend cannot be read
        """
        try:
            # counting cache entries scans Redis, so keep it off the event loop
            stats = await asyncio.to_thread(self._pipeline.stats)
            return CacheStatsResponse(**stats)

        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to get stats: {e}",
            ) from e

    async def clear_cache(self) -> CacheClearResponse:
        """Handle DELETE /cache requests."""
        try:
            count = await self._pipeline.clear_cache()

            return CacheClearResponse(
                success=True,
                deleted_count=count,
                message="Generation cache cleared successfully",
            )

        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to clear cache: {e}",
            ) from e

    async def cleanup_cache(self) -> CacheClearResponse:
        """Handle POST /cache/cleanup requests."""
        try:
            count = await self._pipeline.cleanup_cache()

            return CacheClearResponse(
                success=True,
                deleted_count=count,
                message=f"Removed {count} expired entries",
            )

        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to clean up cache: {e}",
            ) from e

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests.

        The service still answers without a generation service (fallback
        copy), so that case reports ``degraded`` rather than ``unhealthy``.
        """
        checks = await self._pipeline.is_healthy()

        if not checks["vector_store"] or not checks["cache_store"]:
            health = "unhealthy"
        elif not checks["generation_service"]:
            health = "degraded"
        else:
            health = "healthy"

        return HealthCheckResponse(status=health, **checks)

    async def status(self) -> dict:
        """Handle GET /status requests."""
        return self._pipeline.status()
