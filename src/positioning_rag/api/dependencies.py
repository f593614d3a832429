"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from positioning_rag.config import settings
from positioning_rag.handlers import PositioningHandler
from positioning_rag.logging_config import configure_logging
from positioning_rag.protocols import EmbeddingProvider
from positioning_rag.repositories import (
    OpenAIEmbeddingProvider,
    OpenAIGenerationProvider,
    RedisEmbeddingCacheRepository,
    RedisExampleRepository,
    RedisGenerationCacheRepository,
)
from positioning_rag.repositories.local_embedding_provider import LocalEmbeddingProvider
from positioning_rag.services import (
    GenerationCacheGate,
    GenerationOrchestrator,
    PhraseAttributor,
    PositioningPipeline,
    RetrievalService,
)

logger = logging.getLogger(__name__)


def get_pipeline(request: Request) -> PositioningPipeline:
    """Dependency injection for PositioningPipeline from app.state.

    Raises:
        RuntimeError: If the pipeline is not initialized
    """
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        raise RuntimeError("PositioningPipeline not initialized. Check lifespan setup.")
    return pipeline


def get_handler(request: Request) -> PositioningHandler:
    """Dependency injection for PositioningHandler from app.state.

    Raises:
        RuntimeError: If the handler is not initialized
    """
    handler = getattr(request.app.state, "positioning_handler", None)
    if handler is None:
        raise RuntimeError("PositioningHandler not initialized. Check lifespan setup.")
    return handler


def build_embedding_provider() -> EmbeddingProvider:
    """Select the embedding provider from settings.

    When switching providers or models, the reference library must be
    re-embedded and the embedding cache cleared: vectors from different
    models are not comparable.
    """
    if settings.uses_local_embeddings:
        return LocalEmbeddingProvider.create()
    return OpenAIEmbeddingProvider.create()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores in app.state:
    1. Providers and repositories (external collaborators)
    2. Pipeline (business logic) - stored in app.state.pipeline
    3. Handler (HTTP endpoints) - stored in app.state.positioning_handler
    """
    configure_logging()

    embedding_provider = build_embedding_provider()
    generation_provider = OpenAIGenerationProvider.create()

    example_store = RedisExampleRepository.create(dimension=embedding_provider.dimension)
    embedding_cache = RedisEmbeddingCacheRepository.create()
    generation_cache = RedisGenerationCacheRepository.create()

    retrieval = RetrievalService.create(
        example_store=example_store,
        embedding_cache=embedding_cache,
        embedding_provider=embedding_provider,
    )
    pipeline = PositioningPipeline(
        retrieval=retrieval,
        cache_gate=GenerationCacheGate.create(store=generation_cache),
        orchestrator=GenerationOrchestrator.create(generation_provider=generation_provider),
        attributor=PhraseAttributor(),
        generation_provider=generation_provider,
    )

    app.state.pipeline = pipeline
    app.state.positioning_handler = PositioningHandler(pipeline=pipeline)
    app.state.embedding_provider = embedding_provider
    app.state.generation_provider = generation_provider

    logger.info(
        "Positioning pipeline initialized: embedding_model=%s generation_model=%s threshold=%.2f",
        embedding_provider.model_name,
        generation_provider.model_name,
        retrieval.threshold,
    )
    logger.info("Health: %s", await pipeline.is_healthy())

    yield

    await generation_provider.close()
    if isinstance(embedding_provider, OpenAIEmbeddingProvider):
        await embedding_provider.close()

    del app.state.positioning_handler
    del app.state.pipeline
    del app.state.embedding_provider
    del app.state.generation_provider
    logger.info("Positioning pipeline shut down")


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[PositioningHandler, Depends(get_handler)]
PipelineDep = Annotated[PositioningPipeline, Depends(get_pipeline)]
