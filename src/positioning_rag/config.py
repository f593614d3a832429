import os
from dataclasses import dataclass
from functools import lru_cache

import redis
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")

    # Reference library (vector store)
    example_index_name: str = os.getenv("EXAMPLE_INDEX_NAME", "positioning_examples")
    retrieval_top_k: int = int(os.getenv("RETRIEVAL_TOP_K", "3"))
    retrieval_similarity_threshold: float = float(os.getenv("RETRIEVAL_SIMILARITY_THRESHOLD", "0.6"))

    # Caches
    embedding_cache_prefix: str = os.getenv("EMBEDDING_CACHE_PREFIX", "embedding_cache")
    embedding_memory_cache_size: int = int(os.getenv("EMBEDDING_MEMORY_CACHE_SIZE", "1024"))
    generation_cache_prefix: str = os.getenv("GENERATION_CACHE_PREFIX", "generation_cache")
    generation_cache_ttl: int = int(os.getenv("GENERATION_CACHE_TTL", "604800"))  # 7 days default

    # Embedding
    embedding_provider: str = os.getenv("EMBEDDING_PROVIDER", "openai")  # or "local"
    embedding_model: str = os.getenv("EMBEDDING_MODEL", "text-embedding-ada-002")
    embedding_dimension: int = int(os.getenv("EMBEDDING_DIMENSION", "1536"))

    # Generation
    generation_model: str = os.getenv("GENERATION_MODEL", "gpt-4o-mini")
    generation_max_tokens: int = int(os.getenv("GENERATION_MAX_TOKENS", "800"))
    default_temperature: float = float(os.getenv("DEFAULT_TEMPERATURE", "0.3"))
    default_top_p: float = float(os.getenv("DEFAULT_TOP_P", "0.8"))

    # OpenAI-compatible endpoint
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    openai_base_url: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    http_timeout: float = float(os.getenv("HTTP_TIMEOUT", "30.0"))

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def uses_local_embeddings(self) -> bool:
        """Check if embeddings are computed locally with sentence-transformers.

        Returns:
            True if the local provider is configured, False otherwise
        """
        return self.embedding_provider.lower() == "local"

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if not 0 <= self.retrieval_similarity_threshold <= 1:
            raise ValueError("RETRIEVAL_SIMILARITY_THRESHOLD must be between 0 and 1 for cosine similarity")

        if self.retrieval_top_k < 1:
            raise ValueError(f"RETRIEVAL_TOP_K must be at least 1, got {self.retrieval_top_k}")

        if self.embedding_memory_cache_size < 1:
            raise ValueError(
                f"EMBEDDING_MEMORY_CACHE_SIZE must be at least 1, got {self.embedding_memory_cache_size}"
            )

        if self.generation_cache_ttl <= 0:
            raise ValueError(f"GENERATION_CACHE_TTL must be positive, got {self.generation_cache_ttl}")

        if self.embedding_provider.lower() not in ("openai", "local"):
            raise ValueError(
                f"EMBEDDING_PROVIDER must be one of ['openai', 'local'], got {self.embedding_provider}"
            )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client() -> redis.Redis:
    """Create a Redis client instance."""
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=False,
    )
