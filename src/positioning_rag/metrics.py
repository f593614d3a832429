from dataclasses import dataclass


@dataclass
class PipelineMetrics:
    """Track per-process counters for pipeline runs."""

    total_requests: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    coalesced_requests: int = 0
    generation_calls: int = 0
    generation_fallbacks: int = 0
    degraded_parses: int = 0
    retrieval_fallbacks: int = 0
    total_generation_time_ms: float = 0.0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        lookups = self.cache_hits + self.cache_misses
        if lookups == 0:
            return 0.0
        return self.cache_hits / lookups

    @property
    def avg_generation_time_ms(self) -> float:
        """Average duration of successful generation calls."""
        successes = self.generation_calls - self.generation_fallbacks
        if successes <= 0:
            return 0.0
        return self.total_generation_time_ms / successes

    def record_request(self) -> None:
        self.total_requests += 1

    def record_hit(self) -> None:
        self.cache_hits += 1

    def record_miss(self) -> None:
        self.cache_misses += 1

    def record_coalesced(self) -> None:
        self.coalesced_requests += 1

    def record_retrieval_fallback(self) -> None:
        self.retrieval_fallbacks += 1

    def record_generation(self, duration_ms: float, is_fallback: bool, degraded: bool) -> None:
        """Record one orchestration call."""
        self.generation_calls += 1
        if is_fallback:
            self.generation_fallbacks += 1
        else:
            self.total_generation_time_ms += duration_ms
        if degraded:
            self.degraded_parses += 1

    def to_dict(self) -> dict[str, float | int]:
        """Convert metrics to dictionary."""
        return {
            "total_requests": self.total_requests,
            "cache_hits": self.cache_hits,
            "cache_misses": self.cache_misses,
            "hit_rate": self.hit_rate,
            "coalesced_requests": self.coalesced_requests,
            "generation_calls": self.generation_calls,
            "generation_fallbacks": self.generation_fallbacks,
            "degraded_parses": self.degraded_parses,
            "retrieval_fallbacks": self.retrieval_fallbacks,
            "avg_generation_time_ms": self.avg_generation_time_ms,
        }
