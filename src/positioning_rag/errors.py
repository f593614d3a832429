"""Exception hierarchy for the positioning pipeline.

Every external collaborator (embedding service, generation service, vector
store, cache store) reports failures with one of these types so that the
services can degrade at well-defined points instead of catching everything.
"""


class PositioningError(Exception):
    """Base class for all pipeline errors."""


class EmbeddingFailure(PositioningError):
    """The embedding service could not produce a vector."""


class GenerationFailure(PositioningError):
    """The generation service failed (network error, 5xx, empty completion)."""


class RateLimited(GenerationFailure):
    """The generation service rejected the call with a 429."""


class Unauthorized(GenerationFailure):
    """The generation service rejected the configured credentials."""


class VectorStoreFailure(PositioningError):
    """The reference-example vector store could not be queried."""


class CacheFailure(PositioningError):
    """A read or write against a persistent cache tier failed."""
