"""Generation provider protocol.

Defines the interface for a text generation service: a prompt plus
sampling parameters in, completion text out.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class GenerationProvider(Protocol):
    """Protocol for text generation services."""

    @property
    def model_name(self) -> str:
        """Return the name/identifier of the model."""
        ...

    async def generate(
        self,
        prompt: str,
        temperature: float,
        top_p: float,
        max_tokens: int,
    ) -> str:
        """Generate a completion for ``prompt``.

        Args:
            prompt: The full user prompt
            temperature: Sampling temperature in [0, 1]
            top_p: Nucleus sampling mass in [0, 1]
            max_tokens: Completion token budget

        Returns:
            The completion text

        Raises:
            RateLimited: On a 429-equivalent rejection
            Unauthorized: On an authentication failure
            GenerationFailure: On network errors, other non-success statuses,
                or an empty completion
        """
        ...

    async def is_available(self) -> bool:
        """Check if the generation service is configured and reachable."""
        ...
