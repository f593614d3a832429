"""OpenAI-compatible chat completion provider.

Sends the grounded positioning prompt to ``/chat/completions`` with the
caller's sampling parameters and maps HTTP failures onto the pipeline's
error types:

- 429 → RateLimited
- 401 / 403 → Unauthorized
- any other non-2xx, transport error or empty completion → GenerationFailure
"""

import httpx

from positioning_rag.config import settings
from positioning_rag.errors import GenerationFailure, RateLimited, Unauthorized

SYSTEM_PROMPT = (
    "You are an expert positioning strategist. Generate compelling, professional "
    "positioning copy based on successful examples and patterns. Always format "
    "your response exactly as requested."
)


class OpenAIGenerationProvider:
    """OpenAI-compatible implementation of the GenerationProvider protocol.

    Example:
        ```python
        provider = OpenAIGenerationProvider.create()
        text = await provider.generate(prompt, temperature=0.3, top_p=0.8, max_tokens=800)
        ```
    """

    def __init__(
        self,
        model_name: str | None = None,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the generation provider.

        Args:
            model_name: Chat model. Defaults to settings.generation_model.
            base_url: API base URL. Defaults to settings.openai_base_url.
            api_key: Bearer token. Defaults to settings.openai_api_key.
            timeout: Request timeout in seconds. Defaults to settings.http_timeout.
            client: Preconfigured HTTP client. Created lazily when omitted.
        """
        self._model_name = model_name or settings.generation_model
        self._base_url = (base_url or settings.openai_base_url).rstrip("/")
        self._api_key = api_key or settings.openai_api_key
        self._timeout = timeout or settings.http_timeout
        self._client: httpx.AsyncClient | None = client

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}
            self._client = httpx.AsyncClient(timeout=self._timeout, headers=headers)
        return self._client

    @classmethod
    def create(
        cls,
        model_name: str | None = None,
        base_url: str | None = None,
    ) -> "OpenAIGenerationProvider":
        """Factory method to create OpenAIGenerationProvider with defaults."""
        return cls(model_name=model_name, base_url=base_url)

    @property
    def model_name(self) -> str:
        return self._model_name

    async def generate(
        self,
        prompt: str,
        temperature: float,
        top_p: float,
        max_tokens: int,
    ) -> str:
        """Generate a completion for the positioning prompt.

        Args:
            prompt: The full user prompt
            temperature: Sampling temperature in [0, 1]
            top_p: Nucleus sampling mass in [0, 1]
            max_tokens: Completion token budget

        Returns:
            The completion text (never empty)

        Raises:
            RateLimited, Unauthorized, GenerationFailure
        """
        if not self._api_key:
            raise Unauthorized("No API key configured for the generation service")

        url = f"{self._base_url}/chat/completions"
        payload = {
            "model": self._model_name,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": temperature,
            "top_p": top_p,
            "max_tokens": max_tokens,
        }

        try:
            response = await self.client.post(url, json=payload)
        except httpx.HTTPError as e:
            raise GenerationFailure(f"Generation API request failed: {e}") from e

        if response.status_code == 429:
            raise RateLimited("Generation API rate limit exceeded")
        if response.status_code in (401, 403):
            raise Unauthorized(f"Generation API rejected credentials ({response.status_code})")
        if response.is_error:
            raise GenerationFailure(f"Generation API returned {response.status_code}")

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise GenerationFailure(f"Unexpected completion format: {e}") from e

        if not content or not content.strip():
            raise GenerationFailure("Generation API returned an empty completion")
        return content

    async def is_available(self) -> bool:
        """The service is usable once an API key is configured."""
        return bool(self._api_key)

    async def close(self) -> None:
        """Close the async HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
