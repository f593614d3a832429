"""OpenAI-compatible embedding provider.

Calls the ``/embeddings`` endpoint of any OpenAI-compatible server
(api.openai.com, Azure-style gateways, Ollama's ``/v1`` shim, vLLM).

The reference library was embedded with ``text-embedding-ada-002``
(1536 dims); query vectors must come from the same model.
"""

import httpx

from positioning_rag.config import settings
from positioning_rag.errors import EmbeddingFailure


class OpenAIEmbeddingProvider:
    """OpenAI-compatible implementation of the EmbeddingProvider protocol.

    This class satisfies the EmbeddingProvider protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        provider = OpenAIEmbeddingProvider.create()
        embedding = await provider.encode("market research platform")
        print(len(embedding))  # 1536
        ```
    """

    def __init__(
        self,
        model_name: str | None = None,
        base_url: str | None = None,
        api_key: str | None = None,
        dimension: int | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the embedding provider.

        Args:
            model_name: Embedding model. Defaults to settings.embedding_model.
            base_url: API base URL. Defaults to settings.openai_base_url.
            api_key: Bearer token. Defaults to settings.openai_api_key.
            dimension: Expected vector length. Defaults to settings.embedding_dimension.
            timeout: Request timeout in seconds. Defaults to settings.http_timeout.
            client: Preconfigured HTTP client. Created lazily when omitted.
        """
        self._model_name = model_name or settings.embedding_model
        self._base_url = (base_url or settings.openai_base_url).rstrip("/")
        self._api_key = api_key or settings.openai_api_key
        self._dimension = dimension or settings.embedding_dimension
        self._timeout = timeout or settings.http_timeout
        self._client: httpx.AsyncClient | None = client

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers=headers,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    @classmethod
    def create(
        cls,
        model_name: str | None = None,
        base_url: str | None = None,
    ) -> "OpenAIEmbeddingProvider":
        """Factory method to create OpenAIEmbeddingProvider with defaults.

        Args:
            model_name: Model name. If None, uses settings.
            base_url: API base URL. If None, uses settings.

        Returns:
            Configured OpenAIEmbeddingProvider
        """
        return cls(model_name=model_name, base_url=base_url)

    @property
    def dimension(self) -> int:
        """Get the embedding vector dimension."""
        return self._dimension

    @property
    def model_name(self) -> str:
        """Get the model name/identifier."""
        return self._model_name

    async def encode(self, text: str) -> list[float]:
        """Generate embedding vector for a single text.

        Args:
            text: The text to encode

        Returns:
            The embedding vector as a list of floats

        Raises:
            EmbeddingFailure: If the request fails or the response is malformed
        """
        url = f"{self._base_url}/embeddings"
        payload = {
            "model": self._model_name,
            "input": text,
        }

        try:
            response = await self.client.post(url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise EmbeddingFailure(f"Embedding API error: {e}") from e
        except ValueError as e:
            raise EmbeddingFailure(f"Embedding API returned invalid JSON: {e}") from e

        try:
            embedding = data["data"][0]["embedding"]
        except (KeyError, IndexError, TypeError) as e:
            raise EmbeddingFailure(f"Unexpected response format: {data}") from e

        if len(embedding) != self._dimension:
            raise EmbeddingFailure(
                f"Embedding dimension mismatch: expected {self._dimension}, got {len(embedding)}"
            )
        return embedding

    async def is_available(self) -> bool:
        """Check if the embedding endpoint answers.

        Returns:
            True if a test embedding can be produced, False otherwise
        """
        if not self._api_key:
            return False
        try:
            _ = await self.encode("test")
            return True
        except EmbeddingFailure:
            return False

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
