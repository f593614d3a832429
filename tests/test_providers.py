"""
Tests for the embedding and generation providers.
"""

import json

import httpx
import numpy as np
import pytest

from positioning_rag.errors import EmbeddingFailure, GenerationFailure, RateLimited, Unauthorized
from positioning_rag.repositories import OpenAIEmbeddingProvider, OpenAIGenerationProvider
from positioning_rag.repositories import local_embedding_provider
from positioning_rag.repositories.local_embedding_provider import LocalEmbeddingProvider


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def completion(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def generation_provider(handler) -> OpenAIGenerationProvider:
    return OpenAIGenerationProvider(
        model_name="gpt-test",
        base_url="https://llm.test/v1/",
        api_key="sk-test",
        client=mock_client(handler),
    )


@pytest.mark.asyncio
async def test_generate_sends_prompt_and_sampling():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=completion("HEADLINE: X"))

    provider = generation_provider(handler)
    text = await provider.generate("prompt", temperature=0.4, top_p=0.9, max_tokens=800)

    assert text == "HEADLINE: X"
    assert seen["url"] == "https://llm.test/v1/chat/completions"
    body = seen["body"]
    assert body["model"] == "gpt-test"
    assert body["messages"][0]["role"] == "system"
    assert body["messages"][1] == {"role": "user", "content": "prompt"}
    assert (body["temperature"], body["top_p"], body["max_tokens"]) == (0.4, 0.9, 800)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status_code", "error"),
    [(429, RateLimited), (401, Unauthorized), (403, Unauthorized), (500, GenerationFailure), (404, GenerationFailure)],
)
async def test_generate_maps_http_errors(status_code, error):
    provider = generation_provider(lambda request: httpx.Response(status_code, json={"error": "nope"}))

    with pytest.raises(error):
        await provider.generate("prompt", temperature=0.3, top_p=0.8, max_tokens=10)


@pytest.mark.asyncio
async def test_rate_limited_is_a_generation_failure():
    provider = generation_provider(lambda request: httpx.Response(429))

    with pytest.raises(GenerationFailure):
        await provider.generate("prompt", temperature=0.3, top_p=0.8, max_tokens=10)


@pytest.mark.asyncio
async def test_generate_empty_completion_fails():
    provider = generation_provider(lambda request: httpx.Response(200, json=completion("  ")))

    with pytest.raises(GenerationFailure):
        await provider.generate("prompt", temperature=0.3, top_p=0.8, max_tokens=10)


@pytest.mark.asyncio
async def test_generate_transport_error_fails():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    provider = generation_provider(handler)

    with pytest.raises(GenerationFailure):
        await provider.generate("prompt", temperature=0.3, top_p=0.8, max_tokens=10)


@pytest.mark.asyncio
async def test_generate_without_key_is_unauthorized():
    calls = []
    provider = generation_provider(lambda request: calls.append(request) or httpx.Response(200))
    # the constructor falls back to OPENAI_API_KEY, so clear it after construction
    provider._api_key = None

    with pytest.raises(Unauthorized):
        await provider.generate("prompt", temperature=0.3, top_p=0.8, max_tokens=10)
    assert calls == []
    assert await provider.is_available() is False


@pytest.mark.asyncio
async def test_encode_returns_vector():
    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == "https://llm.test/v1/embeddings"
        assert json.loads(request.content) == {"model": "embed-test", "input": "hello"}
        return httpx.Response(200, json={"data": [{"embedding": [0.1, 0.2, 0.3]}]})

    provider = OpenAIEmbeddingProvider(
        model_name="embed-test",
        base_url="https://llm.test/v1",
        api_key="sk-test",
        dimension=3,
        client=mock_client(handler),
    )

    assert await provider.encode("hello") == [0.1, 0.2, 0.3]
    assert provider.dimension == 3
    await provider.close()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500),
        httpx.Response(200, json={"unexpected": True}),
        httpx.Response(200, json={"data": [{"embedding": [0.1, 0.2]}]}),
        httpx.Response(200, content=b"not json"),
    ],
)
async def test_encode_failures(response):
    provider = OpenAIEmbeddingProvider(
        model_name="embed-test",
        base_url="https://llm.test/v1",
        api_key="sk-test",
        dimension=3,
        client=mock_client(lambda request: response),
    )

    with pytest.raises(EmbeddingFailure):
        await provider.encode("hello")


class FakeSentenceTransformer:
    def __init__(self, model_name):
        self.model_name = model_name

    def get_sentence_embedding_dimension(self):
        return 3

    def encode(self, text, show_progress_bar, normalize_embeddings):
        if not text:
            raise ValueError("empty input")
        return np.array([0.6, 0.8, 0.0])


@pytest.fixture
def local_provider(monkeypatch):
    monkeypatch.setattr(local_embedding_provider, "SentenceTransformer", FakeSentenceTransformer)
    return LocalEmbeddingProvider(model_name="mini-test")


@pytest.mark.asyncio
async def test_local_encode_runs_model(local_provider):
    assert await local_provider.encode("hello") == [0.6, 0.8, 0.0]
    assert local_provider.dimension == 3
    assert local_provider.model_name == "mini-test"
    assert await local_provider.is_available() is True


@pytest.mark.asyncio
async def test_local_encode_errors_become_embedding_failure(local_provider):
    with pytest.raises(EmbeddingFailure):
        await local_provider.encode("")
