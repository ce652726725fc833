import httpx
import pytest

from conftest import no_sleep
from price_analyzer.ai.providers.huggingface import HuggingFaceProvider
from price_analyzer.services.embeddings import EmbeddingClient
from price_analyzer.utils.errors import EmbeddingUnavailable, ProviderError, RateLimitError


def make_provider(handler) -> HuggingFaceProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HuggingFaceProvider(api_key="hf_test", dimensions=3, client=client)


async def test_embeddings_request():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[0.1, 0.2, 0.3])

    vectors = await make_provider(handler).get_embeddings(["ceramic tiles"])

    assert vectors == [[0.1, 0.2, 0.3]]
    assert seen[0].headers["Authorization"] == "Bearer hf_test"
    assert "sentence-transformers/all-MiniLM-L6-v2" in str(seen[0].url)


async def test_rate_limit():
    provider = make_provider(lambda request: httpx.Response(429, headers={"retry-after": "7"}))

    with pytest.raises(RateLimitError) as exc_info:
        await provider.get_embeddings(["ceramic tiles"])

    assert exc_info.value.retry_after == 7.0


async def test_non_json_body_is_a_provider_error():
    provider = make_provider(lambda request: httpx.Response(200, text="<html>loading</html>"))

    with pytest.raises(ProviderError):
        await provider.get_embeddings(["ceramic tiles"])


async def test_non_json_body_is_retried_by_the_embedding_client():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, text="<html>loading</html>")

    client = EmbeddingClient(make_provider(handler), dimensions=3, sleep=no_sleep)

    with pytest.raises(EmbeddingUnavailable):
        await client.embed("ceramic tiles")

    assert len(calls) == 3
