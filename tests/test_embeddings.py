import pytest

from conftest import DIMENSIONS, FakeEmbeddingProvider
from price_analyzer.services.embeddings import EmbeddingClient
from price_analyzer.utils.errors import ConfigurationError, EmbeddingUnavailable, ProviderError


async def test_embed_validates_model_once(embedding_client, embedding_provider):
    first = await embedding_client.embed("ceramic tiles")
    second = await embedding_client.embed("glazed tiles")

    assert len(first) == DIMENSIONS
    assert len(second) == DIMENSIONS
    assert embedding_client.ready
    # One probe, then one call per text
    assert embedding_provider.calls == ["test", "ceramic tiles", "glazed tiles"]


async def test_embed_rejects_empty_text(embedding_client, embedding_provider):
    with pytest.raises(ValueError):
        await embedding_client.embed("   ")
    assert embedding_provider.calls == []


async def test_dimension_mismatch_is_fatal_and_not_retried(sleeps):
    provider = FakeEmbeddingProvider(dimensions=768)

    async def record_sleep(seconds):
        sleeps.append(seconds)

    client = EmbeddingClient(provider, dimensions=DIMENSIONS, sleep=record_sleep)

    with pytest.raises(ConfigurationError) as exc_info:
        await client.embed("ceramic tiles")

    assert exc_info.value.details == {"expected": DIMENSIONS, "actual": 768}
    assert sleeps == []
    assert provider.calls == ["test"]


async def test_dimension_mismatch_is_remembered_until_reinitialized():
    provider = FakeEmbeddingProvider(dimensions=768)
    client = EmbeddingClient(provider, dimensions=DIMENSIONS)

    with pytest.raises(ConfigurationError):
        await client.embed("first")
    with pytest.raises(ConfigurationError):
        await client.embed("second")
    # The cached failure is raised without another probe
    assert provider.calls == ["test"]

    provider.dimensions = DIMENSIONS
    await client.initialize()
    assert client.ready
    assert len(await client.embed("third")) == DIMENSIONS


async def test_transient_failures_back_off_exponentially(embedding_client, embedding_provider, sleeps):
    await embedding_client.initialize()
    embedding_provider.failures = [ProviderError("timeout"), ProviderError("timeout")]

    vector = await embedding_client.embed("ceramic tiles")

    assert len(vector) == DIMENSIONS
    assert sleeps == [2.0, 4.0]


async def test_gives_up_after_max_attempts(embedding_client, embedding_provider, sleeps):
    await embedding_client.initialize()
    embedding_provider.failures = [ProviderError("down")] * 3

    with pytest.raises(EmbeddingUnavailable) as exc_info:
        await embedding_client.embed("ceramic tiles")

    assert exc_info.value.details["attempts"] == 3
    assert isinstance(exc_info.value.__cause__, ProviderError)
    assert sleeps == [2.0, 4.0]


async def test_transient_probe_failure_counts_as_an_attempt(embedding_client, embedding_provider, sleeps):
    embedding_provider.failures = [ProviderError("cold start")]

    vector = await embedding_client.embed("ceramic tiles")

    assert len(vector) == DIMENSIONS
    assert sleeps == [2.0]
    assert embedding_provider.calls == ["test", "test", "ceramic tiles"]
