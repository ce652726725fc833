import pytest

from conftest import FakeTextProvider
from price_analyzer.services import connections
from price_analyzer.utils.errors import ConnectionCheckError, DocumentStoreError, ProviderError


async def test_all_probes_pass(document_repository, embedding_client, embedding_provider):
    provider = FakeTextProvider(["Hi"])

    results = await connections.test_connections(provider, document_repository, embedding_client, model="m")

    assert results == {
        connections.GENERATIVE: True,
        connections.DOCUMENT_STORE: True,
        connections.VECTOR_SEARCH: True,
        connections.EMBEDDINGS: True,
    }
    assert provider.requests[0]["max_tokens"] == 5
    assert provider.requests[0]["messages"] == [{"role": "user", "content": "Hello"}]
    assert document_repository.search_calls == [{"threshold": 0.0, "count": 1}]
    assert embedding_provider.calls == ["test", "test query"]


async def test_generative_failure_names_the_probe(document_repository, embedding_client):
    provider = FakeTextProvider([ProviderError("invalid key")])

    with pytest.raises(ConnectionCheckError) as exc_info:
        await connections.test_connections(provider, document_repository, embedding_client)

    assert exc_info.value.probe == connections.GENERATIVE
    assert isinstance(exc_info.value.__cause__, ProviderError)


async def test_document_store_failure_stops_later_probes(document_repository, embedding_client, embedding_provider):
    document_repository.lookup_error = DocumentStoreError("unreachable")

    with pytest.raises(ConnectionCheckError) as exc_info:
        await connections.test_connections(FakeTextProvider(), document_repository, embedding_client)

    assert exc_info.value.probe == connections.DOCUMENT_STORE
    assert embedding_provider.calls == []


async def test_vector_search_failure(document_repository, embedding_client):
    document_repository.search_error = DocumentStoreError("index missing")

    with pytest.raises(ConnectionCheckError) as exc_info:
        await connections.test_connections(FakeTextProvider(), document_repository, embedding_client)

    assert exc_info.value.probe == connections.VECTOR_SEARCH
    assert exc_info.value.details == {"probe": connections.VECTOR_SEARCH}


async def test_embedding_failure_names_the_embedding_probe(document_repository, embedding_client, embedding_provider):
    embedding_provider.failures = [ProviderError("service down")] * 3

    with pytest.raises(ConnectionCheckError) as exc_info:
        await connections.test_connections(FakeTextProvider(), document_repository, embedding_client)

    assert exc_info.value.probe == connections.EMBEDDINGS
    assert document_repository.search_calls == []
