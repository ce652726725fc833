import pytest
from fastapi.testclient import TestClient

from price_analyzer.start import create_app
from price_analyzer.utils.errors import DocumentStoreError, ProviderError


@pytest.fixture
def client(services):
    with TestClient(create_app(services=services)) as test_client:
        yield test_client


def test_analyze_locally(client):
    response = client.post(
        "/analysis",
        json={"product_name": "Ceramic Tiles", "hsn_code": "690410", "market": "Australia", "use_ai": False},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["product"] == {"product_name": "Ceramic Tiles", "hsn_code": "690410", "market": "AUSTRALIA"}
    assert body["historical_data"][0] == {"year": "2024", "price": 120.0, "currency": "USD"}
    assert body["report"]["mode"] == "local"
    assert body["report"]["metrics"]["trend"] == "increasing"
    assert body["steps"]["historical"] == "ok"


def test_analyze_remotely(client, text_provider):
    text_provider.responses = ["Detailed report", "Expect $125 next year"]

    response = client.post(
        "/analysis",
        json={"product_name": "Ceramic Tiles", "hsn_code": "690410", "market": "AUSTRALIA", "use_embeddings": False},
    )

    assert response.status_code == 200
    report = response.json()["report"]
    assert report["mode"] == "remote"
    assert report["prediction_status"] == "ok"


def test_unknown_market_lists_alternatives(client):
    response = client.post(
        "/analysis",
        json={"product_name": "Ceramic Tiles", "hsn_code": "690410", "market": "JAPAN", "use_ai": False},
    )

    assert response.status_code == 404
    body = response.json()
    assert body["error"] == "MarketNotFound"
    assert body["category"] == "no_data"
    assert body["details"]["available_markets"] == ["AUSTRALIA", "GERMANY"]


def test_unknown_code(client):
    response = client.post(
        "/analysis",
        json={"product_name": "Ceramic Tiles", "hsn_code": "123456", "market": "JAPAN", "use_ai": False},
    )

    assert response.status_code == 404
    assert response.json()["error"] == "CodeNotFound"


def test_blank_fields(client):
    response = client.post("/analysis", json={"product_name": " ", "hsn_code": "690410", "market": "AUSTRALIA"})

    assert response.status_code == 400
    assert response.json()["details"] == {"missing": ["product_name"]}


def test_remote_failure_is_a_bad_gateway(client, text_provider):
    text_provider.responses = [ProviderError("bad gateway")]

    response = client.post(
        "/analysis",
        json={"product_name": "Ceramic Tiles", "hsn_code": "690410", "market": "AUSTRALIA", "use_embeddings": False},
    )

    assert response.status_code == 502
    assert response.json()["error"] == "AnalysisServiceError"


def test_markets(client):
    response = client.get("/analysis/markets/690410")

    assert response.status_code == 200
    assert response.json() == {"hsn_code": "690410", "markets": ["AUSTRALIA", "GERMANY"]}


def test_health(client):
    response = client.get("/health/")

    assert response.status_code == 200
    assert response.json()["checks"][0]["name"] == "database"


def test_health_reports_unreachable_database(client, document_repository):
    document_repository.lookup_error = DocumentStoreError("unreachable")

    response = client.get("/health/")

    assert response.status_code == 503


def test_connections(client):
    response = client.get("/health/connections")

    assert response.status_code == 200
    assert response.json()["services"] == {
        "generative": True,
        "document_store": True,
        "vector_search": True,
        "embeddings": True,
    }


def test_connection_failure_names_the_probe(client, text_provider):
    text_provider.responses = [ProviderError("invalid key")]

    response = client.get("/health/connections")

    assert response.status_code == 503
    assert response.json()["details"] == {"probe": "generative"}


def test_market_without_valid_prices_lists_alternatives(client, market_rows):
    market_rows[690410]["FRANCE"] = '{"2023": 0}'

    response = client.post(
        "/analysis",
        json={"product_name": "Ceramic Tiles", "hsn_code": "690410", "market": "FRANCE", "use_ai": False},
    )

    assert response.status_code == 404
    body = response.json()
    assert body["error"] == "NoValidRecords"
    assert body["details"]["available_markets"] == ["AUSTRALIA", "GERMANY"]
