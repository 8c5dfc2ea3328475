from __future__ import annotations

from typing import Iterator, List

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from models.records import Reading
from services.client import FetchError
from services.poller import ReadingsPoller


class StubClient:
    endpoint_url = "http://device.test/api/dados"

    def __init__(self) -> None:
        self.readings: List[Reading] = []
        self.error: Exception | None = None
        self.closed = False

    async def fetch_readings(self) -> List[Reading]:
        if self.error is not None:
            raise self.error
        return list(self.readings)

    async def close(self) -> None:
        self.closed = True


READINGS = [
    Reading(id=1, leitura=10.0, status="Normal", bomba_ligada="Não", timestamp="01/01/2024 10:00:00"),
    Reading(id=2, leitura=20.0, status="Baixo", bomba_ligada="Sim", timestamp="2024-01-01T11:00:00"),
    Reading(id=3, leitura=30.0, status="Alto", bomba_ligada="Não", timestamp="sem data"),
]


@pytest.fixture
def stub_client() -> StubClient:
    return StubClient()


@pytest.fixture
def api_client(monkeypatch, stub_client: StubClient) -> Iterator[TestClient]:
    pollers: List[ReadingsPoller] = []

    def build_test_poller() -> ReadingsPoller:
        if not pollers:
            pollers.append(ReadingsPoller(client=stub_client, interval=3600))
        return pollers[0]

    build_test_poller.cache_clear = pollers.clear  # type: ignore[attr-defined]

    monkeypatch.setattr("app.main.build_default_poller", build_test_poller)
    monkeypatch.setattr("app.api.build_default_poller", build_test_poller)
    monkeypatch.setattr("app.web.build_default_poller", build_test_poller)

    app = create_app()
    with TestClient(app) as client:
        yield client


def test_health_while_poller_running(api_client: TestClient, stub_client: StubClient) -> None:
    response = api_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert stub_client.closed is False


def test_lifespan_closes_client_on_shutdown(monkeypatch, stub_client: StubClient) -> None:
    poller = ReadingsPoller(client=stub_client, interval=3600)

    def build_test_poller() -> ReadingsPoller:
        return poller

    build_test_poller.cache_clear = lambda: None  # type: ignore[attr-defined]
    monkeypatch.setattr("app.main.build_default_poller", build_test_poller)

    with TestClient(create_app()):
        pass

    assert stub_client.closed is True
    assert poller.running is False


def test_refresh_and_dashboard(api_client: TestClient, stub_client: StubClient) -> None:
    stub_client.readings = READINGS

    response = api_client.post("/api/refresh")

    assert response.status_code == 200
    payload = response.json()
    assert payload["cards"] == {
        "latest_value": 20.0,
        "status": "Baixo",
        "average": "20.00",
        "pump": "Ativa",
    }
    assert [point["value"] for point in payload["chart"]] == [10.0, 20.0, 30.0]
    assert payload["chart"][2]["label"] == "Invalid Date"
    assert [item["id"] for item in payload["history"]] == [2, 1, 3]
    assert payload["history"][0]["pump"] == "Ligada"
    assert payload["history"][1]["time"] == "01/01/2024 10:00:00"
    assert payload["error"] is None
    assert payload["initial_loading"] is False

    assert api_client.get("/api/dashboard").json()["cards"] == payload["cards"]


def test_readings_endpoint_uses_wire_names(api_client: TestClient, stub_client: StubClient) -> None:
    stub_client.readings = READINGS[:1]
    api_client.post("/api/refresh")

    response = api_client.get("/api/readings")

    assert response.status_code == 200
    assert response.json() == [
        {
            "id": 1,
            "leitura": 10.0,
            "status": "Normal",
            "bombaLigada": "Não",
            "timestamp": "01/01/2024 10:00:00",
        }
    ]


def test_failed_refresh_surfaces_static_error(api_client: TestClient, stub_client: StubClient) -> None:
    stub_client.readings = READINGS
    api_client.post("/api/refresh")
    stub_client.error = FetchError("HTTP 503")

    payload = api_client.post("/api/refresh").json()

    assert payload["error"] == "Falha ao carregar os dados."
    assert len(payload["history"]) == 3


def test_ui_renders_cards_chart_and_history(api_client: TestClient, stub_client: StubClient) -> None:
    stub_client.readings = READINGS
    api_client.post("/api/refresh")

    response = api_client.get("/ui")

    assert response.status_code == 200
    body = response.text
    assert "Sistema de Monitoramento de Água" in body
    assert "20.00" in body
    assert "Ativa" in body
    assert "<polyline" in body
    assert "Hora: Invalid Date" in body
    assert body.index("ID: 2") < body.index("ID: 1") < body.index("ID: 3")


def test_ui_hides_chart_without_readings(api_client: TestClient) -> None:
    response = api_client.get("/ui")

    assert response.status_code == 200
    assert "<polyline" not in response.text
