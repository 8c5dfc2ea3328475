from __future__ import annotations

from typing import List

import pytest
from typer.testing import CliRunner

from cli.app import app
from models.records import Reading
from services.client import FetchError
from services.poller import ReadingsPoller


class StubClient:
    endpoint_url = "http://device.test/api/dados"

    def __init__(self, readings: List[Reading], error: Exception | None = None) -> None:
        self.readings = readings
        self.error = error
        self.calls = 0
        self.closed = False

    async def fetch_readings(self) -> List[Reading]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.readings)

    async def close(self) -> None:
        self.closed = True


READINGS = [
    Reading(id=7, leitura=2.0, status="Normal", bomba_ligada="Sim", timestamp="25/12/2024 14:30:00"),
    Reading(id=8, leitura=4.0, status="Cheio", bomba_ligada="Não", timestamp="25/12/2024 14:31:00"),
]


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


def _install_stub(monkeypatch, stub: StubClient, interval: float = 0.01) -> ReadingsPoller:
    poller = ReadingsPoller(client=stub, interval=interval)

    def factory() -> ReadingsPoller:
        return poller

    factory.cache_clear = lambda: None  # type: ignore[attr-defined]
    monkeypatch.setattr("cli.app.build_default_poller", factory)
    monkeypatch.setattr("cli.app.configure_logging", lambda: None)
    return poller


def test_snapshot_renders_dashboard(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(READINGS)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["snapshot"])

    assert result.exit_code == 0
    assert "Última Leitura: 4.0" in result.stdout
    assert "Status: Cheio" in result.stdout
    assert "Média: 3.00" in result.stdout
    assert "Bomba: Inativa" in result.stdout
    assert "14:30:00  2.0" in result.stdout
    assert result.stdout.index("ID: 8") < result.stdout.index("ID: 7")
    assert stub.calls == 1
    assert stub.closed is True


def test_snapshot_failure_exits_non_zero(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient([], error=FetchError("ConnectError"))
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["snapshot"])

    assert result.exit_code == 1
    assert "Média: N/A" in result.stdout
    assert "Nenhuma leitura." in result.stdout
    assert stub.closed is True


def test_watch_stops_after_requested_cycles(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(READINGS)
    poller = _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["watch", "--cycles", "2"])

    assert result.exit_code == 0
    assert result.stdout.count("Sistema de Monitoramento de Água") >= 2
    assert stub.calls >= 2
    assert stub.closed is True
    assert poller.running is False


def test_watch_exits_when_rendering_fails(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(READINGS)
    poller = _install_stub(monkeypatch, stub)

    def broken(state) -> None:
        raise AttributeError("no renderer")

    monkeypatch.setattr("cli.app.render_dashboard", broken)

    result = runner.invoke(app, ["watch", "--cycles", "5"])

    assert result.exit_code != 0
    assert isinstance(result.exception, AttributeError)
    assert stub.closed is True
    assert poller.running is False
