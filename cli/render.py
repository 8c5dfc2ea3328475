from __future__ import annotations

from typing import Any, Iterable

import typer

from services.poller import DashboardState
from services.projector import DashboardSummary, Projector
from services.timestamps import format_time_label


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_chart(summary: DashboardSummary) -> None:
    echo_heading("Gráfico")
    if not summary.chart:
        typer.echo("Sem dados.")
        return
    for point in summary.chart:
        typer.echo(f"  {point.label}  {point.value}")


def render_history(summary: DashboardSummary) -> None:
    echo_heading("Histórico de Leituras")
    if not summary.history:
        typer.echo("Nenhuma leitura.")
        return
    for entry in summary.history:
        reading = entry.reading
        typer.echo(
            f"  - ID: {reading.id} | Leitura: {reading.leitura} | Status: {reading.status}"
            f" | Bomba: {entry.pump_label} | Hora: {entry.time_label}"
        )


def render_dashboard(state: DashboardState) -> None:
    summary = state.summary(Projector())
    echo_heading("Sistema de Monitoramento de Água")
    typer.echo(f"Última atualização: {format_time_label(state.last_refresh)}")
    if state.error:
        typer.secho(state.error, fg=typer.colors.RED, err=True)

    typer.echo()
    echo_key_values(
        [
            ("Última Leitura", summary.latest_value),
            ("Status", summary.latest_status),
            ("Média", summary.average),
            ("Bomba", summary.pump_status),
        ]
    )

    if not state.initial_loading and state.readings:
        typer.echo()
        render_chart(summary)

    typer.echo()
    render_history(summary)
