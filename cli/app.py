from __future__ import annotations

import asyncio
import sys
from typing import Optional

import typer

from cli.render import render_dashboard
from logging_config import configure_logging
from services.poller import DashboardState, ReadingsPoller, build_default_poller


app = typer.Typer(
    help="Terminal view of the water monitoring dashboard.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def main() -> None:
    """Entry point for the CLI."""
    configure_logging()


async def _snapshot(poller: ReadingsPoller) -> DashboardState:
    try:
        return await poller.refresh()
    finally:
        await poller.client.close()


def _clear_screen() -> None:
    if sys.stdout.isatty():
        typer.echo("\x1b[2J\x1b[H", nl=False)


async def _watch(poller: ReadingsPoller, cycles: Optional[int]) -> None:
    finished = asyncio.Event()
    failures: list[Exception] = []
    completed = 0

    def on_change(state: DashboardState) -> None:
        nonlocal completed
        if state.loading:
            return
        try:
            _clear_screen()
            render_dashboard(state)
        except Exception as exc:
            failures.append(exc)
            finished.set()
            raise
        completed += 1
        if cycles is not None and completed >= cycles:
            finished.set()

    poller.subscribe(on_change)
    poller.start()
    try:
        await finished.wait()
    finally:
        await poller.stop()
    if failures:
        raise failures[0]


@app.command("snapshot")
def snapshot_command() -> None:
    """Fetch the readings once and print the dashboard."""
    poller = build_default_poller()
    try:
        state = asyncio.run(_snapshot(poller))
    finally:
        build_default_poller.cache_clear()
    render_dashboard(state)
    if state.error:
        raise typer.Exit(code=1)


@app.command("watch")
def watch_command(
    cycles: Optional[int] = typer.Option(
        None,
        "--cycles",
        "-n",
        min=1,
        help="Stop after this many refreshes (runs until interrupted by default).",
    ),
) -> None:
    """Poll the endpoint on its fixed cadence and redraw after every refresh."""
    poller = build_default_poller()
    try:
        asyncio.run(_watch(poller, cycles))
    except KeyboardInterrupt:
        typer.echo()
    finally:
        build_default_poller.cache_clear()
