from __future__ import annotations

from pathlib import Path
from typing import Sequence

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from services.poller import ReadingsPoller, build_default_poller
from services.projector import ChartPoint, Projector
from services.timestamps import format_time_label


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

CHART_WIDTH = 320
CHART_HEIGHT = 160
CHART_PADDING = 16


def get_poller() -> ReadingsPoller:
    return build_default_poller()


def _chart_points(points: Sequence[ChartPoint]) -> str:
    """SVG polyline coordinates scaled into the chart viewport."""
    if not points:
        return ""
    values = [point.value for point in points]
    low, high = min(values), max(values)
    span = (high - low) or 1.0
    step = (CHART_WIDTH - 2 * CHART_PADDING) / max(len(points) - 1, 1)
    usable_height = CHART_HEIGHT - 2 * CHART_PADDING
    coordinates = []
    for index, value in enumerate(values):
        x = CHART_PADDING + index * step
        y = CHART_HEIGHT - CHART_PADDING - (value - low) / span * usable_height
        coordinates.append(f"{x:.1f},{y:.1f}")
    return " ".join(coordinates)


router = APIRouter(include_in_schema=False)


@router.get("/ui", name="ui_index", response_class=HTMLResponse)
async def ui_index(
    request: Request,
    poller: ReadingsPoller = Depends(get_poller),
) -> HTMLResponse:
    state = poller.state
    summary = state.summary(Projector())
    show_chart = not state.initial_loading and bool(state.readings)
    return templates.TemplateResponse(
        request,
        "ui/index.html",
        {
            "state": state,
            "summary": summary,
            "last_refresh": format_time_label(state.last_refresh),
            "show_chart": show_chart,
            "chart_points": _chart_points(summary.chart),
            "chart_width": CHART_WIDTH,
            "chart_height": CHART_HEIGHT,
            "refresh_seconds": int(poller.interval),
        },
    )
