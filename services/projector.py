"""Derived dashboard values computed from the current reading list."""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence, Tuple, Union

from models.records import Reading
from services.timestamps import (
    format_datetime_label,
    format_time_label,
    instant_sort_key,
    parse_timestamp,
)
from settings import CHART_WINDOW_SIZE

NOT_AVAILABLE = "N/A"

PUMP_ACTIVE = "Ativa"
PUMP_INACTIVE = "Inativa"
PUMP_ON_LABEL = "Ligada"
PUMP_OFF_LABEL = "Desligada"


@dataclass(frozen=True)
class ChartPoint:
    label: str
    value: float


@dataclass(frozen=True)
class HistoryEntry:
    reading: Reading
    pump_label: str
    time_label: str


@dataclass(frozen=True)
class DashboardSummary:
    """Display-ready values for one snapshot of readings."""

    latest: Optional[Reading]
    latest_value: Union[float, str]
    latest_status: str
    average: str
    pump_status: str
    chart: Tuple[ChartPoint, ...]
    history: Tuple[HistoryEntry, ...]


def latest_reading(readings: Sequence[Reading]) -> Optional[Reading]:
    """Pick the reading with the greatest valid instant.

    The first reading seeds the fold. Invalid instants never replace a valid
    one, so when every instant is invalid the first reading is returned.
    """
    if not readings:
        return None
    latest = readings[0]
    latest_instant = parse_timestamp(latest.timestamp)
    for current in readings[1:]:
        current_instant = parse_timestamp(current.timestamp)
        if current_instant is None:
            continue
        if latest_instant is None or current_instant > latest_instant:
            latest, latest_instant = current, current_instant
    return latest


def average_reading(readings: Sequence[Reading]) -> str:
    if not readings:
        return NOT_AVAILABLE
    total = sum(reading.leitura for reading in readings)
    mean = total / len(readings)
    if not math.isfinite(mean):
        return "NaN" if math.isnan(mean) else ("Infinity" if mean > 0 else "-Infinity")
    return str(Decimal(mean).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def pump_status(reading: Optional[Reading]) -> str:
    if reading is not None and reading.pump_on:
        return PUMP_ACTIVE
    return PUMP_INACTIVE


def pump_label(reading: Reading) -> str:
    return PUMP_ON_LABEL if reading.pump_on else PUMP_OFF_LABEL


def chart_window(
    readings: Sequence[Reading], size: int = CHART_WINDOW_SIZE
) -> Tuple[ChartPoint, ...]:
    """Last ``size`` readings in arrival order, not sorted by time."""
    if size <= 0:
        return ()
    tail = readings[-size:]
    return tuple(
        ChartPoint(
            label=format_time_label(parse_timestamp(reading.timestamp)),
            value=reading.leitura,
        )
        for reading in tail
    )


def history(readings: Sequence[Reading]) -> Tuple[Reading, ...]:
    """Readings newest first; invalid timestamps sink to the bottom."""
    return tuple(sorted(readings, key=instant_sort_key, reverse=True))


class Projector:
    """Pure projection component that can be unit tested in isolation."""

    def __init__(self, chart_size: int = CHART_WINDOW_SIZE) -> None:
        self.chart_size = chart_size

    def project(self, readings: Sequence[Reading]) -> DashboardSummary:
        latest = latest_reading(readings)
        entries = tuple(
            HistoryEntry(
                reading=reading,
                pump_label=pump_label(reading),
                time_label=format_datetime_label(parse_timestamp(reading.timestamp)),
            )
            for reading in history(readings)
        )
        return DashboardSummary(
            latest=latest,
            latest_value=latest.leitura if latest is not None else NOT_AVAILABLE,
            latest_status=(
                latest.status if latest is not None and latest.status is not None else NOT_AVAILABLE
            ),
            average=average_reading(readings),
            pump_status=pump_status(latest),
            chart=chart_window(readings, self.chart_size),
            history=entries,
        )
