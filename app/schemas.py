"""Pydantic schemas for the device payload and the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.records import Reading
from services.projector import DashboardSummary


class ReadingPayload(BaseModel):
    """One record of the JSON array returned by the device endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Union[int, str]
    leitura: float
    status: Optional[str] = None
    bomba_ligada: Optional[str] = Field(default=None, alias="bombaLigada")
    timestamp: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def _scalar_status(cls, value: Any) -> Optional[str]:
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float, str)):
            return str(value)
        return None

    @field_validator("bomba_ligada", "timestamp", mode="before")
    @classmethod
    def _loose_string(cls, value: Any) -> Optional[str]:
        # Anything but a string means "not Sim" or an invalid timestamp.
        return value if isinstance(value, str) else None

    def to_reading(self) -> Reading:
        return Reading(
            id=self.id,
            leitura=self.leitura,
            status=self.status,
            bomba_ligada=self.bomba_ligada,
            timestamp=self.timestamp,
        )

    @classmethod
    def from_reading(cls, reading: Reading) -> "ReadingPayload":
        return cls(
            id=reading.id,
            leitura=reading.leitura,
            status=reading.status,
            bomba_ligada=reading.bomba_ligada,
            timestamp=reading.timestamp,
        )


class Cards(BaseModel):
    """Values shown on the four summary cards."""

    latest_value: Union[float, str]
    status: str
    average: str
    pump: str


class ChartPointOut(BaseModel):
    label: str
    value: float


class HistoryItem(BaseModel):
    id: Union[int, str]
    leitura: float
    status: Optional[str] = None
    pump: str = Field(..., description="Ligada or Desligada.")
    time: str = Field(..., description="Normalized timestamp, or Invalid Date.")


class DashboardResponse(BaseModel):
    """Full dashboard projection for the current snapshot."""

    cards: Cards
    chart: List[ChartPointOut] = Field(default_factory=list)
    history: List[HistoryItem] = Field(default_factory=list)
    error: Optional[str] = None
    loading: bool = False
    initial_loading: bool = True
    last_refresh: datetime

    @classmethod
    def build(
        cls,
        summary: DashboardSummary,
        *,
        error: Optional[str],
        loading: bool,
        initial_loading: bool,
        last_refresh: datetime,
    ) -> "DashboardResponse":
        return cls(
            cards=Cards(
                latest_value=summary.latest_value,
                status=summary.latest_status,
                average=summary.average,
                pump=summary.pump_status,
            ),
            chart=[ChartPointOut(label=point.label, value=point.value) for point in summary.chart],
            history=[
                HistoryItem(
                    id=entry.reading.id,
                    leitura=entry.reading.leitura,
                    status=entry.reading.status,
                    pump=entry.pump_label,
                    time=entry.time_label,
                )
                for entry in summary.history
            ],
            error=error,
            loading=loading,
            initial_loading=initial_loading,
            last_refresh=last_refresh,
        )
