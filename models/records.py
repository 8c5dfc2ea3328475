"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

PUMP_ON = "Sim"


@dataclass(frozen=True, slots=True)
class Reading:
    """A single water sensor reading as received from the device endpoint."""

    id: Union[int, str]
    leitura: float
    status: Optional[str] = None
    bomba_ligada: Optional[str] = None
    timestamp: Optional[str] = None

    @property
    def pump_on(self) -> bool:
        return self.bomba_ligada == PUMP_ON
