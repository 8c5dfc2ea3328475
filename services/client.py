"""HTTP client for the device readings endpoint."""

from __future__ import annotations

import logging
import time
from typing import Any, List, Optional

import httpx
from pydantic import ValidationError

from app.schemas import ReadingPayload
from models.records import Reading

logger = logging.getLogger(__name__)

FETCH_ERROR_MESSAGE = "Falha ao carregar os dados."


class FetchError(Exception):
    """Any failure to obtain a reading list: network, HTTP status or payload."""

    def __init__(self, reason: str) -> None:
        super().__init__(FETCH_ERROR_MESSAGE)
        self.reason = reason


class ReadingsClient:
    """Minimal async client for the readings endpoint."""

    def __init__(
        self,
        endpoint_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.endpoint_url = endpoint_url
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def close(self) -> None:
        await self._client.aclose()

    async def fetch_readings(self) -> List[Reading]:
        started = time.perf_counter()
        try:
            response = await self._client.get(self.endpoint_url)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise self._failure(f"HTTP {exc.response.status_code}", exc) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise self._failure(type(exc).__name__, exc) from exc
        except ValueError as exc:
            raise self._failure("malformed JSON body", exc) from exc

        readings = self._parse(payload)
        logger.debug(
            "Fetched readings",
            extra={
                "endpoint": self.endpoint_url,
                "status_code": response.status_code,
                "reading_count": len(readings),
                "elapsed_ms": int((time.perf_counter() - started) * 1000),
            },
        )
        return readings

    def _parse(self, payload: Any) -> List[Reading]:
        if not isinstance(payload, list):
            return []
        try:
            return [ReadingPayload.model_validate(item).to_reading() for item in payload]
        except ValidationError as exc:
            raise self._failure("invalid reading record", exc) from exc

    def _failure(self, reason: str, exc: Exception) -> FetchError:
        logger.warning(
            "Failed to load readings: %s",
            exc,
            extra={"endpoint": self.endpoint_url, "reason": reason},
        )
        return FetchError(reason)
