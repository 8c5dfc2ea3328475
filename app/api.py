"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from app.schemas import DashboardResponse, ReadingPayload
from services.poller import DashboardState, ReadingsPoller, build_default_poller
from services.projector import Projector

router = APIRouter()


def get_poller() -> ReadingsPoller:
    return build_default_poller()


def dashboard_response(state: DashboardState) -> DashboardResponse:
    return DashboardResponse.build(
        state.summary(Projector()),
        error=state.error,
        loading=state.loading,
        initial_loading=state.initial_loading,
        last_refresh=state.last_refresh,
    )


@router.get(
    "/api/dashboard",
    response_model=DashboardResponse,
    summary="Derived dashboard values for the latest snapshot.",
)
async def get_dashboard(
    poller: ReadingsPoller = Depends(get_poller),
) -> DashboardResponse:
    return dashboard_response(poller.state)


@router.get(
    "/api/readings",
    response_model=List[ReadingPayload],
    summary="Raw readings from the latest successful poll.",
)
async def get_readings(
    poller: ReadingsPoller = Depends(get_poller),
) -> List[ReadingPayload]:
    return [ReadingPayload.from_reading(reading) for reading in poller.state.readings]


@router.post(
    "/api/refresh",
    response_model=DashboardResponse,
    summary="Poll the device immediately and return the new dashboard.",
)
async def refresh_dashboard(
    poller: ReadingsPoller = Depends(get_poller),
) -> DashboardResponse:
    state = await poller.refresh()
    return dashboard_response(state)


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /ui for the dashboard."}
