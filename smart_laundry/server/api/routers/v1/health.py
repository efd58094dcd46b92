"""Liveness and readiness probes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from smart_laundry.enterprise.core import StorageFailureError
from smart_laundry.server.dependencies import get_runtime
from smart_laundry.services import LaundryRuntime

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
async def live() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/ready")
async def ready(runtime: LaundryRuntime = Depends(get_runtime)) -> dict[str, object]:
    try:
        runtime.engine.snapshot()
    except StorageFailureError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return {"status": "ready", "poller_running": runtime.poller.running}
