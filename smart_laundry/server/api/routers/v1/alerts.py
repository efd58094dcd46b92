"""Recently fired completion alerts."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from smart_laundry.server.api.schemas.machines import AlertSchema
from smart_laundry.server.dependencies import get_runtime
from smart_laundry.services import LaundryRuntime

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.get("", response_model=List[AlertSchema])
async def recent_alerts(runtime: LaundryRuntime = Depends(get_runtime)) -> List[AlertSchema]:
    return [AlertSchema.from_domain(alert) for alert in runtime.recent_alerts.recent()]
