from __future__ import annotations

from fastapi import APIRouter, Depends

from ..schemas.analytics import AnalyticsSummary
from ..services.analytics import aggregate
from .deps import Workspace, get_workspace

router = APIRouter(prefix="/api", tags=["analytics"])


@router.get("/analytics/summary")
async def analytics_summary(workspace: Workspace = Depends(get_workspace)) -> AnalyticsSummary:
    return aggregate(workspace.state.sites)


__all__ = ["router"]
