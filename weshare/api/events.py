from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ..schemas.api import EventsResponse
from .deps import Workspace, get_workspace

router = APIRouter(prefix="/api", tags=["events"])


@router.get("/events")
async def list_events(
    since: int = Query(0, ge=0),
    workspace: Workspace = Depends(get_workspace),
) -> EventsResponse:
    events, next_index = workspace.controller.events.events_since(since)
    return EventsResponse(
        events=[event.model_dump(mode="json") for event in events],
        next_index=next_index,
    )


__all__ = ["router"]
