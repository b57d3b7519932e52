from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse

from ..config import get_settings
from ..renderer import render_card_preview, render_web_preview
from ..schemas.api import SiteAnalyticsResponse, SiteListResponse, SiteResponse
from ..schemas.card import CardData
from ..services.errors import SiteStoreError
from ..services.state_store import is_local_key
from ..services.sync import SyncResult
from .deps import Workspace, delete_confirmed, get_workspace

router = APIRouter(prefix="/api", tags=["sites"])


def _site_payload(workspace: Workspace, key: str, site: CardData) -> SiteResponse:
    controller = workspace.controller
    state = controller.sync_state(key)
    error = controller.last_error(key)
    return SiteResponse(
        key=key,
        sync_state=state.value if state else None,
        error=str(error) if error else None,
        site=site,
    )


def _require_site(workspace: Workspace, key: str) -> tuple[str, CardData]:
    resolved = workspace.controller.resolve_key(key)
    site = workspace.state.get(resolved)
    if site is None:
        raise HTTPException(status_code=404, detail="Site not found")
    return resolved, site


def _result_payload(workspace: Workspace, result: SyncResult) -> SiteResponse:
    if result.error is not None:
        raise workspace.http_error(result.error, workspace.last_notice())
    if result.site is None:
        raise HTTPException(status_code=404, detail="Site not found")
    return _site_payload(workspace, result.key, result.site)


@router.get("/sites")
async def list_sites(workspace: Workspace = Depends(get_workspace)) -> SiteListResponse:
    state = workspace.state
    sites = [
        _site_payload(workspace, key, site)
        for key, site in zip(state.keys(), state.sites)
    ]
    return SiteListResponse(sites=sites, total=len(sites))


@router.post("/sites", status_code=201)
async def create_site(workspace: Workspace = Depends(get_workspace)) -> SiteResponse:
    result = await workspace.controller.create()
    return _result_payload(workspace, result)


@router.get("/sites/{site_key}")
async def get_site(site_key: str, workspace: Workspace = Depends(get_workspace)) -> SiteResponse:
    resolved, site = _require_site(workspace, site_key)
    return _site_payload(workspace, resolved, site)


@router.put("/sites/{site_key}")
async def update_site(
    site_key: str,
    payload: CardData,
    workspace: Workspace = Depends(get_workspace),
) -> SiteResponse:
    resolved, _ = _require_site(workspace, site_key)
    if not is_local_key(resolved) and payload.is_saved and payload.id != resolved:
        raise HTTPException(status_code=422, detail="Site id does not match the path")
    result = await workspace.controller.update(payload, key=resolved)
    return _result_payload(workspace, result)


@router.delete("/sites/{site_key}")
async def delete_site(
    site_key: str,
    confirm: bool = Query(False),
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    resolved, _ = _require_site(workspace, site_key)
    token = delete_confirmed.set(confirm)
    try:
        result = await workspace.controller.delete(resolved)
    finally:
        delete_confirmed.reset(token)
    if not result.confirmed:
        raise HTTPException(status_code=409, detail="Deletion not confirmed; pass confirm=true")
    if result.error is not None:
        raise workspace.http_error(result.error, workspace.last_notice())
    return {"deleted": True, "key": resolved}


@router.post("/sites/{site_key}/duplicate", status_code=201)
async def duplicate_site(site_key: str, workspace: Workspace = Depends(get_workspace)) -> SiteResponse:
    resolved, _ = _require_site(workspace, site_key)
    result = await workspace.controller.duplicate(resolved)
    return _result_payload(workspace, result)


@router.get("/sites/{site_key}/preview", response_class=HTMLResponse)
async def preview_site(
    site_key: str,
    mode: Literal["mobile", "desktop"] = Query("mobile"),
    workspace: Workspace = Depends(get_workspace),
) -> HTMLResponse:
    _, site = _require_site(workspace, site_key)
    localizer = workspace.controller.localizer
    if mode == "desktop":
        html = render_web_preview(site, localizer, base_url=get_settings().public_base_url)
    else:
        html = render_card_preview(site, localizer)
    return HTMLResponse(content=html)


@router.get("/sites/{site_key}/analytics")
async def site_analytics(
    site_key: str,
    limit: int = Query(30, ge=1, le=365),
    workspace: Workspace = Depends(get_workspace),
) -> SiteAnalyticsResponse:
    resolved, _ = _require_site(workspace, site_key)
    if is_local_key(resolved):
        return SiteAnalyticsResponse(site_id=resolved, days=[])
    try:
        days = await workspace.store.analytics_for_site(resolved, limit=limit)
    except SiteStoreError as exc:
        raise workspace.http_error(exc) from exc
    return SiteAnalyticsResponse(site_id=resolved, days=days)


__all__ = ["router"]
