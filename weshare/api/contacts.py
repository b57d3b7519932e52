from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from ..schemas.api import ContactListResponse
from ..services.analytics import collect_contacts, contacts_to_csv
from ..services.errors import SiteStoreError
from .deps import Workspace, get_workspace

router = APIRouter(prefix="/api", tags=["contacts"])


@router.get("/contacts")
async def list_contacts(workspace: Workspace = Depends(get_workspace)) -> ContactListResponse:
    contacts = collect_contacts(workspace.state.sites)
    return ContactListResponse(contacts=contacts, total=len(contacts))


@router.get("/contacts.csv")
async def export_contacts(workspace: Workspace = Depends(get_workspace)) -> Response:
    body = contacts_to_csv(collect_contacts(workspace.state.sites))
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="contacts.csv"'},
    )


@router.delete("/contacts/{contact_id}")
async def delete_contact(contact_id: str, workspace: Workspace = Depends(get_workspace)) -> dict:
    try:
        await workspace.store.delete_contact(contact_id)
    except SiteStoreError as exc:
        raise workspace.http_error(exc) from exc
    # contacts live on the cached sites; pick up the new table state
    await workspace.reload()
    return {"deleted": True, "id": contact_id}


__all__ = ["router"]
