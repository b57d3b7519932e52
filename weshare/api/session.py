from __future__ import annotations

from fastapi import APIRouter, Depends

from ..services.auth import UserContext
from .deps import get_auth_provider, get_current_user, get_registry

router = APIRouter(prefix="/api", tags=["session"])


@router.get("/session")
async def current_session(user: UserContext = Depends(get_current_user)) -> dict:
    return {"id": user.id, "email": user.email, "full_name": user.full_name}


@router.post("/session/sign-out")
async def sign_out(user: UserContext = Depends(get_current_user)) -> dict:
    await get_auth_provider().sign_out(user)
    get_registry().drop(user.id)
    return {"signed_out": True}


__all__ = ["router"]
