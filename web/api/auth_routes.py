"""Auth API routes: admin login, logout, current session."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from league.engine import LeagueEngine
from web.api.utils import get_engine
from web.auth import create_access_token, get_current_admin, require_admin, verify_admin_password

logger = logging.getLogger("asl.api")

router = APIRouter(prefix="/api/auth", tags=["auth"])


class LoginRequest(BaseModel):
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: str = "admin"


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, engine: LeagueEngine = Depends(get_engine)):
    """Check the admin password, set the admin flag and return a JWT."""
    if not verify_admin_password(body.password):
        logger.warning("Rejected admin login")
        raise HTTPException(status_code=401, detail="Invalid password")
    await engine.session.login()
    return LoginResponse(access_token=create_access_token())


@router.post("/logout")
async def logout(admin: str = Depends(require_admin), engine: LeagueEngine = Depends(get_engine)):
    """Clear the admin flag. Every issued token stops working."""
    await engine.session.logout()
    return {"ok": True}


@router.get("/me")
async def get_me(admin: Optional[str] = Depends(get_current_admin)):
    """Current admin if logged in, else null. For the frontend auth check."""
    if not admin:
        return None
    return {"username": admin, "role": "admin"}
