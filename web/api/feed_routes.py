"""News feed routes: posts and expiring media stories."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from league.engine import LeagueEngine
from league.models import StoryType
from web.api.utils import get_engine
from web.auth import require_admin

router = APIRouter(prefix="/api", tags=["feed"])


class NewsCreate(BaseModel):
    caption: str
    image: str = ""


class NewsUpdate(BaseModel):
    caption: Optional[str] = None
    image: Optional[str] = None


class StoryCreate(BaseModel):
    type: StoryType
    media_url: str
    uploader: str = "admin"
    caption: Optional[str] = None
    thumbnail: Optional[str] = None
    duration: Optional[float] = None
    match_id: Optional[str] = None


@router.get("/news")
async def list_news(engine: LeagueEngine = Depends(get_engine)):
    return [p.dump() for p in await engine.list_news()]


@router.post("/news")
async def create_news(body: NewsCreate, admin: str = Depends(require_admin), engine: LeagueEngine = Depends(get_engine)):
    return (await engine.create_news(body.caption, body.image)).dump()


@router.patch("/news/{post_id}")
async def update_news(
    post_id: str, body: NewsUpdate, admin: str = Depends(require_admin), engine: LeagueEngine = Depends(get_engine)
):
    return (await engine.update_news(post_id, **body.model_dump(exclude_none=True))).dump()


@router.delete("/news/{post_id}")
async def delete_news(post_id: str, admin: str = Depends(require_admin), engine: LeagueEngine = Depends(get_engine)):
    await engine.delete_news(post_id)
    return {"ok": True}


@router.get("/stories")
async def active_stories(engine: LeagueEngine = Depends(get_engine)):
    """Stories that have not expired yet, newest first."""
    return [s.dump() for s in await engine.active_stories()]


@router.post("/stories")
async def add_story(body: StoryCreate, admin: str = Depends(require_admin), engine: LeagueEngine = Depends(get_engine)):
    await engine.prune_stories()
    return (await engine.add_story(**body.model_dump())).dump()
