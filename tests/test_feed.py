"""Tests for news posts, media stories and the admin session flag."""
from datetime import datetime, timedelta, timezone

import pytest

from league.engine import LeagueEngine
from league.errors import UnknownReference, ValidationFailure
from league.models import StoryType

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def feed(store):
    return LeagueEngine(store, clock=lambda: NOW)


@pytest.mark.asyncio
async def test_stories_expire_after_a_day(feed):
    story = await feed.add_story(StoryType.VIDEO, "https://cdn.example/clip.mp4", duration=12.5)
    assert story.expires_at == NOW + timedelta(hours=24)
    assert [s.id for s in await feed.active_stories()] == [story.id]
    assert await feed.active_stories(NOW + timedelta(hours=25)) == []
    assert await feed.prune_stories(NOW + timedelta(hours=25)) == 1
    assert await feed.prune_stories(NOW + timedelta(hours=25)) == 0


@pytest.mark.asyncio
async def test_news_newest_first(store):
    ticks = iter([NOW, NOW + timedelta(minutes=5)])
    engine = LeagueEngine(store, clock=lambda: next(ticks))
    old = await engine.create_news("Registration open")
    new = await engine.create_news("Fixtures published", image="https://img.example/fx.png")
    assert [p.id for p in await engine.list_news()] == [new.id, old.id]


@pytest.mark.asyncio
async def test_news_validation(feed):
    with pytest.raises(ValidationFailure):
        await feed.create_news("")
    with pytest.raises(UnknownReference):
        await feed.delete_news("n_missing")


@pytest.mark.asyncio
async def test_admin_session_flag(engine, store):
    assert not await engine.session.is_logged_in()
    await engine.session.login()
    assert await store.get_raw("asl_admin_auth") == "true"
    await engine.session.logout()
    assert not await engine.session.is_logged_in()


@pytest.mark.asyncio
async def test_clear_all_resets_everything(engine, league):
    await engine.session.login()
    await engine.clear_all()
    assert await engine.list_players() == []
    assert await engine.list_tournaments() == []
    assert not await engine.session.is_logged_in()
