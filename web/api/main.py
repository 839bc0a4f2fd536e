"""FastAPI league API - serves league data to the admin panel and public pages."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from league.engine import LeagueEngine
from league.errors import InvalidTransition, LeagueError, QuotaExhausted, UnknownReference, ValidationFailure
from league.store import SqlStore

from web.api.auth_routes import router as auth_router
from web.api.feed_routes import router as feed_router
from web.api.routes import router as api_router
from web.api.standings_routes import router as standings_router

logger = logging.getLogger("asl.api")

ERROR_STATUS = {
    UnknownReference: 404,
    ValidationFailure: 400,
    InvalidTransition: 409,
    QuotaExhausted: 507,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = SqlStore(config.DATABASE_URL, quota=config.STORE_QUOTA)
    await store.init()
    app.state.engine = LeagueEngine(store)
    logger.info("League store ready (%s)", config.DATABASE_URL)
    yield
    await store.close()


app = FastAPI(title="ASL League API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router)
app.include_router(standings_router)
app.include_router(feed_router)
app.include_router(auth_router)


@app.exception_handler(LeagueError)
async def league_error_handler(request: Request, exc: LeagueError):
    status_code = ERROR_STATUS.get(type(exc), 400)
    if status_code == 507:
        logger.warning("Store quota exhausted on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=status_code, content={"detail": exc.message, "error": exc.kind})


@app.get("/api/health")
async def health():
    return {"status": "ok"}
