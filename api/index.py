"""
UniGo Ordering API - Main FastAPI Application

Single entry point for the cafeteria and marketplace cart/checkout routes.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from unigo import config
from unigo.cart.session import SessionRegistry
from unigo.cart.storage import RedisCartStorage
from unigo.db import close_redis, get_redis
from unigo.errors import AuthRequiredError, UniGoError
from unigo.logging import get_logger
from unigo.routers import cafeteria_router, marketplace_router
from unigo.services.database import close_database, init_database

logger = get_logger(__name__)


# ==================== FASTAPI APP ====================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    # Startup
    db = await init_database()

    storage = None
    if config.redis_configured():
        storage = RedisCartStorage(get_redis())
    else:
        logger.warning("Upstash Redis not configured; cafeteria carts will not be persisted")

    registry = SessionRegistry(db.cafeteria_orders, db.marketplace_orders, storage=storage)
    app.state.session_registry = registry

    yield

    # Shutdown
    await registry.close()
    if storage is not None:
        await close_redis()
    await close_database()


app = FastAPI(
    title="UniGo Ordering API",
    description="Campus cafeteria and marketplace carts and checkout",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(UniGoError)
async def unigo_error_handler(request: Request, exc: UniGoError):
    """Render domain errors as ``{"error": code, "detail": message}``."""
    headers = None
    if isinstance(exc, AuthRequiredError):
        headers = {"Location": exc.redirect_to}
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


app.include_router(cafeteria_router, prefix="/api")
app.include_router(marketplace_router, prefix="/api")


# ==================== HEALTH CHECK ====================

@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok", "service": "unigo"}
