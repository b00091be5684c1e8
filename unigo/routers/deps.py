"""
Shared Dependencies for Routers

Session lookup (cookie-keyed) and the catalog service.
"""
from fastapi import Depends, Request, Response

from unigo import config
from unigo.cart.session import CartSession, SessionRegistry
from unigo.logging import bind_session
from unigo.services.database import Database, get_database_async
from unigo.services.domains.catalog import CatalogService


def get_session_registry(request: Request) -> SessionRegistry:
    """Registry created in the application lifespan."""
    return request.app.state.session_registry


async def get_cart_session(
    request: Request,
    response: Response,
    registry: SessionRegistry = Depends(get_session_registry),
) -> CartSession:
    """Resolve (or start) the caller's cart session and keep its cookie set."""
    cookie = request.cookies.get(config.SESSION_COOKIE_NAME)
    session = await registry.get_or_create(cookie)
    bind_session(session.session_id)
    if session.session_id != cookie:
        response.set_cookie(
            config.SESSION_COOKIE_NAME,
            session.session_id,
            max_age=config.SESSION_TTL_HOURS * 3600,
            httponly=True,
            samesite="lax",
        )
    return session


async def get_db() -> Database:
    return await get_database_async()


def get_catalog(db: Database = Depends(get_db)) -> CatalogService:
    return db.catalog
