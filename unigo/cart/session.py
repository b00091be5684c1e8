"""
Cart sessions.

Each browser session owns one cafeteria cart and one marketplace cart with
their controllers and checkout submissions. The SessionRegistry is created
with the application (FastAPI lifespan), hands sessions to request handlers,
and drops sessions idle longer than the TTL.
"""
import secrets
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from unigo import config
from unigo.logging import get_logger, sanitize_id_for_logging
from unigo.services.domains.orders import OrderGateway
from unigo.services.models import DeliveryInfo, MarketplaceProduct, MenuItem, PickupInfo

from .checkout import CheckoutSubmission
from .models import Cart
from .service import CartController
from .storage import RedisCartStorage

logger = get_logger(__name__)

MAX_SESSION_ID_LENGTH = 128


class CartSession:
    """Carts owned by one browser session."""

    def __init__(
        self,
        session_id: str,
        cafeteria_gateway: OrderGateway,
        marketplace_gateway: OrderGateway,
        cafeteria_cart: Optional[Cart[MenuItem]] = None,
        storage: Optional[RedisCartStorage] = None,
    ):
        self.session_id = session_id
        self.storage = storage
        self.created_at = datetime.now(timezone.utc)
        self.last_seen = self.created_at

        self.cafeteria: CartController[MenuItem] = CartController(
            cafeteria_cart or Cart(), cafeteria_gateway, PickupInfo
        )
        # Marketplace cart lives only as long as the session
        self.marketplace: CartController[MarketplaceProduct] = CartController(
            Cart(), marketplace_gateway, DeliveryInfo
        )
        self.cafeteria_checkout = CheckoutSubmission(self.cafeteria)
        self.marketplace_checkout = CheckoutSubmission(self.marketplace)

    def touch(self, now: Optional[datetime] = None) -> None:
        self.last_seen = now or datetime.now(timezone.utc)

    def is_expired(self, ttl: timedelta, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now - self.last_seen > ttl

    async def persist(self) -> None:
        """Write the cafeteria cart through to Redis (no-op without storage)."""
        if self.storage is not None:
            await self.storage.save(self.session_id, self.cafeteria.cart)


class SessionRegistry:
    """In-memory map of session id -> CartSession."""

    def __init__(
        self,
        cafeteria_gateway: OrderGateway,
        marketplace_gateway: OrderGateway,
        storage: Optional[RedisCartStorage] = None,
        ttl_hours: int = config.SESSION_TTL_HOURS,
    ):
        self.cafeteria_gateway = cafeteria_gateway
        self.marketplace_gateway = marketplace_gateway
        self.storage = storage
        self.ttl = timedelta(hours=ttl_hours)
        self._sessions: Dict[str, CartSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    @staticmethod
    def new_session_id() -> str:
        return secrets.token_urlsafe(32)

    async def get_or_create(self, session_id: Optional[str] = None) -> CartSession:
        """
        Return the live session for ``session_id``, creating it if needed.

        A new session rehydrates its cafeteria cart from storage, so a
        returning cookie gets its cart back after a restart.
        """
        self.prune()

        if not session_id or len(session_id) > MAX_SESSION_ID_LENGTH:
            session_id = self.new_session_id()

        session = self._sessions.get(session_id)
        if session is not None:
            session.touch()
            return session

        cart = None
        if self.storage is not None:
            cart = await self.storage.load(session_id)

        # Another request may have created it while we awaited the load
        session = self._sessions.get(session_id)
        if session is None:
            session = CartSession(
                session_id,
                self.cafeteria_gateway,
                self.marketplace_gateway,
                cafeteria_cart=cart,
                storage=self.storage,
            )
            self._sessions[session_id] = session
            logger.debug(f"Created cart session {sanitize_id_for_logging(session_id)}")
        session.touch()
        return session

    def prune(self, now: Optional[datetime] = None) -> int:
        """Drop sessions idle longer than the TTL; returns how many were dropped."""
        expired = [
            sid for sid, session in self._sessions.items()
            if session.is_expired(self.ttl, now)
        ]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info(f"Expired {len(expired)} idle cart session(s)")
        return len(expired)

    async def close(self) -> None:
        """Tear down all sessions (application shutdown)."""
        count = len(self._sessions)
        self._sessions.clear()
        logger.info(f"Session registry closed ({count} session(s) dropped)")
