import secrets
import time
import uuid
from datetime import datetime, timedelta, timezone

import structlog

from services.cart_service.schemas import CartItem
from services.cart_service.service import CartService
from shared.observability.metrics import shop_active_sessions
from shared.security.api_key import generate_csrf_token
from shared.security.jwt_handler import create_session_token, verify_session_token
from .models import Session

logger = structlog.get_logger(__name__)


def mint_user_id() -> str:
    return f"user_{int(time.time() * 1000)}_{secrets.token_hex(4)}"


class SessionBinder:
    """
    Binds clients to user ids and caches each session's cart.

    A request without a valid session token starts a new session (a fresh
    user id, bound but not hydrated). The first cart read hydrates the
    session from the CartService; later reads in the same session use the
    cached cart. Expired sessions and their cached carts are dropped from
    memory, persisted carts are left alone.
    """

    def __init__(self, cart_service: CartService, secret: str, ttl_seconds: int):
        self.cart_service = cart_service
        self.secret = secret
        self.ttl = timedelta(seconds=ttl_seconds)
        self._sessions: dict[str, Session] = {}

    def _register(self, session: Session) -> Session:
        self._sessions[session.session_id] = session
        shop_active_sessions.set(len(self._sessions))
        return session

    def _prune(self, now: datetime) -> None:
        expired = [s for s in self._sessions.values() if s.is_expired(now)]
        for session in expired:
            del self._sessions[session.session_id]

        live_users = {s.user_id for s in self._sessions.values()}
        for session in expired:
            if session.user_id not in live_users:
                self.cart_service.forget(session.user_id)

        if expired:
            shop_active_sessions.set(len(self._sessions))
            logger.info("session.expired", count=len(expired))

    def resolve(self, token: str | None) -> Session:
        now = datetime.now(timezone.utc)
        self._prune(now)

        claims = verify_session_token(token, self.secret) if token else None
        if claims and claims.get("sub") and claims.get("sid") and claims.get("csrf"):
            session = self._sessions.get(claims["sid"])
            if session is not None and session.user_id == claims["sub"]:
                session.is_new = False
                return session

            # Valid token this process has not seen (e.g. after a restart)
            expires_at = now + self.ttl
            if claims.get("exp"):
                expires_at = datetime.fromtimestamp(claims["exp"], timezone.utc)
            return self._register(Session(
                session_id=claims["sid"],
                user_id=claims["sub"],
                csrf_token=claims["csrf"],
                expires_at=expires_at,
            ))

        session = self._register(Session(
            session_id=uuid.uuid4().hex,
            user_id=mint_user_id(),
            csrf_token=generate_csrf_token(),
            expires_at=now + self.ttl,
            is_new=True,
        ))
        logger.info("session.created", user_id=session.user_id)
        return session

    def issue_token(self, session: Session) -> str:
        return create_session_token(
            {"sub": session.user_id, "sid": session.session_id, "csrf": session.csrf_token},
            self.secret,
            expires_at=session.expires_at,
        )

    async def hydrate(self, session: Session) -> list[CartItem]:
        if session.cart is None:
            session.cart = await self.cart_service.get(session.user_id)
            logger.debug("session.hydrated", user_id=session.user_id, items=len(session.cart))
        return session.cart

    def refresh(self, session: Session, cart: list[CartItem]) -> None:
        session.cart = cart

    def __len__(self) -> int:
        return len(self._sessions)
