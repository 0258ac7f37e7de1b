from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from services.cart_service.schemas import CartItem


class SessionState(str, Enum):
    BOUND = "bound"
    HYDRATED = "hydrated"


@dataclass
class Session:
    session_id: str
    user_id: str
    csrf_token: str
    expires_at: datetime
    cart: Optional[list[CartItem]] = None
    is_new: bool = field(default=False, compare=False)

    @property
    def state(self) -> SessionState:
        return SessionState.BOUND if self.cart is None else SessionState.HYDRATED

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or datetime.now(timezone.utc)) >= self.expires_at
