"""Shopper session management"""

import uuid
from datetime import datetime, timezone
from typing import Callable, Optional
from dataclasses import dataclass, field

from ..database.carts import CartStore
from ..database.local_store import KeyValueStore
from ..services.auth_client import AuthSession, AuthUser
from ..services.checkout_flow import CheckoutSession
from ..services.pricing import PricingEngine


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ShopperSession:
    """One shopper's browser-equivalent state"""
    session_id: str
    created_at: datetime
    updated_at: datetime
    store: KeyValueStore = field(default_factory=KeyValueStore)
    auth: Optional[AuthSession] = None
    checkout: Optional[CheckoutSession] = None

    @property
    def cart(self) -> CartStore:
        return CartStore(self.store)

    @property
    def user(self) -> Optional[AuthUser]:
        return self.auth.user if self.auth else None

    @property
    def access_token(self) -> Optional[str]:
        return self.auth.access_token if self.auth else None

    def touch(self) -> None:
        self.updated_at = utcnow()

    def start_checkout(self, pricing: Optional[PricingEngine] = None) -> CheckoutSession:
        """Begin a fresh checkout; any previous progress is discarded"""
        self.checkout = CheckoutSession(self.cart, pricing=pricing)
        self.touch()
        return self.checkout

    def end_checkout(self) -> None:
        self.checkout = None
        self.touch()


class SessionManager:
    """Manages shopper sessions"""

    def __init__(self, store_factory: Optional[Callable[[str], KeyValueStore]] = None):
        self.sessions: dict[str, ShopperSession] = {}
        self._store_factory = store_factory or (lambda session_id: KeyValueStore())

    def create_session(self) -> ShopperSession:
        """Create a new session"""
        now = utcnow()
        session_id = str(uuid.uuid4())
        session = ShopperSession(
            session_id=session_id,
            created_at=now,
            updated_at=now,
            store=self._store_factory(session_id),
        )
        self.sessions[session.session_id] = session
        return session

    def get_session(self, session_id: str) -> Optional[ShopperSession]:
        """Get session by ID"""
        return self.sessions.get(session_id)

    def delete_session(self, session_id: str) -> bool:
        """Delete a session"""
        if session_id in self.sessions:
            del self.sessions[session_id]
            return True
        return False

    def cleanup_old_sessions(self, max_age_hours: int = 24) -> int:
        """Remove sessions older than max_age_hours"""
        now = utcnow()
        old_sessions = [
            sid for sid, session in self.sessions.items()
            if (now - session.updated_at).total_seconds() > max_age_hours * 3600
        ]
        for sid in old_sessions:
            del self.sessions[sid]
        return len(old_sessions)

