# Core modules

from .config import settings, get_settings, Settings
from .readiness import Backend, BackendHandle
from .session import SessionManager, ShopperSession

__all__ = [
    "settings",
    "get_settings",
    "Settings",
    "Backend",
    "BackendHandle",
    "SessionManager",
    "ShopperSession",
]
