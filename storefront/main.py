"""
Storefront Application

Checkout service for the Fuel & Flex sports nutrition store: cart,
pricing, promo codes, the three-step checkout and order history.
"""

import os
import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from .core.config import settings, Settings
from .core.readiness import Backend, BackendHandle
from .core.session import SessionManager
from .database.local_store import JsonFileStore
from .errors import ConfigUnavailable
from .routes import products_router, cart_router, checkout_router, orders_router, auth_router
from .services.auth_client import AuthClient
from .services.backend_client import InMemoryDataStore, RestDataStore
from .services.pricing import PricingEngine

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def build_backend(config: Settings) -> Backend:
    """
    Construct the collaborator clients from settings.

    Without a backend URL the service runs on an in-memory data store
    and authentication is unavailable.
    """
    if config.backend_url and not config.backend_anon_key:
        raise ValueError("BACKEND_ANON_KEY is required when BACKEND_URL is set")

    if not config.backend_configured:
        logger.warning("Hosted backend not configured, using in-memory data store")
        return Backend(data_store=InMemoryDataStore())

    return Backend(
        data_store=RestDataStore(config.backend_url, config.backend_anon_key),
        auth=AuthClient(config.backend_url, config.backend_anon_key, jwt_secret=config.backend_jwt_secret),
    )


def build_session_manager(config: Settings) -> SessionManager:
    if not config.local_store_path:
        return SessionManager()

    os.makedirs(config.local_store_path, exist_ok=True)
    return SessionManager(
        store_factory=lambda session_id: JsonFileStore(
            os.path.join(config.local_store_path, f"{session_id}.json")
        )
    )


def create_app(
    config: Optional[Settings] = None,
    backend_factory: Optional[Callable[[Settings], Backend]] = None,
    sessions: Optional[SessionManager] = None,
) -> FastAPI:
    """Create the FastAPI application"""
    config = config or settings
    backend_factory = backend_factory or build_backend

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events"""
        logger.info(f"{config.app_name} storefront starting up...")
        logger.info(f"Hosted backend configured: {config.backend_configured}")

        handle = BackendHandle(timeout=config.backend_ready_timeout)
        app.state.backend_handle = handle

        backend = None
        try:
            backend = backend_factory(config)
        except ValueError as e:
            handle.fail(ConfigUnavailable(f"Backend configuration invalid: {e}"))
        else:
            handle.provide(backend)

        yield

        logger.info(f"{config.app_name} storefront shutting down...")
        if backend:
            await backend.close()

    app = FastAPI(
        title=f"{config.app_name} Storefront",
        description="Cart, pricing, promo codes, checkout and order history",
        version=config.app_version,
        lifespan=lifespan,
    )

    app.state.settings = config
    app.state.sessions = sessions or build_session_manager(config)
    app.state.pricing = PricingEngine.from_settings(config)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, restrict this
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(products_router)
    app.include_router(cart_router)
    app.include_router(checkout_router)
    app.include_router(orders_router)
    app.include_router(auth_router)

    @app.get("/")
    async def home():
        """Storefront API index"""
        return {
            "message": f"{config.app_name} Storefront API",
            "docs": "/docs",
            "endpoints": {
                "products": "/api/products",
                "sessions": "/api/sessions",
                "cart": "/api/cart/{session_id}",
                "checkout": "/api/checkout/{session_id}",
                "orders": "/api/orders/{session_id}",
                "auth": "/api/auth",
            },
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        handle: Optional[BackendHandle] = getattr(app.state, "backend_handle", None)
        return {
            "status": "healthy",
            "service": "storefront",
            "backend_configured": config.backend_configured,
            "backend_ready": bool(handle and handle.ready),
            "currency": config.currency,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
