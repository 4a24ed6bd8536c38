"""
Backend readiness handshake.

The backend clients are constructed once at startup and handed over
through a one-shot future. Anything that needs them awaits ``wait()``
with a single timeout instead of polling.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from ..errors import ConfigUnavailable
from ..services.auth_client import AuthClient
from ..services.backend_client import DataStore

logger = logging.getLogger(__name__)


@dataclass
class Backend:
    """Constructed collaborator clients"""
    data_store: DataStore
    auth: Optional[AuthClient] = None

    async def close(self) -> None:
        await self.data_store.close()
        if self.auth:
            await self.auth.close()


class BackendHandle:
    """Resolved exactly once with the backend, or failed once"""

    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout
        self._future: Optional[asyncio.Future] = None

    def _get_future(self) -> asyncio.Future:
        if self._future is None:
            self._future = asyncio.get_running_loop().create_future()
        return self._future

    @property
    def ready(self) -> bool:
        return (
            self._future is not None
            and self._future.done()
            and not self._future.cancelled()
            and self._future.exception() is None
        )

    def provide(self, backend: Backend) -> None:
        future = self._get_future()
        if future.done():
            raise RuntimeError("Backend already provided")
        future.set_result(backend)
        logger.info("Backend client ready")

    def fail(self, error: Exception) -> None:
        """Propagate an initialization failure to every waiter"""
        future = self._get_future()
        if future.done():
            raise RuntimeError("Backend already provided")
        future.set_exception(error)
        logger.error(f"Backend initialization failed: {error}")

    async def wait(self, timeout: Optional[float] = None) -> Backend:
        """Wait for the backend; raises ConfigUnavailable on timeout"""
        future = self._get_future()
        limit = self.timeout if timeout is None else timeout
        try:
            return await asyncio.wait_for(asyncio.shield(future), timeout=limit)
        except asyncio.TimeoutError:
            logger.error(f"Backend not available after {limit}s")
            raise ConfigUnavailable()
