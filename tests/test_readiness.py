"""Tests for the backend readiness handshake."""

import asyncio

import pytest

from storefront.core.readiness import Backend, BackendHandle
from storefront.errors import ConfigUnavailable
from storefront.services.backend_client import InMemoryDataStore


class TestBackendHandle:
    @pytest.mark.asyncio
    async def test_wait_returns_provided_backend(self):
        handle = BackendHandle()
        backend = Backend(data_store=InMemoryDataStore())

        handle.provide(backend)

        assert handle.ready
        assert await handle.wait() is backend

    @pytest.mark.asyncio
    async def test_waiters_resume_when_provided_later(self):
        handle = BackendHandle(timeout=1.0)
        backend = Backend(data_store=InMemoryDataStore())

        waiters = [asyncio.create_task(handle.wait()) for _ in range(3)]
        await asyncio.sleep(0)
        handle.provide(backend)

        assert await asyncio.gather(*waiters) == [backend, backend, backend]

    @pytest.mark.asyncio
    async def test_timeout_raises_config_unavailable(self):
        handle = BackendHandle(timeout=0.01)

        with pytest.raises(ConfigUnavailable) as exc_info:
            await handle.wait()

        assert exc_info.value.message == "Config not available after waiting"
        assert not handle.ready

    @pytest.mark.asyncio
    async def test_timeout_does_not_cancel_handshake(self):
        handle = BackendHandle()
        backend = Backend(data_store=InMemoryDataStore())

        with pytest.raises(ConfigUnavailable):
            await handle.wait(timeout=0.01)
        handle.provide(backend)

        assert await handle.wait() is backend

    @pytest.mark.asyncio
    async def test_failure_reaches_waiters(self):
        handle = BackendHandle()

        handle.fail(ConfigUnavailable("Backend configuration invalid"))

        with pytest.raises(ConfigUnavailable, match="invalid"):
            await handle.wait()
        assert not handle.ready

    @pytest.mark.asyncio
    async def test_provide_only_once(self):
        handle = BackendHandle()
        handle.provide(Backend(data_store=InMemoryDataStore()))

        with pytest.raises(RuntimeError):
            handle.provide(Backend(data_store=InMemoryDataStore()))
