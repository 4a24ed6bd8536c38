"""
Data store collaborator

Narrow async interface to the hosted backend's relational storage:
select/insert/upsert on "profiles", "addresses", "orders" and
"order_items", plus insert notifications consumed by the order history.
"""

import inspect
import logging
import uuid
from abc import ABC, abstractmethod
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional, Union

import httpx

from ..errors import DataStoreError

logger = logging.getLogger(__name__)

InsertCallback = Callable[[dict], Union[None, Awaitable[None]]]


class DataStore(ABC):
    """Base class for data store clients"""

    def __init__(self):
        self._subscribers: dict[str, list[InsertCallback]] = defaultdict(list)

    @abstractmethod
    async def select(
        self,
        table: str,
        filters: Optional[dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = True,
    ) -> list[dict]:
        ...

    @abstractmethod
    async def insert(self, table: str, rows: list[dict], notify: bool = True) -> list[dict]:
        """Insert rows; with notify=False the caller delivers notifications itself"""
        ...

    @abstractmethod
    async def upsert(self, table: str, row: dict, on_conflict: str = "id") -> list[dict]:
        ...

    async def close(self) -> None:
        pass

    def subscribe_inserts(self, table: str, callback: InsertCallback) -> Callable[[], None]:
        """Register for insert notifications; returns an unsubscribe function"""
        self._subscribers[table].append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers[table]:
                self._subscribers[table].remove(callback)

        return unsubscribe

    async def notify_inserts(self, table: str, rows: list[dict]) -> None:
        """Deliver inserted rows to subscribers; listener failures are logged"""
        for row in rows:
            for callback in list(self._subscribers.get(table, [])):
                try:
                    result = callback(row)
                    if inspect.isawaitable(result):
                        await result
                except Exception:
                    logger.exception(f"Insert listener for {table} failed")


class InMemoryDataStore(DataStore):
    """Tables held in process memory"""

    def __init__(self):
        super().__init__()
        self.tables: dict[str, list[dict]] = defaultdict(list)
        self._failures: dict[str, str] = {}

    def fail_table(self, table: str, message: str = "Service unavailable") -> None:
        """Make every operation on a table fail"""
        self._failures[table] = message

    def restore_table(self, table: str) -> None:
        self._failures.pop(table, None)

    def _check(self, table: str) -> None:
        if table in self._failures:
            raise DataStoreError(self._failures[table])

    async def select(
        self,
        table: str,
        filters: Optional[dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = True,
    ) -> list[dict]:
        self._check(table)
        rows = [
            dict(row) for row in self.tables[table]
            if all(row.get(key) == value for key, value in (filters or {}).items())
        ]
        if order_by:
            rows.sort(key=lambda r: (r.get(order_by) is not None, r.get(order_by) or ""), reverse=descending)
        return rows

    async def insert(self, table: str, rows: list[dict], notify: bool = True) -> list[dict]:
        self._check(table)
        saved = []
        for row in rows:
            record = {"id": str(uuid.uuid4()), **row}
            record.setdefault("created_at", datetime.now(timezone.utc).isoformat())
            self.tables[table].append(record)
            saved.append(dict(record))
        if notify:
            await self.notify_inserts(table, saved)
        return saved

    async def upsert(self, table: str, row: dict, on_conflict: str = "id") -> list[dict]:
        self._check(table)
        key = row.get(on_conflict)
        for existing in self.tables[table]:
            if key is not None and existing.get(on_conflict) == key:
                existing.update(row)
                return [dict(existing)]
        return await self.insert(table, [row])


class RestDataStore(DataStore):
    """
    Data store client for a PostgREST endpoint.

    Filters are equality only (``column=eq.value``). Inserts made through
    this client are delivered to local insert subscribers.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        access_token: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize data store client.

        Args:
            base_url: Backend project URL
            api_key: Public (anon) API key
            access_token: Signed-in user's token, used for row-level security
            http_client: Preconfigured client (tests inject a mock transport)
        """
        super().__init__()
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.access_token = access_token
        self._http_client = http_client or httpx.AsyncClient(timeout=30.0)

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    def set_access_token(self, access_token: Optional[str]) -> None:
        self.access_token = access_token

    def _headers(self, prefer: Optional[str] = None) -> dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token or self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _request(
        self,
        method: str,
        table: str,
        params: Optional[dict[str, str]] = None,
        body: Optional[Any] = None,
        prefer: Optional[str] = None,
    ) -> list[dict]:
        url = f"{self.base_url}/rest/v1/{table}"
        try:
            response = await self._http_client.request(
                method=method,
                url=url,
                params=params,
                json=body,
                headers=self._headers(prefer),
            )
        except httpx.HTTPError as e:
            logger.error(f"Data store request failed: {method} {table} - {e}")
            raise DataStoreError(f"Network error: {e}") from e

        if response.status_code >= 400:
            logger.error(f"Data store request failed: {response.status_code} - {response.text}")
            try:
                payload = response.json()
            except ValueError:
                payload = {}
            raise DataStoreError(
                payload.get("message") or f"Request failed with status {response.status_code}",
                code=payload.get("code"),
            )

        if not response.content:
            return []
        data = response.json()
        return data if isinstance(data, list) else [data]

    async def select(
        self,
        table: str,
        filters: Optional[dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = True,
    ) -> list[dict]:
        params = {"select": "*"}
        for column, value in (filters or {}).items():
            params[column] = f"eq.{value}"
        if order_by:
            params["order"] = f"{order_by}.{'desc' if descending else 'asc'}"
        return await self._request("GET", table, params=params)

    async def insert(self, table: str, rows: list[dict], notify: bool = True) -> list[dict]:
        saved = await self._request("POST", table, body=rows, prefer="return=representation")
        if notify:
            await self.notify_inserts(table, saved)
        return saved

    async def upsert(self, table: str, row: dict, on_conflict: str = "id") -> list[dict]:
        return await self._request(
            "POST",
            table,
            params={"on_conflict": on_conflict},
            body=row,
            prefer="resolution=merge-duplicates,return=representation",
        )
