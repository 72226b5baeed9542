"""
Job Store Client - PostgREST Reads over httpx

Thin async client for the external job store (a PostgREST endpoint such as
Supabase). Reads only. Every call is bounded by the upstream timeout and
returns a Degradable so callers never see an exception.

Query params follow PostgREST operators, e.g.:
    [("status", "eq.open"), ("estimated_price", "lte.500"), ("limit", "5")]
Repeated keys are allowed, which is why params are a list of pairs.
"""

import asyncio
import logging
from typing import Any, Optional

import httpx

from smsjobs.config import Settings, get_settings
from smsjobs.services.degradation import Degradable, DegradationReason, reason_for

logger = logging.getLogger(__name__)

Params = list[tuple[str, str]]


class StoreClient:
    """Read-only PostgREST client with swallow-and-degrade semantics."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 5.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
        }

    async def select(self, table: str, params: Params) -> Degradable[list[dict[str, Any]]]:
        """
        Fetch rows from `table` matching PostgREST `params`.

        Returns:
            Degradable wrapping the row list; an empty list with a reason
            when the store is missing, slow, or answers with an error.
        """
        if not self.configured:
            return Degradable.fallback([], DegradationReason.NOT_CONFIGURED)

        url = f"{self.base_url}/rest/v1/{table}"
        try:
            rows = await asyncio.wait_for(self._fetch(url, params), timeout=self.timeout)
            if not isinstance(rows, list):
                raise ValueError(f"expected a JSON array from {table}")
            return Degradable.ok(rows)
        except Exception as e:
            return Degradable.fallback([], reason_for(e), f"{table}: {e}")

    async def _fetch(self, url: str, params: Params) -> Any:
        response = await self._get_client().get(
            url,
            params=params,
            headers=self._headers(),
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


def build_store_client(
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> StoreClient:
    settings = settings or get_settings()
    return StoreClient(
        base_url=settings.job_store_url,
        api_key=settings.job_store_key,
        timeout=settings.upstream_timeout_seconds,
        http_client=http_client,
    )
