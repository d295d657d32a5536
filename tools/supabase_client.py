"""Async client for the hosted Supabase backend.

Talks to the three HTTP surfaces the pipeline needs: PostgREST for table rows,
object storage for uploaded complaints and exported documents, and edge
functions for vector search. Every failure surfaces as ``StorageError``.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from core.config import Settings
from core.exceptions import StorageError

logger = logging.getLogger("discovery.supabase")


def _filter_params(filters: dict[str, Any]) -> dict[str, str]:
    return {column: f"eq.{value}" for column, value in filters.items()}


class SupabaseClient:
    """Thin wrapper over the Supabase REST, storage and functions APIs."""

    def __init__(
        self,
        url: str,
        key: str,
        bucket: str = "documents",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialise the client.

        Args:
            url: Project URL, e.g. ``https://abc.supabase.co``.
            key: Service key, sent both as ``apikey`` and bearer token.
            bucket: Default storage bucket.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (tests use ``MockTransport``).
        """
        self.url = url.rstrip("/")
        self.bucket = bucket
        self._http = httpx.AsyncClient(
            base_url=self.url,
            headers={"apikey": key, "Authorization": f"Bearer {key}"},
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> SupabaseClient:
        """Build a client from settings.

        Raises:
            StorageError: If the URL or key is not configured.
        """
        if not settings.storage_configured:
            raise StorageError(
                "configure", "SUPABASE_URL and SUPABASE_SERVICE_KEY must be set"
            )
        return cls(
            settings.supabase_url,
            settings.supabase_key,
            bucket=settings.storage_bucket,
            timeout=settings.http_timeout_seconds,
            transport=transport,
        )

    async def close(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> SupabaseClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Supabase {operation} request to {path} failed: {e}")
            raise StorageError(operation, str(e)) from e

        if response.status_code >= 400:
            logger.error(
                f"Supabase {operation} returned {response.status_code}: {response.text[:200]}"
            )
            raise StorageError(operation, response.text[:200] or response.reason_phrase, response.status_code)

        return response

    # -- table rows -------------------------------------------------------

    async def select(
        self,
        table: str,
        filters: dict[str, Any],
        columns: str = "*",
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        params = {"select": columns, **_filter_params(filters)}
        if order_by:
            params["order"] = f"{order_by}.{'desc' if descending else 'asc'}"
        if limit is not None:
            params["limit"] = str(limit)

        response = await self._request("GET", f"/rest/v1/{table}", f"select {table}", params=params)
        return response.json()

    async def select_one(
        self,
        table: str,
        filters: dict[str, Any],
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """Return the single matching row, or ``None``."""
        rows = await self.select(table, filters, columns=columns, limit=1)
        return rows[0] if rows else None

    async def select_latest(
        self,
        table: str,
        filters: dict[str, Any],
        order_by: str = "created_at",
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """Return the most recent matching row, or ``None``."""
        rows = await self.select(
            table, filters, columns=columns, order_by=order_by, descending=True, limit=1
        )
        return rows[0] if rows else None

    async def upsert(
        self,
        table: str,
        row: dict[str, Any],
        on_conflict: str = "case_id",
    ) -> dict[str, Any]:
        """Insert or overwrite the row sharing ``on_conflict`` with ``row``."""
        response = await self._request(
            "POST",
            f"/rest/v1/{table}",
            f"upsert {table}",
            params={"on_conflict": on_conflict},
            json=row,
            headers={"Prefer": "resolution=merge-duplicates,return=representation"},
        )
        rows = response.json() if response.content else []
        return rows[0] if rows else row

    async def update(
        self,
        table: str,
        values: dict[str, Any],
        filters: dict[str, Any],
    ) -> list[dict[str, Any]]:
        response = await self._request(
            "PATCH",
            f"/rest/v1/{table}",
            f"update {table}",
            params=_filter_params(filters),
            json=values,
            headers={"Prefer": "return=representation"},
        )
        return response.json() if response.content else []

    async def delete(self, table: str, filters: dict[str, Any]) -> None:
        await self._request(
            "DELETE",
            f"/rest/v1/{table}",
            f"delete {table}",
            params=_filter_params(filters),
        )

    # -- object storage ---------------------------------------------------

    def _object_path(self, path: str, bucket: str | None) -> str:
        return f"{bucket or self.bucket}/{quote(path.lstrip('/'))}"

    async def upload(
        self,
        path: str,
        data: bytes,
        content_type: str,
        bucket: str | None = None,
        upsert: bool = True,
    ) -> str:
        """Upload bytes to storage and return the object path."""
        await self._request(
            "POST",
            f"/storage/v1/object/{self._object_path(path, bucket)}",
            "upload",
            content=data,
            headers={"Content-Type": content_type, "x-upsert": "true" if upsert else "false"},
        )
        logger.info(f"Uploaded {len(data)} bytes to {bucket or self.bucket}/{path}")
        return path

    async def download(self, path: str, bucket: str | None = None) -> bytes:
        response = await self._request(
            "GET",
            f"/storage/v1/object/{self._object_path(path, bucket)}",
            "download",
        )
        return response.content

    def public_url(self, path: str, bucket: str | None = None) -> str:
        return f"{self.url}/storage/v1/object/public/{self._object_path(path, bucket)}"

    # -- edge functions ---------------------------------------------------

    async def invoke(self, function: str, body: dict[str, Any]) -> Any:
        """Invoke an edge function with a JSON body and return its JSON answer."""
        response = await self._request(
            "POST",
            f"/functions/v1/{function}",
            f"invoke {function}",
            json=body,
        )
        return response.json() if response.content else None
