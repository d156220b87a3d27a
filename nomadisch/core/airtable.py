"""
Thin async client for the Airtable REST API.

Endpoints used:
    GET    {api_url}/{base_id}/{table}?pageSize=100&sort[0][field]=...&offset=...
    POST   {api_url}/{base_id}/{table}          body: {"fields": {...}, "typecast": true}
    PATCH  {api_url}/{base_id}/{table}/{id}     body: {"fields": {...}, "typecast": true}
    DELETE {api_url}/{base_id}/{table}/{id}

Design Notes:
    - Configuration is passed in, not read from the environment per call
    - Missing token/base id raises ConfigurationError before a request is built
    - Pagination is sequential: each page's offset comes from the previous response
    - Non-2xx responses raise StoreRequestError with the raw body; no retries
    - The cache window is forwarded as a Cache-Control request header and
      otherwise left to whatever caching layer sits in front of Airtable

Usage:
    store = AirtableClient(get_airtable_config(), await HttpxRestClientPool.get_client())
    records = await store.list_records("Events", sort=[("dateStart", "desc")])
"""

import json
from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from nomadisch.core.exceptions import ConfigurationError, ServiceUnavailableError, StoreRequestError
from nomadisch.main_config import AirtableConfig

__all__ = ["MAX_PAGES", "PAGE_SIZE", "AirtableClient", "Record"]

logger = structlog.get_logger(__name__)

Record = dict[str, Any]

PAGE_SIZE = 100
# Guards against a backend that keeps handing out offsets
MAX_PAGES = 10


def cache_control(cache_seconds: int | None) -> dict[str, str]:
    if cache_seconds is None:
        return {}
    if cache_seconds <= 0:
        return {"Cache-Control": "no-cache"}
    return {"Cache-Control": f"max-age={cache_seconds}"}


class AirtableClient:
    """Record-level operations against one Airtable base."""

    def __init__(self, config: AirtableConfig, client: httpx.AsyncClient) -> None:
        self.config = config
        self.client = client

    def _credentials(self) -> tuple[str, str]:
        token = self.config.token.get_secret_value() if self.config.token else ""
        if not token:
            raise ConfigurationError("AIRTABLE_TOKEN")
        if not self.config.base_id:
            raise ConfigurationError("AIRTABLE_BASE_ID")
        return token, self.config.base_id

    def table_url(self, table: str, record_id: str | None = None) -> str:
        _, base_id = self._credentials()
        url = f"{self.config.api_url.rstrip('/')}/{base_id}/{quote(table, safe='')}"
        if record_id is not None:
            url = f"{url}/{quote(record_id, safe='')}"
        return url

    def _headers(self) -> dict[str, str]:
        token, _ = self._credentials()
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        headers = {**self._headers(), **kwargs.pop("headers", {})}
        try:
            response = await self.client.request(method, url, headers=headers, **kwargs)
        except httpx.TransportError as exc:
            logger.error("airtable_unreachable", method=method, error=type(exc).__name__)
            raise ServiceUnavailableError(
                "Airtable is unreachable", detail={"error": type(exc).__name__}
            ) from exc

        text = response.text
        if not response.is_success:
            logger.warning("airtable_request_failed", method=method, status=response.status_code)
            raise StoreRequestError(response.status_code, text)

        try:
            return json.loads(text) if text else None
        except json.JSONDecodeError:
            return None

    async def list_records(
        self,
        table: str,
        *,
        sort: Sequence[tuple[str, str]] = (),
        page_size: int = PAGE_SIZE,
        max_pages: int = MAX_PAGES,
        max_records: int | None = None,
        cache_seconds: int | None = None,
    ) -> list[Record]:
        """Fetch records page by page, in server order.

        Args:
            table: Table name
            sort: (field, direction) pairs sent as sort[i][field]/sort[i][direction]
            page_size: Records per page (Airtable caps this at 100)
            max_pages: Hard stop on the number of pages requested
            max_records: Optional server-side cap
            cache_seconds: Cache window hint, forwarded as Cache-Control

        Returns:
            Raw ``{"id", "fields", ...}`` records
        """
        url = self.table_url(table)
        base_params: dict[str, str] = {"pageSize": str(page_size)}
        for index, (field, direction) in enumerate(sort):
            base_params[f"sort[{index}][field]"] = field
            base_params[f"sort[{index}][direction]"] = direction
        if max_records is not None:
            base_params["maxRecords"] = str(max_records)

        records: list[Record] = []
        offset: str | None = None
        pages = 0
        for _ in range(max_pages):
            params = dict(base_params)
            if offset:
                params["offset"] = offset

            data = await self._request("GET", url, params=params, headers=cache_control(cache_seconds))
            pages += 1

            page = data.get("records") if isinstance(data, dict) else None
            if isinstance(page, list):
                records.extend(page)

            offset = data.get("offset") if isinstance(data, dict) else None
            if not offset:
                break
        else:
            if offset:
                logger.warning("airtable_page_limit_reached", table=table, max_pages=max_pages)

        logger.debug("airtable_records_listed", table=table, pages=pages, count=len(records))
        return records

    async def create_record(self, table: str, fields: dict[str, Any]) -> Record:
        data = await self._request(
            "POST", self.table_url(table), json={"fields": fields, "typecast": True}
        )
        return data if isinstance(data, dict) else {}

    async def update_record(self, table: str, record_id: str, fields: dict[str, Any]) -> Record:
        data = await self._request(
            "PATCH", self.table_url(table, record_id), json={"fields": fields, "typecast": True}
        )
        return data if isinstance(data, dict) else {}

    async def delete_record(self, table: str, record_id: str) -> Record:
        data = await self._request("DELETE", self.table_url(table, record_id))
        return data if isinstance(data, dict) else {}
