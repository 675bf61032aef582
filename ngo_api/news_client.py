"""HTTP client for the external news generator."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from .config import DEFAULT_MAX_RESPONSE_BYTES
from .errors import IngestionFailure
from .models import NEWS_FIELDS

logger = logging.getLogger(__name__)

RawNewsEntry = Dict[str, Optional[str]]
GroupedNews = Dict[str, List[RawNewsEntry]]


class NewsFeedClient:
    """Async wrapper around the generator's one-shot `selectNews` endpoint.

    The generator returns the whole day's batch in a single response, so the
    body is streamed into memory up to `max_response_bytes` instead of being
    paginated. `timeout` bounds the whole fetch, not just each socket read.
    Any transport error, timeout, oversized or malformed body is surfaced as
    one `IngestionFailure`; no partial result is returned. An empty body or
    JSON `null` means nothing was generated and yields `{}`.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 60.0,
        max_response_bytes: int = DEFAULT_MAX_RESPONSE_BYTES,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._max_response_bytes = max_response_bytes
        self._client = httpx.AsyncClient(
            headers={"Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def fetch_generated_news(self) -> GroupedNews:
        try:
            body = await asyncio.wait_for(self._read_body(), self._timeout)
        except asyncio.TimeoutError as exc:
            logger.error("news fetch failed: timed out after %.1fs", self._timeout)
            raise IngestionFailure() from exc
        except httpx.HTTPError as exc:
            logger.error("news fetch failed: %s %s", type(exc).__name__, exc)
            raise IngestionFailure() from exc

        if not body.strip():
            return {}
        try:
            payload = json.loads(body)
        except ValueError as exc:
            logger.error("news fetch failed: response is not valid JSON")
            raise IngestionFailure() from exc
        return parse_grouped_news(payload)

    async def _read_body(self) -> bytes:
        chunks: List[bytes] = []
        received = 0
        async with self._client.stream("GET", self._url) as response:
            response.raise_for_status()
            async for chunk in response.aiter_bytes():
                received += len(chunk)
                if received > self._max_response_bytes:
                    logger.error(
                        "news fetch failed: response exceeded %d bytes",
                        self._max_response_bytes,
                    )
                    raise IngestionFailure()
                chunks.append(chunk)
        return b"".join(chunks)


def parse_grouped_news(payload: Any) -> GroupedNews:
    """Validate the generator payload: `{level: [{title, media, ...}, ...]}`."""

    if payload is None:
        return {}
    if not isinstance(payload, dict):
        logger.error("news fetch failed: expected an object, got %s", type(payload).__name__)
        raise IngestionFailure()

    grouped: GroupedNews = {}
    for level, entries in payload.items():
        if not isinstance(entries, list):
            logger.error("news fetch failed: level %r is not a list", level)
            raise IngestionFailure()
        parsed: List[RawNewsEntry] = []
        for entry in entries:
            if not isinstance(entry, dict):
                logger.error("news fetch failed: level %r holds a non-object entry", level)
                raise IngestionFailure()
            fields: RawNewsEntry = {}
            for field in NEWS_FIELDS:
                value = entry.get(field)
                if value is not None and not isinstance(value, str):
                    logger.error("news fetch failed: field %r under %r is not text", field, level)
                    raise IngestionFailure()
                fields[field] = value
            parsed.append(fields)
        grouped[level] = parsed
    return grouped


__all__ = ["NewsFeedClient", "parse_grouped_news", "GroupedNews", "RawNewsEntry"]
