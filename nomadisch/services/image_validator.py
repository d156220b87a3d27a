"""Reachability and content-type precheck for cover image URLs.

Airtable accepts an attachment URL with a 2xx even when it cannot fetch the
file itself, leaving the record without a cover and no error. Probing the URL
first turns that silent failure into an explicit one.

The check trusts the declared Content-Type; a server that mislabels its
content passes. Bytes are never decoded.
"""

from urllib.parse import urlsplit

import httpx
import structlog

from nomadisch.core.exceptions import NotAnImageError, UnreachableError, ValidationError

logger = structlog.get_logger(__name__)

USER_AGENT = "NomadischLabs-AirtableAttach/1.0"
SNIPPET_LENGTH = 200

# Some CDNs refuse HEAD outright
_HEAD_REJECTED = frozenset({403, 405})


async def _probe(client: httpx.AsyncClient, method: str, url: str) -> httpx.Response:
    request = client.build_request(method, url, headers={"User-Agent": USER_AGENT})
    return await client.send(request, stream=True, follow_redirects=True)


async def _read_snippet(response: httpx.Response) -> str:
    try:
        async for chunk in response.aiter_text():
            if chunk:
                return chunk[:SNIPPET_LENGTH]
    except httpx.HTTPError as exc:
        logger.debug("cover_snippet_unreadable", error=type(exc).__name__)
    return ""


async def validate_remote_image(client: httpx.AsyncClient, url: str | None) -> None:
    """Raise unless ``url`` is an http(s) URL that answers 2xx with an image/* type.

    Empty input is a no-op: clearing a cover never needs a probe.

    Raises:
        ValidationError: not an absolute http/https URL
        UnreachableError: final response is not 2xx, or the fallback GET fails
        NotAnImageError: Content-Type does not start with image/
    """
    candidate = (url or "").strip()
    if not candidate:
        return

    parts = urlsplit(candidate)
    if parts.scheme.lower() not in ("http", "https") or not parts.netloc:
        raise ValidationError(candidate)

    response: httpx.Response | None = None
    try:
        try:
            response = await _probe(client, "HEAD", candidate)
        except httpx.TransportError as exc:
            logger.debug("cover_head_failed", url=candidate, error=str(exc))
        else:
            if response.status_code in _HEAD_REJECTED:
                await response.aclose()
                response = None

        if response is None:
            try:
                response = await _probe(client, "GET", candidate)
            except httpx.TransportError as exc:
                raise UnreachableError(candidate, reason=type(exc).__name__) from exc

        if not response.is_success:
            raise UnreachableError(candidate, response.status_code, response.reason_phrase)

        content_type = response.headers.get("content-type", "")
        if not content_type.lower().startswith("image/"):
            snippet = await _read_snippet(response)
            raise NotAnImageError(candidate, content_type, snippet)
    finally:
        if response is not None:
            await response.aclose()

    logger.debug("cover_url_validated", url=candidate, content_type=content_type)
