"""Fetch a URL on behalf of the GUI, outside the webview's CORS/CSP rules."""

import logging
from typing import Optional
from urllib.parse import urlparse

import httpx

from aui_backend.config import get_fetch_timeout
from aui_backend.errors import EncodingError, FetchError, InvalidArgument
from aui_backend.http_utils import create_client
from aui_backend.settings import get_settings

logger = logging.getLogger(__name__)


def validate_url(url: str) -> str:
    """Only absolute http(s) URLs may be fetched."""
    parsed = urlparse((url or "").strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidArgument(f"Not an http(s) URL: {url!r}")
    return url.strip()


def fetch_url(url: str, client: Optional[httpx.Client] = None) -> str:
    """GET ``url`` and return the body as text.

    Redirects are followed and the whole request is bounded by the fetch
    timeout. An HTTP error status still returns its body; only transport
    failures are errors.

    Raises:
        InvalidArgument: ``url`` is not an http(s) URL.
        FetchError: The request failed or timed out.
        EncodingError: The body is not valid UTF-8.
    """
    url = validate_url(url)
    owns_client = client is None
    if client is None:
        client = create_client(
            timeout=get_fetch_timeout(),
            follow_redirects=get_settings().fetch.follow_redirects,
        )

    try:
        response = client.get(url)
    except httpx.HTTPError as e:
        logger.warning("Fetching %s failed: %s", url, e)
        raise FetchError(f"HTTP request failed: {e}") from e
    finally:
        if owns_client:
            client.close()

    if response.is_error:
        logger.info("Fetching %s returned HTTP %s", url, response.status_code)

    try:
        return response.content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise EncodingError(f"Invalid UTF-8 in response: {e}") from e
