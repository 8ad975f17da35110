"""
HTTP utilities module for aui-backend.

This module provides functions for creating properly configured HTTP clients.
"""

import os
from dataclasses import dataclass
from typing import Dict, Optional, Union

import httpx


@dataclass
class ProxyConfig:
    """Configuration for proxy and SSL settings."""

    verify: Union[bool, str]
    trust_env: bool
    proxy_url: Optional[str]


def get_cert_bundle_path() -> Optional[str]:
    """Return SSL_CERT_FILE when it points at an existing file."""
    ssl_cert_file = os.environ.get("SSL_CERT_FILE")
    if ssl_cert_file and os.path.exists(ssl_cert_file):
        return ssl_cert_file
    return None


def _resolve_proxy_config(verify: Union[bool, str, None] = None) -> ProxyConfig:
    """Resolve proxy and SSL settings from the environment."""
    if verify is None:
        verify = get_cert_bundle_path() or True

    proxy_url = (
        os.environ.get("HTTPS_PROXY")
        or os.environ.get("https_proxy")
        or os.environ.get("HTTP_PROXY")
        or os.environ.get("http_proxy")
    )

    return ProxyConfig(
        verify=verify,
        trust_env=bool(proxy_url),
        proxy_url=proxy_url or None,
    )


def create_client(
    timeout: float = 15.0,
    verify: Union[bool, str, None] = None,
    headers: Optional[Dict[str, str]] = None,
    follow_redirects: bool = True,
) -> httpx.Client:
    """Create a synchronous httpx client honoring proxy and cert settings."""
    config = _resolve_proxy_config(verify)
    return httpx.Client(
        verify=config.verify,
        headers=headers or {},
        timeout=timeout,
        follow_redirects=follow_redirects,
        trust_env=config.trust_env,
        proxy=config.proxy_url,
    )
