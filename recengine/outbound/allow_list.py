from __future__ import annotations

import logging
from urllib.parse import urlsplit

from .catalog import PROVIDERS

logger = logging.getLogger(__name__)

MAX_OUTBOUND_URL_LENGTH = 2048

_APP_STORE_DOMAINS = ("apps.apple.com", "play.google.com", "sj.qq.com")

ALLOWED_OUTBOUND_DOMAINS: frozenset[str] = frozenset(
    {domain.lower() for provider in PROVIDERS.values() for domain in provider.domains}
    | set(_APP_STORE_DOMAINS)
)


def _host_allowed(host: str) -> bool:
    host = host.rstrip(".").lower()
    if not host:
        return False
    if host in ALLOWED_OUTBOUND_DOMAINS:
        return True
    return any(host.endswith(f".{domain}") for domain in ALLOWED_OUTBOUND_DOMAINS)


def is_allowed_outbound_url(url: object) -> bool:
    """Whether *url* may be handed to the client.

    Fails closed: non-strings, non-http(s) schemes, credentials in the
    authority, over-long URLs and hosts outside the allow-list are all
    rejected.
    """
    if not isinstance(url, str) or not url or len(url) > MAX_OUTBOUND_URL_LENGTH:
        return False
    try:
        parts = urlsplit(url.strip())
        host = parts.hostname
        parts.port  # raises ValueError on a malformed port
    except ValueError:
        return False
    if parts.scheme.lower() not in ("http", "https"):
        return False
    if parts.username is not None or parts.password is not None:
        return False
    return host is not None and _host_allowed(host)
