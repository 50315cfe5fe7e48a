from __future__ import annotations

import base64
import binascii
import json
import logging
from urllib.parse import quote

from pydantic import ValidationError

from .allow_list import is_allowed_outbound_url
from .models import OutboundLink, ResolvedLink

logger = logging.getLogger(__name__)

OUTBOUND_PATH = "/outbound"

_ERRORS: dict[str, dict[str, str]] = {
    "missing": {"zh": "缺少跳转参数", "en": "Missing redirect parameters"},
    "invalid": {"zh": "跳转参数无效", "en": "Invalid redirect parameters"},
    "not_allowed": {"zh": "目标链接不被允许", "en": "Target link not allowed"},
}


def _error(kind: str, language: str) -> str:
    messages = _ERRORS[kind]
    return messages["zh"] if language == "zh" else messages["en"]


def encode_candidate_link(link: ResolvedLink) -> str:
    """URL-safe base64 of the link's JSON, without padding."""
    payload = json.dumps(link.model_dump(mode="json", by_alias=True), ensure_ascii=False)
    encoded = base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")
    return encoded.rstrip("=")


def build_outbound_href(link: ResolvedLink) -> str:
    return f"{OUTBOUND_PATH}?data={quote(encode_candidate_link(link), safe='')}"


def _b64url_decode(raw: str) -> str:
    padded = raw + "=" * (-len(raw) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")


def _readable_fallbacks(raw: object) -> list[OutboundLink]:
    if not isinstance(raw, list):
        return []
    readable: list[OutboundLink] = []
    for item in raw:
        try:
            readable.append(OutboundLink.model_validate(item))
        except ValidationError:
            continue
    return readable


def decode_candidate_link(raw: str | None, language: str = "en") -> tuple[ResolvedLink | None, str | None]:
    """Decode an ``/outbound?data=`` payload back into a link.

    Returns ``(link, None)`` on success or ``(None, error)`` with a message
    in *language*. Disallowed fallbacks are dropped; a disallowed primary
    rejects the whole payload.
    """
    if not raw:
        return None, _error("missing", language)

    try:
        data = json.loads(_b64url_decode(raw.strip()))
    except (ValueError, binascii.Error, UnicodeError):
        return None, _error("invalid", language)
    if not isinstance(data, dict):
        return None, _error("invalid", language)

    data["fallbacks"] = _readable_fallbacks(data.get("fallbacks"))
    try:
        link = ResolvedLink.model_validate(data)
    except ValidationError:
        return None, _error("invalid", language)

    if not is_allowed_outbound_url(link.primary.url):
        logger.warning("Rejected outbound payload for %s: primary URL not allowed", link.provider)
        return None, _error("not_allowed", language)

    allowed: list[OutboundLink] = [f for f in link.fallbacks if is_allowed_outbound_url(f.url)]
    return link.model_copy(update={"fallbacks": allowed}), None
