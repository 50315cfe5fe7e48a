from __future__ import annotations

import logging

from .allow_list import is_allowed_outbound_url
from .catalog import (
    APP_STORE_TEMPLATES,
    GENERIC_SEARCH_HOMEPAGES,
    GENERIC_SEARCH_PROVIDER,
    MAP_PROVIDERS,
    PROVIDERS,
    VIDEO_PROVIDERS,
    ProviderDefinition,
    encode_query,
    fallback_providers,
    find_provider,
)
from .models import LinkType, OutboundLink, ResolvedLink, ResolvedLinkMetadata

logger = logging.getLogger(__name__)


def _enum_value(value: object) -> str:
    return str(getattr(value, "value", value))


def _generic_provider(region: str) -> ProviderDefinition:
    return PROVIDERS[GENERIC_SEARCH_PROVIDER.get(region, "Google")]


def normalize_provider_id(provider: str | None, region: str) -> str:
    found = find_provider(provider)
    if found is None:
        return _generic_provider(region).id
    return found.id


def _primary_link(provider: ProviderDefinition, query: str) -> OutboundLink:
    universal = provider.universal_link(query)
    if universal is not None:
        return OutboundLink(type=LinkType.universal_link, url=universal)
    return OutboundLink(type=LinkType.web, url=provider.web_link(query))


def _store_links(display_name: str, region: str) -> list[OutboundLink]:
    encoded = encode_query(display_name)
    return [
        OutboundLink(type=LinkType.store, label=label, url=template.replace("{q}", encoded))
        for label, template in APP_STORE_TEMPLATES.get(region, APP_STORE_TEMPLATES["INTL"])
    ]


def _fallback_type(provider_id: str) -> LinkType:
    if provider_id in MAP_PROVIDERS:
        return LinkType.map
    if provider_id in VIDEO_PROVIDERS:
        return LinkType.video
    return LinkType.search


def _truncated_search_url(provider: ProviderDefinition, query: str) -> str:
    """Search URL for the longest prefix of *query* that passes the allow-list.

    Falls back to the provider's homepage when no prefix fits.
    """
    best: str | None = None
    lo, hi = 1, len(query) - 1
    while lo <= hi:
        mid = (lo + hi) // 2
        url = _primary_link(provider, query[:mid]).url
        if is_allowed_outbound_url(url):
            best, lo = url, mid + 1
        else:
            hi = mid - 1
    if best is None:
        return GENERIC_SEARCH_HOMEPAGES[provider.id]
    logger.warning("Truncated %d-char search query to fit the outbound URL limit", len(query))
    return best


def _generic_search_link(region: str, query: str) -> OutboundLink:
    generic = _generic_provider(region)
    url = _primary_link(generic, query).url
    if not is_allowed_outbound_url(url):
        url = _truncated_search_url(generic, query)
    return OutboundLink(type=LinkType.search, url=url, label=generic.id)


def _unique_allowed(links: list[OutboundLink], primary_url: str) -> list[OutboundLink]:
    seen = {primary_url}
    result: list[OutboundLink] = []
    for link in links:
        if link.url in seen:
            continue
        if not is_allowed_outbound_url(link.url):
            logger.warning("Dropping disallowed fallback URL: %s", link.url[:200])
            continue
        seen.add(link.url)
        result.append(link)
    return result


def resolve_candidate_link(
    title: str,
    query: str,
    category: str,
    locale: str,
    region: str,
    provider: str | None = None,
) -> ResolvedLink:
    """Primary outbound link for a candidate plus ordered fallbacks.

    Fallback order:
        1. the provider's web page, when the primary is not already web
        2. app store search pages, for providers that ship an app
        3. the category's fallback providers, typed map/video/search
        4. the region's generic search page

    Every URL returned passes ``is_allowed_outbound_url``. A primary that
    fails the check is replaced by the generic search link. That link
    shortens an over-long query to fit, or drops to the search homepage,
    so a result always carries a usable primary.
    """
    category, locale, region = _enum_value(category), _enum_value(locale), _enum_value(region)
    search_text = (query or "").strip() or (title or "").strip()
    provider_id = normalize_provider_id(provider, region)
    definition = PROVIDERS[provider_id]

    primary = _primary_link(definition, search_text)
    candidates: list[OutboundLink] = []
    if primary.type != LinkType.web:
        candidates.append(OutboundLink(type=LinkType.web, url=definition.web_link(search_text), label="Web"))
    if definition.has_app:
        candidates.extend(_store_links(definition.display_name(locale), region))
    for fallback_id in fallback_providers(category, region):
        if fallback_id == provider_id or fallback_id not in PROVIDERS:
            continue
        fallback = _primary_link(PROVIDERS[fallback_id], search_text)
        candidates.append(OutboundLink(type=_fallback_type(fallback_id), url=fallback.url, label=fallback_id))

    generic = _generic_search_link(region, search_text)
    candidates.append(generic)

    if not is_allowed_outbound_url(primary.url):
        logger.warning("Primary URL for provider %s is not allowed; using generic search", provider_id)
        primary = OutboundLink(type=LinkType.search, url=generic.url)
    if not is_allowed_outbound_url(primary.url):
        primary = OutboundLink(type=LinkType.search, url=GENERIC_SEARCH_HOMEPAGES[_generic_provider(region).id])

    return ResolvedLink(
        provider=provider_id,
        title=(title or "").strip() or search_text or provider_id,
        primary=primary,
        fallbacks=_unique_allowed(candidates, primary.url),
        metadata=ResolvedLinkMetadata(
            region=region,
            locale=locale,
            category=category,
            provider_display_name=definition.display_name(locale),
        ),
    )
