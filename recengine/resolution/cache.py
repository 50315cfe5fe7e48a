from __future__ import annotations

import time
from collections.abc import Iterable
from dataclasses import dataclass

from ..candidates.models import Candidate, Category, Client, Locale, Region
from ..config import DEFAULT_RESOLUTION_CONFIG
from .models import ResolveRequest


@dataclass(frozen=True)
class CacheScope:
    """Everything besides preference state that changes a rendered batch."""

    category: Category
    locale: Locale
    region: Region
    client: Client
    is_mobile: bool
    count: int

    @classmethod
    def from_request(cls, request: ResolveRequest) -> CacheScope:
        return cls(
            category=request.category,
            locale=request.locale,
            region=request.resolved_region,
            client=request.client,
            is_mobile=request.is_mobile,
            count=request.count,
        )

    @property
    def label(self) -> str:
        device = "mobile" if self.is_mobile else "desktop"
        return ":".join(
            [self.category.value, self.locale.value, self.region.value, self.client.value, device, str(self.count)]
        )


@dataclass(frozen=True)
class _CachedBatch:
    candidates: tuple[Candidate, ...]
    created_at: float


_batches: dict[tuple[CacheScope, str], _CachedBatch] = {}
_hits: int = 0
_misses: int = 0


def cache_get(scope: CacheScope, preference_hash: str, ttl: float | None = None) -> list[Candidate] | None:
    """Resolved batch for this scope and preference state, or ``None`` when absent or stale."""
    global _hits, _misses
    ttl = DEFAULT_RESOLUTION_CONFIG.cache_ttl_seconds if ttl is None else ttl
    key = (scope, preference_hash)
    batch = _batches.get(key)
    if batch is not None and time.time() - batch.created_at < ttl:
        _hits += 1
        return list(batch.candidates)
    if batch is not None:
        del _batches[key]
    _misses += 1
    return None


def cache_set(scope: CacheScope, preference_hash: str, candidates: Iterable[Candidate]) -> None:
    _batches[(scope, preference_hash)] = _CachedBatch(candidates=tuple(candidates), created_at=time.time())


def get_cache_stats() -> dict:
    total = _hits + _misses
    return {
        "size": len(_batches),
        "scopes": len({scope for scope, _ in _batches}),
        "hits": _hits,
        "misses": _misses,
        "hit_rate": round(_hits / total * 100, 1) if total > 0 else 0.0,
    }


def clear_cache() -> None:
    global _hits, _misses
    _batches.clear()
    _hits = 0
    _misses = 0
