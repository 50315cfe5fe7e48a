from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from ..candidates.models import Candidate, Category, Client, Locale, Region, UserPreference


class ResolutionSource(str, Enum):
    ai = "ai"
    fallback = "fallback"
    cache = "cache"


class ResolveRequest(BaseModel):
    category: Category
    locale: Locale = Locale.zh
    count: int = Field(default=5, ge=1, le=20)
    client: Client = Client.web
    is_mobile: bool = False
    region: Region | None = Field(default=None, description="Defaults to CN for zh and INTL for en")
    candidates: list[Any] = Field(default_factory=list, description="Raw upstream candidate records")
    user_history: list[Any] = Field(default_factory=list)
    exclude_titles: list[Any] = Field(default_factory=list)
    user_preference: UserPreference | None = None
    recent_interactions: list[str] = Field(
        default_factory=list, description="Recently clicked titles, order-insensitive"
    )
    skip_cache: bool = False

    @property
    def resolved_region(self) -> Region:
        if self.region is not None:
            return self.region
        return Region.CN if self.locale == Locale.zh else Region.INTL


class ResolveResponse(BaseModel):
    recommendations: list[Candidate]
    source: ResolutionSource
    preference_hash: str
    region: Region


class DecodeRequest(BaseModel):
    data: str = ""
    language: Locale = Locale.en


class TrackReturnRequest(BaseModel):
    time_away_seconds: float = Field(..., ge=0)
    has_existing_feedback: bool = False


class TrackReturnResponse(BaseModel):
    should_show_feedback: bool
