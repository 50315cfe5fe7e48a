from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..outbound.models import ResolvedLink

logger = logging.getLogger(__name__)


class Category(str, Enum):
    entertainment = "entertainment"
    shopping = "shopping"
    food = "food"
    travel = "travel"
    fitness = "fitness"


class EntertainmentType(str, Enum):
    video = "video"
    game = "game"
    music = "music"
    review = "review"


class FitnessType(str, Enum):
    tutorial = "tutorial"
    equipment = "equipment"
    nearby_place = "nearby_place"
    theory_article = "theory_article"


class Locale(str, Enum):
    zh = "zh"
    en = "en"


class Client(str, Enum):
    app = "app"
    web = "web"


class Region(str, Enum):
    CN = "CN"
    INTL = "INTL"


class DedupeMode(str, Enum):
    strict = "strict"
    fill = "fill"


def _coerce_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _coerce_enum(enum_cls: type[Enum], value: Any) -> Any:
    """Unknown discriminator values become ``None`` instead of failing the item."""
    if value is None or isinstance(value, enum_cls):
        return value
    valid = {member.value for member in enum_cls}
    return value if value in valid else None


def _coerce_tags(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [t for t in value if isinstance(t, str) and t.strip()]


class Candidate(BaseModel):
    """One proposed recommendation, before or after resolution."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    description: str = ""
    reason: str = ""
    tags: list[str] = Field(default_factory=list)
    search_query: str = Field(default="", alias="searchQuery")
    category: Category | None = None
    entertainment_type: EntertainmentType | None = Field(default=None, alias="entertainmentType")
    fitness_type: FitnessType | None = Field(default=None, alias="fitnessType")
    platform: str = ""
    link: ResolvedLink | None = None
    link_type: str | None = Field(default=None, alias="linkType")

    @field_validator("title", "description", "reason", "search_query", "platform", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _coerce_text(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value: Any) -> list[str]:
        return _coerce_tags(value)

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, value: Any) -> Any:
        return _coerce_enum(Category, value)

    @field_validator("entertainment_type", mode="before")
    @classmethod
    def _entertainment_type(cls, value: Any) -> Any:
        return _coerce_enum(EntertainmentType, value)

    @field_validator("fitness_type", mode="before")
    @classmethod
    def _fitness_type(cls, value: Any) -> Any:
        return _coerce_enum(FitnessType, value)

    @property
    def kind(self) -> str:
        if self.entertainment_type is not None:
            return self.entertainment_type.value
        if self.fitness_type is not None:
            return self.fitness_type.value
        return ""


class HistoryMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    search_query: str | None = Field(default=None, alias="searchQuery")

    @field_validator("search_query", mode="before")
    @classmethod
    def _search_query(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None


class HistoryItem(BaseModel):
    title: str = ""
    metadata: HistoryMetadata | None = None

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, value: Any) -> str:
        return _coerce_text(value)

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata(cls, value: Any) -> Any:
        if isinstance(value, HistoryMetadata):
            return value
        return dict(value) if isinstance(value, Mapping) else None

    @property
    def search_query(self) -> str:
        if self.metadata is None or self.metadata.search_query is None:
            return ""
        return self.metadata.search_query


class UserPreference(BaseModel):
    category: Category | None = None
    preferences: dict[str, float] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, value: Any) -> Any:
        return _coerce_enum(Category, value)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value: Any) -> list[str]:
        return _coerce_tags(value)


def parse_candidates(raw: Iterable[Any]) -> list[Candidate]:
    """Validate raw candidate records, skipping any that cannot be read."""
    parsed: list[Candidate] = []
    for index, item in enumerate(raw):
        if isinstance(item, Candidate):
            parsed.append(item)
            continue
        if not isinstance(item, Mapping):
            logger.warning("Skipping candidate #%d: expected a mapping, got %s", index, type(item).__name__)
            continue
        try:
            parsed.append(Candidate.model_validate(dict(item)))
        except ValidationError as exc:
            logger.warning("Skipping candidate #%d: %s", index, exc.errors()[:1])
    return parsed


def parse_history(raw: Iterable[Any] | None) -> list[HistoryItem]:
    items: list[HistoryItem] = []
    for entry in raw or []:
        if isinstance(entry, HistoryItem):
            items.append(entry)
        elif isinstance(entry, Mapping):
            try:
                items.append(HistoryItem.model_validate(dict(entry)))
            except ValidationError:
                logger.warning("Skipping unreadable history entry")
    return items
