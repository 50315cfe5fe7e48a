from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class LinkType(str, Enum):
    universal_link = "universal_link"
    web = "web"
    map = "map"
    video = "video"
    search = "search"
    store = "store"


class OutboundLink(BaseModel):
    type: LinkType
    url: str = Field(..., min_length=1)
    label: str | None = None


class ResolvedLinkMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    region: str
    locale: str
    category: str
    provider_display_name: str = Field(default="", alias="providerDisplayName")


class ResolvedLink(BaseModel):
    provider: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    primary: OutboundLink
    fallbacks: list[OutboundLink] = Field(default_factory=list)
    metadata: ResolvedLinkMetadata | None = None

    def urls(self) -> list[str]:
        return [self.primary.url, *(link.url for link in self.fallbacks)]
