from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .common import CamelModel

SocialPlatform = Literal["instagram", "telegram", "vk", "pinterest", "behance", "youtube"]


class ContactSettings(CamelModel):
    hero_title: str
    phone_label: str
    phone_href: str
    email_label: str
    email_href: str
    location_label: str
    hero_image_url: Optional[str] = None
    footer_title: str
    city_label: str
    whatsapp_label: str
    whatsapp_url: str
    back_to_top_label: str


class SocialLink(CamelModel):
    id: str
    platform: SocialPlatform
    label: str
    url: str


class AppearanceSettings(CamelModel):
    home_hero_image_url: str
    transition_image_url: str


class FounderBiographyBlock(CamelModel):
    year: str
    lines: list[str]


class ImageBlock(CamelModel):
    image_url: Optional[str] = None


class GlobalBlocks(BaseModel):
    """Site-wide content slots keyed by their block slug."""

    model_config = ConfigDict(populate_by_name=True)

    home_hero: ImageBlock = Field(default_factory=ImageBlock, alias="home-hero")
    page_transition: ImageBlock = Field(default_factory=ImageBlock, alias="page-transition")


class ContactSettingsUpdate(CamelModel):
    contact: Optional[dict[str, Any]] = None
    socials: Optional[list[Any]] = None


class ContactSettingsResponse(CamelModel):
    contact: ContactSettings
    socials: list[SocialLink]


class SocialLinksUpdate(CamelModel):
    links: list[Any] = Field(default_factory=list)


class SocialLinksResponse(CamelModel):
    links: list[SocialLink]


class AppearanceUpdate(CamelModel):
    appearance: Optional[dict[str, Any]] = None


class AppearanceResponse(CamelModel):
    appearance: AppearanceSettings


class PublicationsUpdate(CamelModel):
    publications: Any = None


class PublicationsResponse(CamelModel):
    publications: list[str]


class FounderBiographyUpdate(CamelModel):
    biography: Any = None


class FounderBiographyResponse(CamelModel):
    biography: list[FounderBiographyBlock]


class GlobalBlocksUpdate(CamelModel):
    blocks: dict[str, Any] = Field(default_factory=dict)


class GlobalBlocksResponse(CamelModel):
    blocks: GlobalBlocks


class ContentItem(CamelModel):
    slug: str
    title: str
    image_url: Optional[str] = None


class ContentItemUpdate(CamelModel):
    image_url: Optional[str] = None


class ContentListResponse(CamelModel):
    items: list[ContentItem]


class ContentItemResponse(CamelModel):
    item: ContentItem
