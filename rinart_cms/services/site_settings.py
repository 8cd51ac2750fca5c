"""
Site-wide settings stored in the SiteSetting key/value table.

Each value is normalised on the way in and on the way out: blank strings fall
back to the built-in defaults, invalid list entries are dropped, and an empty
list is replaced by the default list. Only the contact block is cached; the
other settings are read fresh so admin edits show up immediately.
"""

from __future__ import annotations

from typing import Any

import structlog

from ..domain.settings import (
    AppearanceSettings,
    ContactSettings,
    FounderBiographyBlock,
    SocialLink,
)
from ..repositories.site_settings import SiteSettingsRepository
from .cache import MISSING, TTLCache

logger = structlog.get_logger(__name__)

CONTACT_KEY = "contact"
SOCIAL_LINKS_KEY = "socialLinks"
APPEARANCE_KEY = "appearance"
PUBLICATIONS_KEY = "publications"
FOUNDER_BIOGRAPHY_KEY = "founderBiography"

SOCIAL_PLATFORMS = ("instagram", "telegram", "vk", "pinterest", "behance", "youtube")

DEFAULT_CONTACT: dict[str, Any] = {
    "heroTitle": "Контактная информация",
    "phoneLabel": "+7 903 147-44-30",
    "phoneHref": "tel:+79031474430",
    "emailLabel": "rinartburo@mail.ru",
    "emailHref": "mailto:rinartburo@mail.ru",
    "locationLabel": "Москва, Российская Федерация",
    "heroImageUrl": "/img/group-1005.webp",
    "footerTitle": "Обсудим ваш проект:",
    "cityLabel": "г. Москва",
    "whatsappLabel": "Написать в WhatsApp",
    "whatsappUrl": "https://wa.me/79031474430",
    "backToTopLabel": "В начало",
}

DEFAULT_SOCIAL_LINKS: list[dict[str, str]] = [
    {
        "id": "instagram",
        "platform": "instagram",
        "label": "INST: rinart.buro",
        "url": "https://www.instagram.com/rinart.buro/",
    },
    {"id": "telegram", "platform": "telegram", "label": "TG: rinart_buro", "url": "https://t.me/rinart_buro"},
    {"id": "vk", "platform": "vk", "label": "VK: rinart_buro", "url": "https://vk.com/rinart_buro"},
    {
        "id": "pinterest",
        "platform": "pinterest",
        "label": "Pinterest: rinartburo",
        "url": "https://www.pinterest.com/rinartburo",
    },
]

DEFAULT_APPEARANCE: dict[str, str] = {
    "homeHeroImageUrl": "/img/01-ilichevka.jpg",
    "transitionImageUrl": (
        "https://cdn.prod.website-files.com/66bb7b4fa99c404bd3587d90/"
        "66bb7c2f116c8e6c95b73391_Logo_Preloader.png"
    ),
}

DEFAULT_PUBLICATIONS: list[str] = [
    "Финалист конкурса на лучший «Проект шоу-рума НЛК Домостроение на территории Центра дизайна ARTPLAY»",
    "Финалист конкурса «Активный дом 2012»",
    "Шорт лист конкурса «Скамья для Николы»",
    "Публикация в журнале «Проект Россия» № 63",
    "Участие в конкурсе «Дерево в архитектуре»",
    "Лонг лист конкурса «Николин Бельведер», проект «Вавилон.ru»",
    "1-e место «Архновация» — «Архитектурные произведения и проекты», в составе мастерской Н. В. Белоусова",
    "Публикация в журнале «Татлин моно». Молодые архитекторы России",
    "Диплом 3 степени, конкурс «3d-дом для экопарка Ясное Поле»",
]

DEFAULT_FOUNDER_BIOGRAPHY: list[dict[str, Any]] = [
    {
        "year": "1977 г.",
        "lines": [
            "Родился в Чимкенте, СССР",
            "художественное училище им.Кастеева, факультет дизайна. Чимкент",
            "Казанская Государственная Архитектурно-Строительная Академия, Кафедра АП Казань",
        ],
    },
    {
        "year": "1992-1996 гг.",
        "lines": [
            "художественное училище им.Кастеева, факультет дизайна. Чимкент",
            "Казанская Государственная Архитектурно-Строительная Академия, Кафедра АП Казань",
            "архитектор, ГУП « Татинвестгражданпроект» мастерская №1,под рук-вом Бакулина Г.А. Казань",
        ],
    },
    {
        "year": "1998-2004 гг.",
        "lines": [
            "Казанская Государственная Архитектурно-Строительная Академия, Кафедра АП Казань",
            "архитектор, ГУП « Татинвестгражданпроект» мастерская №1,под рук-вом Бакулина Г.А. Казань",
            "кафедра Архитектурного проектирования, КГАСА, Казань",
        ],
    },
    {
        "year": "2004-2007 гг.",
        "lines": [
            "архитектор, ГУП « Татинвестгражданпроект» мастерская №1,под рук-вом Бакулина Г.А. Казань",
            "кафедра Архитектурного проектирования, КГАСА, Казань",
            'архитектор, "Сергей Скуратов architects", Москва',
        ],
    },
    {
        "year": "2006-2007 гг.",
        "lines": [
            "кафедра Архитектурного проектирования, КГАСА, Казань",
            'архитектор, "Сергей Скуратов architects", Москва',
            "архитектор, мастерская Белоусова Н.В., Москва",
        ],
    },
    {
        "year": "2007-2008 гг.",
        "lines": [
            'архитектор, "Сергей Скуратов architects", Москва',
            "архитектор, мастерская Белоусова Н.В., Москва",
            "Персональная творческая мастерская",
        ],
    },
    {
        "year": "2020 г.",
        "lines": ["Персональная творческая мастерская", "член Союза архитекторов России"],
    },
]


def string_or_default(value: Any, fallback: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return fallback


def normalise_contact(value: Any) -> ContactSettings:
    source = value if isinstance(value, dict) and value else DEFAULT_CONTACT
    payload = {
        key: string_or_default(source.get(key), default) for key, default in DEFAULT_CONTACT.items()
    }
    return ContactSettings.model_validate(payload)


def normalise_social_links(value: Any) -> list[SocialLink]:
    """Keep entries that point somewhere; an empty result falls back to the defaults."""

    links: list[SocialLink] = []
    if isinstance(value, list):
        for item in value:
            if not isinstance(item, dict):
                continue
            platform = item.get("platform") if item.get("platform") in SOCIAL_PLATFORMS else "instagram"
            raw_id = item.get("id")
            link_id = raw_id if isinstance(raw_id, str) and raw_id.strip() else platform
            url = string_or_default(item.get("url"), "#")
            if url == "#":
                continue
            links.append(
                SocialLink(
                    id=link_id,
                    platform=platform,
                    label=string_or_default(item.get("label"), platform.upper()),
                    url=url,
                )
            )
    if not links:
        return [SocialLink.model_validate(link) for link in DEFAULT_SOCIAL_LINKS]
    return links


def normalise_appearance(value: Any) -> AppearanceSettings:
    source = value if isinstance(value, dict) else {}
    return AppearanceSettings.model_validate(
        {key: string_or_default(source.get(key), default) for key, default in DEFAULT_APPEARANCE.items()}
    )


def normalise_publications(value: Any) -> list[str]:
    publications: list[str] = []
    if isinstance(value, list):
        publications = [item.strip() for item in value if isinstance(item, str) and item.strip()]
    return publications or list(DEFAULT_PUBLICATIONS)


def normalise_founder_biography(value: Any) -> list[FounderBiographyBlock]:
    """Blocks need a year and at least one line; otherwise the defaults are used."""

    blocks: list[FounderBiographyBlock] = []
    if isinstance(value, list):
        for item in value:
            if not isinstance(item, dict):
                continue
            year = string_or_default(item.get("year"), "")
            raw_lines = item.get("lines")
            lines = (
                [line.strip() for line in raw_lines if isinstance(line, str) and line.strip()]
                if isinstance(raw_lines, list)
                else []
            )
            if year and lines:
                blocks.append(FounderBiographyBlock(year=year, lines=lines))
    if not blocks:
        return [FounderBiographyBlock.model_validate(block) for block in DEFAULT_FOUNDER_BIOGRAPHY]
    return blocks


def merge_social_links(current: list[SocialLink], updates: Any) -> list[SocialLink]:
    """Apply ``{id, label, url}`` edits to the matching links; unknown ids are ignored."""

    by_id = {link.id: link.model_copy() for link in current}
    if isinstance(updates, list):
        for item in updates:
            if not isinstance(item, dict) or item.get("id") not in by_id:
                continue
            link = by_id[item["id"]]
            if isinstance(item.get("label"), str):
                link.label = item["label"]
            if isinstance(item.get("url"), str):
                link.url = item["url"]
    return [by_id[link.id] for link in current]


def _dump(model: Any) -> Any:
    if isinstance(model, list):
        return [item.model_dump(by_alias=True) for item in model]
    return model.model_dump(by_alias=True)


class SiteSettingsService:
    """Reads and writes the normalised settings values."""

    def __init__(self, repository: SiteSettingsRepository, cache: TTLCache[Any]) -> None:
        self._repository = repository
        self._cache = cache

    async def get_contact(self) -> ContactSettings:
        cached = self._cache.get(CONTACT_KEY)
        if cached is not MISSING:
            return cached  # type: ignore[return-value]
        contact = normalise_contact(await self._repository.get(CONTACT_KEY))
        return self._cache.set(CONTACT_KEY, contact)

    async def save_contact(self, payload: Any) -> ContactSettings:
        contact = normalise_contact(payload)
        await self._repository.upsert(CONTACT_KEY, _dump(contact))
        self._cache.invalidate(CONTACT_KEY)
        return contact

    async def get_social_links(self) -> list[SocialLink]:
        return normalise_social_links(await self._repository.get(SOCIAL_LINKS_KEY))

    async def save_social_links(self, payload: Any) -> list[SocialLink]:
        links = normalise_social_links(payload)
        await self._repository.upsert(SOCIAL_LINKS_KEY, _dump(links))
        return links

    async def get_appearance(self) -> AppearanceSettings:
        value = await self._repository.get(APPEARANCE_KEY)
        if value is None:
            logger.debug("settings.appearance_missing")
        return normalise_appearance(value)

    async def save_appearance(self, payload: Any) -> AppearanceSettings:
        appearance = normalise_appearance(payload)
        await self._repository.upsert(APPEARANCE_KEY, _dump(appearance))
        return appearance

    async def get_publications(self) -> list[str]:
        return normalise_publications(await self._repository.get(PUBLICATIONS_KEY))

    async def save_publications(self, payload: Any) -> list[str]:
        publications = normalise_publications(payload)
        await self._repository.upsert(PUBLICATIONS_KEY, publications)
        return publications

    async def get_founder_biography(self) -> list[FounderBiographyBlock]:
        return normalise_founder_biography(await self._repository.get(FOUNDER_BIOGRAPHY_KEY))

    async def save_founder_biography(self, payload: Any) -> list[FounderBiographyBlock]:
        biography = normalise_founder_biography(payload)
        await self._repository.upsert(FOUNDER_BIOGRAPHY_KEY, _dump(biography))
        return biography

    def invalidate(self) -> None:
        self._cache.clear()
