"""Static page SEO defaults and the merge with per-page overrides."""

from __future__ import annotations

from ..domain.seo import (
    PageSeo,
    PageSeoEntry,
    ResolvedPageSeo,
    SeoDefaults,
    SeoOverride,
    StaticSeoPage,
)

STATIC_SEO_PAGES: tuple[StaticSeoPage, ...] = (
    StaticSeoPage(
        slug="home",
        label="Главная",
        path="/",
        defaults=SeoDefaults(
            title="Архитектор Ринат Гильмутдинов — RINART",
            description=(
                "Архитектурное бюро RINART: частные дома, арт-объекты, дизайн интерьеров "
                "и мастерская архитектора Рината Гильмутдинова в Москве."
            ),
            keywords=[
                "архитектор ринат гильмутдинов",
                "rinart",
                "архитектурное бюро",
                "частные дома",
                "дизайн интерьеров",
            ],
        ),
    ),
    StaticSeoPage(
        slug="masterskaja",
        label="Мастерская",
        path="/masterskaja",
        defaults=SeoDefaults(
            title="Мастерская — RINART",
            description=(
                "Команда архитектурной мастерской RINART: философия работы, состав команды "
                "и публикации. Узнайте, кто создаёт частную архитектуру и дизайн."
            ),
            keywords=["мастерская rinart", "команда rinart", "архитектурная мастерская"],
        ),
    ),
    StaticSeoPage(
        slug="proektirovanie",
        label="Проектирование",
        path="/proektirovanie",
        defaults=SeoDefaults(
            title="Проектирование — RINART",
            description=(
                "Проектирование частных домов и сопровождающих объектов. Подробная информация "
                "о процессах и стоимости услуг архитектурного бюро RINART."
            ),
            keywords=["проектирование домов", "услуги rinart", "архитектурное проектирование"],
        ),
    ),
    StaticSeoPage(
        slug="kontakty",
        label="Контакты",
        path="/kontakty",
        defaults=SeoDefaults(
            title="Контакты — RINART",
            description=(
                "Контактная информация архитектурного бюро RINART: телефон, почта, WhatsApp, "
                "Telegram и социальные сети. Москва, Россия."
            ),
            keywords=["контакты rinart", "архитектор контакт", "rinart buro"],
        ),
    ),
)

PUBLIC_PATHS = tuple(page.path for page in STATIC_SEO_PAGES)


def get_static_page(slug: str) -> StaticSeoPage | None:
    return next((page for page in STATIC_SEO_PAGES if page.slug == slug), None)


def serialise_page(page: StaticSeoPage, record: PageSeo | None) -> PageSeoEntry:
    """Static page description plus the stored override, empty when none is stored."""

    if record is None:
        override = SeoOverride()
    else:
        override = SeoOverride(
            title=record.title,
            description=record.description,
            keywords=list(record.keywords),
            og_image_url=record.og_image_url,
        )
    return PageSeoEntry(slug=page.slug, label=page.label, path=page.path, defaults=page.defaults, seo=override)


def canonical_url(site_url: str, path: str) -> str:
    base = site_url.rstrip("/")
    return base if path == "/" else f"{base}{path}"


def resolve_page_seo(page: StaticSeoPage, record: PageSeo | None, site_url: str) -> ResolvedPageSeo:
    defaults = page.defaults
    title = (record.title if record else None) or defaults.title or ""
    description = (record.description if record else None) or defaults.description or ""
    keywords = list(record.keywords) if record and record.keywords else list(defaults.keywords)
    og_image = (record.og_image_url if record else None) or defaults.og_image_url
    return ResolvedPageSeo(
        slug=page.slug,
        path=page.path,
        label=page.label,
        title=title,
        description=description,
        keywords=keywords,
        og_image_url=og_image,
        canonical_url=canonical_url(site_url, page.path),
    )
