"""
Slug Service

Provides functionality to generate URL-friendly slugs from project titles.
Handles Cyrillic transliteration, slug generation and uniqueness enforcement.
"""

import re
import unicodedata
from typing import Iterable

import structlog

logger = structlog.get_logger(__name__)

# Simplified Russian transliteration, matching the slugs already used on the site
# (e.g. "Мастерская" -> "masterskaja").
CYRILLIC_TO_LATIN = {
    "а": "a", "б": "b", "в": "v", "г": "g", "д": "d", "е": "e", "ё": "e",
    "ж": "zh", "з": "z", "и": "i", "й": "j", "к": "k", "л": "l", "м": "m",
    "н": "n", "о": "o", "п": "p", "р": "r", "с": "s", "т": "t", "у": "u",
    "ф": "f", "х": "h", "ц": "c", "ч": "ch", "ш": "sh", "щ": "shch", "ъ": "",
    "ы": "y", "ь": "", "э": "e", "ю": "ju", "я": "ja",
}


class SlugService:
    """
    Service for generating URL-friendly slugs from project titles.

    Slugs are the public URL of a project (``/dom-u-ozera``) and must be
    unique across all projects.
    """

    MAX_SLUG_LENGTH = 100
    FALLBACK_SLUG = "project"

    def transliterate(self, text: str) -> str:
        return "".join(CYRILLIC_TO_LATIN.get(char, char) for char in text.lower())

    def generate_slug(self, title: str) -> str:
        """
        Generate URL-friendly slug from a project title.

        Processing steps:
        1. Lowercase and transliterate Cyrillic letters
        2. Normalize remaining unicode characters (NFD) and drop accents
        3. Replace whitespace, underscores and dots with hyphens
        4. Remove everything except ASCII letters, digits and hyphens
        5. Collapse repeated hyphens and strip them from both ends
        6. Truncate to MAX_SLUG_LENGTH

        Args:
            title: Project title to convert to slug

        Returns:
            URL-safe slug containing only lowercase letters, numbers, and hyphens
        """
        if not title:
            return self.FALLBACK_SLUG

        slug = self.transliterate(title)
        slug = unicodedata.normalize("NFD", slug)
        slug = slug.encode("ascii", "ignore").decode("ascii")
        slug = slug.lower()
        slug = re.sub(r"[\s_.]+", "-", slug)
        slug = re.sub(r"[^a-z0-9-]", "", slug)
        slug = re.sub(r"-+", "-", slug)
        slug = slug.strip("-")

        if len(slug) > self.MAX_SLUG_LENGTH:
            slug = slug[: self.MAX_SLUG_LENGTH].rstrip("-")

        if not slug:
            return self.FALLBACK_SLUG

        logger.debug("slug.generated", title=title[:50], slug=slug)
        return slug

    def ensure_unique_slug(self, base_slug: str, existing_slugs: Iterable[str]) -> str:
        """
        Ensure slug is unique by appending numeric suffix if needed.

        If base_slug already exists in existing_slugs, appends -2, -3, etc.
        until a unique slug is found.

        Args:
            base_slug: The base slug to make unique
            existing_slugs: Slugs already taken

        Returns:
            Unique slug (e.g., "dom-u-ozera" or "dom-u-ozera-2")
        """
        if not base_slug:
            base_slug = self.FALLBACK_SLUG

        existing_set = set(existing_slugs)
        if base_slug not in existing_set:
            return base_slug

        suffix = 2
        while f"{base_slug}-{suffix}" in existing_set:
            suffix += 1
        candidate = f"{base_slug}-{suffix}"
        logger.debug("slug.unique_with_suffix", base_slug=base_slug, slug=candidate)
        return candidate


slug_service = SlugService()
