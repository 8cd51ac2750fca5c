"""
Project editor state as the admin panel holds it between saves.

The panel edits one project at a time, reorders lists by drag and drop and
picks images from the media library. These helpers reproduce that client-side
workflow so the request bodies it produces can be built and checked without a
browser. It is the client-side counterpart of the admin project routes, so the
HTTP layer does not import it; its payloads are sent to those routes in tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence, TypeVar

from ..domain.media import MediaAsset
from ..domain.projects import Project
from ..models.project import MediaKind
from .content import html_to_paragraphs, parse_content

T = TypeVar("T")


@dataclass
class GalleryEntry:
    url: str
    caption: str = ""


@dataclass
class SchemeEntry:
    url: str
    title: str = ""


@dataclass
class EditorState:
    slug: str = ""
    title: str = ""
    tagline: str = ""
    location: str = ""
    year: str = ""
    area: str = ""
    scope: str = ""
    intro: str = ""
    hero_image_url: str = ""
    categories: list[str] = field(default_factory=list)
    description_body: list[str] = field(default_factory=list)
    description_html: str = ""
    facts: list[dict[str, str]] = field(default_factory=list)
    seo_title: str = ""
    seo_description: str = ""
    seo_keywords: list[str] = field(default_factory=list)
    seo_og_image: str = ""
    gallery: list[GalleryEntry] = field(default_factory=list)
    schemes: list[SchemeEntry] = field(default_factory=list)

    @classmethod
    def from_project(cls, project: Project) -> "EditorState":
        parts = parse_content(project.content)
        seo = parts.seo or {}
        feature = next((item for item in project.media if item.kind == MediaKind.FEATURE.value), None)
        return cls(
            slug=project.slug,
            title=project.title,
            tagline=project.tagline or "",
            location=project.location or "",
            year=project.year or "",
            area=project.area or "",
            scope=project.scope or "",
            intro=project.intro or "",
            hero_image_url=project.hero_image_url or (feature.url if feature else ""),
            categories=list(project.categories),
            description_body=parts.body or html_to_paragraphs(parts.html),
            description_html=parts.html,
            facts=[dict(fact) for fact in parts.facts],
            seo_title=seo.get("title", ""),
            seo_description=seo.get("description", ""),
            seo_keywords=list(seo.get("keywords", [])),
            seo_og_image=seo.get("ogImage", ""),
            gallery=[
                GalleryEntry(url=item.url, caption=item.caption or "")
                for item in sorted(project.media, key=lambda media: media.order)
                if item.kind == MediaKind.GALLERY.value
            ],
            schemes=[
                SchemeEntry(url=item.url, title=item.title)
                for item in sorted(project.schemes, key=lambda scheme: scheme.order)
            ],
        )

    def to_update_payload(self) -> dict[str, Any]:
        """PATCH body for ``/api/admin/projects/{slug}``."""

        return {
            "slug": self.slug.strip(),
            "title": self.title.strip(),
            "tagline": self.tagline,
            "location": self.location,
            "year": self.year,
            "area": self.area,
            "scope": self.scope,
            "intro": self.intro,
            "heroImageUrl": self.hero_image_url,
            "categories": list(self.categories),
            "descriptionBody": [paragraph for paragraph in self.description_body if paragraph.strip()],
            "descriptionHtml": self.description_html,
            "facts": [fact for fact in self.facts if fact.get("label") or fact.get("value")],
            "seoTitle": self.seo_title,
            "seoDescription": self.seo_description,
            "seoKeywords": list(self.seo_keywords),
            "seoOgImage": self.seo_og_image,
        }

    def to_media_payload(self) -> dict[str, Any]:
        """Body for ``/api/admin/projects/{slug}/media``; entries without a URL are left out."""

        return {
            "featureImageUrl": self.hero_image_url or None,
            "gallery": [
                {"url": entry.url, "caption": entry.caption or None} for entry in self.gallery if entry.url
            ],
            "schemes": [
                {"url": entry.url, "title": entry.title or None} for entry in self.schemes if entry.url
            ],
        }


def move_item(items: Sequence[T], from_index: int, to_index: int) -> list[T]:
    """Return a copy with one item moved; out-of-range indexes leave the list unchanged."""

    result = list(items)
    if not (0 <= from_index < len(result)) or not (0 <= to_index < len(result)):
        return result
    item = result.pop(from_index)
    result.insert(to_index, item)
    return result


def order_keys(items: Iterable[Any], key: str = "slug") -> list[Any]:
    """Identifiers in current list order, as sent to the reorder endpoints."""

    return [item[key] if isinstance(item, dict) else getattr(item, key) for item in items]


def merge_assets(existing: Iterable[MediaAsset], incoming: Iterable[MediaAsset]) -> list[MediaAsset]:
    """Library list with new assets first and one entry per URL."""

    merged: list[MediaAsset] = []
    seen: set[str] = set()
    for asset in [*incoming, *existing]:
        if asset.url in seen:
            continue
        seen.add(asset.url)
        merged.append(asset)
    return merged


class MediaPicker:
    """Selection state of the library dialog: one image for the hero, several for the gallery."""

    def __init__(self, *, multiple: bool = False, selected: Iterable[str] = ()) -> None:
        self.multiple = multiple
        self._selected: list[str] = []
        for url in selected:
            self.toggle(url)

    @property
    def selected(self) -> list[str]:
        return list(self._selected)

    def toggle(self, url: str) -> None:
        if url in self._selected:
            self._selected.remove(url)
        elif self.multiple:
            self._selected.append(url)
        else:
            self._selected = [url]

    def clear(self) -> None:
        self._selected = []

    def apply_to(self, state: EditorState) -> EditorState:
        """Hero picks replace the hero image; gallery picks append the images not yet present."""

        if not self.multiple:
            if self._selected:
                state.hero_image_url = self._selected[0]
            return state
        present = {entry.url for entry in state.gallery}
        for url in self._selected:
            if url not in present:
                state.gallery.append(GalleryEntry(url=url))
                present.add(url)
        return state
