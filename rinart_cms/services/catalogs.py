"""
Cached read models behind the public endpoints.

The caches themselves are created once per application (see ``PublicCaches``)
and handed to short-lived wrappers that also hold the request's repository.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..domain.projects import GalleryImage, Project, ProjectDetail, ProjectSummary, SchemeImage
from ..domain.team import TeamMember
from ..models.project import MediaKind
from ..repositories.projects import ProjectsRepository
from ..repositories.team import TeamRepository
from .cache import MISSING, TTLCache
from .content import html_to_paragraphs, parse_content

SUMMARIES_KEY = "summaries"
MEMBERS_KEY = "members"


@dataclass
class PublicCaches:
    project_summaries: TTLCache[Any]
    project_details: TTLCache[Any]
    site_settings: TTLCache[Any]
    team: TTLCache[Any]

    @classmethod
    def create(cls, ttl_seconds: float) -> "PublicCaches":
        return cls(
            project_summaries=TTLCache(ttl_seconds, name="project_summaries"),
            project_details=TTLCache(ttl_seconds, name="project_details"),
            site_settings=TTLCache(ttl_seconds, name="site_settings"),
            team=TTLCache(ttl_seconds, name="team"),
        )

    def clear(self) -> None:
        for cache in (self.project_summaries, self.project_details, self.site_settings, self.team):
            cache.clear()


def build_summary(project: Project) -> ProjectSummary:
    return ProjectSummary(
        id=project.id,
        slug=project.slug,
        title=project.title,
        tagline=project.tagline,
        hero_image_url=project.hero_image_url,
        order=project.order,
        categories=project.categories,
        created_at=project.created_at,
    )


def build_detail(project: Project) -> ProjectDetail:
    """Public project view: hero falls back to the FEATURE image, body to the HTML text."""

    parts = parse_content(project.content)
    feature = next((item for item in project.media if item.kind == MediaKind.FEATURE.value), None)
    gallery = sorted(
        (item for item in project.media if item.kind == MediaKind.GALLERY.value),
        key=lambda item: item.order,
    )
    schemes = sorted(project.schemes, key=lambda item: item.order)
    return ProjectDetail(
        id=project.id,
        slug=project.slug,
        title=project.title,
        tagline=project.tagline,
        location=project.location,
        year=project.year,
        area=project.area,
        scope=project.scope,
        intro=project.intro,
        hero_image_url=project.hero_image_url or (feature.url if feature else None),
        description_body=parts.body or html_to_paragraphs(parts.html),
        description_html=parts.html or None,
        facts=parts.facts,
        categories=project.categories,
        gallery=[
            GalleryImage(id=item.id, url=item.url, caption=item.caption, order=item.order)
            for item in gallery
        ],
        schemes=[
            SchemeImage(id=item.id, title=item.title, url=item.url, order=item.order) for item in schemes
        ],
        seo=parts.seo,
    )


class ProjectCatalog:
    def __init__(self, repository: ProjectsRepository, caches: PublicCaches) -> None:
        self._repository = repository
        self._summaries = caches.project_summaries
        self._details = caches.project_details

    async def list_summaries(self) -> list[ProjectSummary]:
        cached = self._summaries.get(SUMMARIES_KEY)
        if cached is not MISSING:
            return cached  # type: ignore[return-value]
        projects = await self._repository.list_all()
        return self._summaries.set(SUMMARIES_KEY, [build_summary(project) for project in projects])

    async def get_detail(self, slug: str) -> ProjectDetail | None:
        """Cached detail view; a missing project is cached as None too."""

        cached = self._details.get(slug)
        if cached is not MISSING:
            return cached  # type: ignore[return-value]
        project = await self._repository.get_by_slug(slug)
        return self._details.set(slug, build_detail(project) if project else None)

    def invalidate(self, slug: str | None = None) -> None:
        self._summaries.clear()
        if slug:
            self._details.invalidate(slug)

    def invalidate_all(self) -> None:
        self._summaries.clear()
        self._details.clear()


class TeamRoster:
    def __init__(self, repository: TeamRepository, caches: PublicCaches) -> None:
        self._repository = repository
        self._cache = caches.team

    async def list_members(self) -> list[TeamMember]:
        cached = self._cache.get(MEMBERS_KEY)
        if cached is not MISSING:
            return cached  # type: ignore[return-value]
        return self._cache.set(MEMBERS_KEY, await self._repository.list_all())

    def invalidate(self) -> None:
        self._cache.clear()
