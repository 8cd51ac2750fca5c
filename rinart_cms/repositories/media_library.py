from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

import structlog
from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import run_with_retry, transaction
from ..domain.media import MediaAsset
from ..models.media import MediaAssetModel
from ..models.page_seo import PageSeoModel
from ..models.project import ProjectMediaModel, ProjectModel, ProjectSchemeModel
from ..models.settings import GlobalBlockModel, SiteSettingModel
from ..models.team import TeamMemberModel
from ..services.content import normalise_project_content, parse_json_value

logger = structlog.get_logger(__name__)


@dataclass
class MediaRemoval:
    """What was touched when an image URL was removed from the site."""

    url: str
    project_slugs: set[str] = field(default_factory=set)
    page_slugs: set[str] = field(default_factory=set)
    team_changed: bool = False
    settings_changed: bool = False
    blocks_changed: bool = False


class MediaLibraryRepository(Protocol):
    async def list_assets(self) -> list[MediaAsset]: ...

    async def get(self, asset_id: int) -> MediaAsset | None: ...

    async def create(self, url: str, title: str | None = None) -> MediaAsset: ...

    async def delete(self, *, asset_id: int | None = None, url: str | None = None) -> MediaRemoval | None: ...


class SqlAlchemyMediaLibraryRepository:
    """Shared image library, deduplicated by URL."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_assets(self) -> list[MediaAsset]:
        async def _load() -> list[MediaAssetModel]:
            result = await self._session.execute(
                select(MediaAssetModel).order_by(
                    MediaAssetModel.created_at.desc(), MediaAssetModel.id.desc()
                )
            )
            return list(result.scalars().all())

        return [MediaAsset.model_validate(row) for row in await run_with_retry(self._session, _load)]

    async def get(self, asset_id: int) -> MediaAsset | None:
        model = await self._session.get(MediaAssetModel, asset_id)
        return MediaAsset.model_validate(model) if model else None

    async def get_by_url(self, url: str) -> MediaAsset | None:
        model = await self._find_by_url(url)
        return MediaAsset.model_validate(model) if model else None

    async def create(self, url: str, title: str | None = None) -> MediaAsset:
        """Register ``url``; an existing record is returned, with a missing title filled in."""

        async with transaction(self._session):
            model = await self._find_by_url(url)
            if model is None:
                model = MediaAssetModel(url=url, title=title)
                self._session.add(model)
                await self._session.flush()
                logger.info("media.asset_created", url=url)
            elif title and not model.title:
                model.title = title
        await self._session.refresh(model)
        return MediaAsset.model_validate(model)

    async def delete(self, *, asset_id: int | None = None, url: str | None = None) -> MediaRemoval | None:
        """
        Delete a library entry and every reference to its URL.

        Returns None when neither the id nor the URL matched anything.
        """

        async with transaction(self._session):
            target_url = url
            if asset_id is not None:
                model = await self._session.get(MediaAssetModel, asset_id)
                if model is not None:
                    target_url = model.url
                    await self._session.delete(model)
            if not target_url:
                return None
            await self._session.execute(delete(MediaAssetModel).where(MediaAssetModel.url == target_url))
            removal = await self._remove_references(target_url)
        logger.info(
            "media.asset_deleted",
            url=removal.url,
            projects=sorted(removal.project_slugs),
            pages=sorted(removal.page_slugs),
        )
        return removal

    async def _find_by_url(self, url: str) -> MediaAssetModel | None:
        result = await self._session.execute(
            select(MediaAssetModel).where(MediaAssetModel.url == url).limit(1)
        )
        return result.scalar_one_or_none()

    async def _remove_references(self, url: str) -> MediaRemoval:
        removal = MediaRemoval(url=url)

        projects = await self._session.execute(select(ProjectModel))
        project_models = {model.id: model for model in projects.scalars().all()}
        for model in project_models.values():
            if model.hero_image_url == url:
                model.hero_image_url = None
                removal.project_slugs.add(model.slug)
            content = parse_json_value(model.content, None)
            seo = content.get("seo") if isinstance(content, dict) else None
            if isinstance(seo, dict) and seo.get("ogImage") == url:
                content = dict(content)
                content["seo"] = {key: value for key, value in seo.items() if key != "ogImage"}
                model.content = normalise_project_content(content)
                removal.project_slugs.add(model.slug)

        for table in (ProjectMediaModel, ProjectSchemeModel):
            owners = await self._session.execute(select(table.project_id).where(table.url == url))
            for project_id in owners.scalars().all():
                owner = project_models.get(project_id)
                if owner is not None:
                    removal.project_slugs.add(owner.slug)
            await self._session.execute(delete(table).where(table.url == url))

        pages = await self._session.execute(
            select(PageSeoModel.slug).where(PageSeoModel.og_image_url == url)
        )
        removal.page_slugs.update(pages.scalars().all())
        await self._session.execute(
            update(PageSeoModel).where(PageSeoModel.og_image_url == url).values(og_image_url=None)
        )

        team = await self._session.execute(
            select(TeamMemberModel).where(
                or_(TeamMemberModel.image_url == url, TeamMemberModel.mobile_image_url == url)
            )
        )
        for member in team.scalars().all():
            if member.image_url == url:
                member.image_url = None
            if member.mobile_image_url == url:
                member.mobile_image_url = None
            removal.team_changed = True

        blocks = await self._session.execute(select(GlobalBlockModel))
        for block in blocks.scalars().all():
            data, changed = scrub_url(parse_json_value(block.data, None), url)
            if changed:
                block.data = data
                removal.blocks_changed = True

        settings = await self._session.execute(select(SiteSettingModel))
        for setting in settings.scalars().all():
            value, changed = scrub_url(parse_json_value(setting.value, None), url)
            if changed:
                setting.value = value
                removal.settings_changed = True

        await self._session.flush()
        return removal


def scrub_url(value: Any, url: str) -> tuple[Any, bool]:
    """Copy of a JSON value with ``url`` nulled in objects and dropped from lists."""

    if isinstance(value, dict):
        changed = False
        result: dict[str, Any] = {}
        for key, item in value.items():
            if item == url:
                result[key] = None
                changed = True
                continue
            result[key], item_changed = scrub_url(item, url)
            changed = changed or item_changed
        return result, changed
    if isinstance(value, list):
        changed = False
        items: list[Any] = []
        for item in value:
            if item == url:
                changed = True
                continue
            scrubbed, item_changed = scrub_url(item, url)
            items.append(scrubbed)
            changed = changed or item_changed
        return items, changed
    return value, False
