from __future__ import annotations

from collections import defaultdict
from typing import Any, Iterable, Protocol

import structlog
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import run_with_retry, transaction
from ..domain.projects import Project, ProjectMedia, ProjectScheme
from ..models.project import MediaKind, ProjectMediaModel, ProjectModel, ProjectSchemeModel
from ..services.content import normalise_project_content, parse_json_value, parse_string_list_column

logger = structlog.get_logger(__name__)

WRITABLE_FIELDS = (
    "slug",
    "title",
    "tagline",
    "location",
    "year",
    "area",
    "scope",
    "intro",
    "hero_image_url",
    "categories",
    "content",
)

UNSET: Any = object()


class SlugConflictError(ValueError):
    """Raised when a project slug is already taken."""


class ProjectNotFoundError(ValueError):
    """Raised when a write targets a slug that does not exist."""


class ProjectsRepository(Protocol):
    async def list_all(self) -> list[Project]: ...

    async def list_all_with_relations(self) -> list[Project]: ...

    async def get_by_slug(self, slug: str) -> Project | None: ...

    async def get_id_by_slug(self, slug: str) -> int | None: ...

    async def list_slugs(self) -> list[str]: ...

    async def create(self, data: dict[str, Any], *, order: int | None = None) -> Project: ...

    async def update(self, slug: str, updates: dict[str, Any]) -> Project | None: ...

    async def delete(self, slug: str) -> bool: ...

    async def reorder(self, slugs: list[str]) -> None: ...

    async def replace_media(
        self,
        slug: str,
        *,
        feature_image_url: str | None = UNSET,
        gallery: Iterable[dict[str, Any]] = (),
        schemes: Iterable[dict[str, Any]] = (),
    ) -> None: ...


class SqlAlchemyProjectsRepository:
    """Projects repository backed by MySQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_all(self) -> list[Project]:
        async def _load() -> list[ProjectModel]:
            result = await self._session.execute(
                select(ProjectModel).order_by(ProjectModel.order.asc(), ProjectModel.id.asc())
            )
            return list(result.scalars().all())

        models = await run_with_retry(self._session, _load)
        return [self._to_domain(model) for model in models]

    async def list_all_with_relations(self) -> list[Project]:
        async def _load() -> tuple[list[ProjectModel], list[ProjectMediaModel], list[ProjectSchemeModel]]:
            projects = await self._session.execute(
                select(ProjectModel).order_by(ProjectModel.order.asc(), ProjectModel.id.asc())
            )
            media = await self._session.execute(
                select(ProjectMediaModel).order_by(ProjectMediaModel.order.asc(), ProjectMediaModel.id.asc())
            )
            schemes = await self._session.execute(
                select(ProjectSchemeModel).order_by(
                    ProjectSchemeModel.order.asc(), ProjectSchemeModel.id.asc()
                )
            )
            return (
                list(projects.scalars().all()),
                list(media.scalars().all()),
                list(schemes.scalars().all()),
            )

        models, media_rows, scheme_rows = await run_with_retry(self._session, _load)
        media_by_project: dict[int, list[ProjectMediaModel]] = defaultdict(list)
        for row in media_rows:
            media_by_project[row.project_id].append(row)
        schemes_by_project: dict[int, list[ProjectSchemeModel]] = defaultdict(list)
        for row in scheme_rows:
            schemes_by_project[row.project_id].append(row)
        return [
            self._to_domain(model, media_by_project[model.id], schemes_by_project[model.id])
            for model in models
        ]

    async def get_by_slug(self, slug: str) -> Project | None:
        async def _load() -> Project | None:
            model = await self._find_model(slug)
            if model is None:
                return None
            return await self._with_relations(model)

        return await run_with_retry(self._session, _load)

    async def get_id_by_slug(self, slug: str) -> int | None:
        async def _load() -> int | None:
            result = await self._session.execute(
                select(ProjectModel.id).where(ProjectModel.slug == slug).limit(1)
            )
            return result.scalar_one_or_none()

        return await run_with_retry(self._session, _load)

    async def list_slugs(self) -> list[str]:
        result = await self._session.execute(select(ProjectModel.slug))
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self._session.execute(select(func.count()).select_from(ProjectModel))
        return int(result.scalar_one())

    async def create(self, data: dict[str, Any], *, order: int | None = None) -> Project:
        """Insert a project at ``order`` (appended when omitted) and resequence the rest."""

        values = {key: data[key] for key in WRITABLE_FIELDS if key in data}
        values["categories"] = list(values.get("categories") or [])
        values["content"] = normalise_project_content(values.get("content"))
        try:
            async with transaction(self._session):
                if await self._find_model(values["slug"]) is not None:
                    raise SlugConflictError(values["slug"])
                model = ProjectModel(**values)
                self._session.add(model)
                await self._session.flush()
                siblings = [item for item in await self._ordered_models() if item.id != model.id]
                position = len(siblings) if order is None else order
                self._resequence(siblings, model, position)
        except IntegrityError as exc:
            raise SlugConflictError(values["slug"]) from exc
        await self._session.refresh(model)
        logger.info("project.created", slug=model.slug, order=model.order)
        return await self._with_relations(model)

    async def update(self, slug: str, updates: dict[str, Any]) -> Project | None:
        """Apply a partial update; keys absent from ``updates`` are left untouched."""

        try:
            async with transaction(self._session):
                model = await self._find_model(slug)
                if model is None:
                    return None
                new_slug = updates.get("slug")
                if new_slug and new_slug != slug and await self._find_model(new_slug) is not None:
                    raise SlugConflictError(new_slug)
                for key in WRITABLE_FIELDS:
                    if key not in updates:
                        continue
                    value = updates[key]
                    if key == "content":
                        value = normalise_project_content(value)
                    elif key == "categories":
                        value = list(value or [])
                    elif key in ("slug", "title") and not value:
                        continue
                    setattr(model, key, value)
                if "order" in updates:
                    siblings = [item for item in await self._ordered_models() if item.id != model.id]
                    self._resequence(siblings, model, int(updates["order"] or 0))
                await self._session.flush()
        except IntegrityError as exc:
            raise SlugConflictError(str(updates.get("slug"))) from exc
        await self._session.refresh(model)
        return await self._with_relations(model)

    async def delete(self, slug: str) -> bool:
        async with transaction(self._session):
            model = await self._find_model(slug)
            if model is None:
                return False
            await self._session.execute(
                delete(ProjectMediaModel).where(ProjectMediaModel.project_id == model.id)
            )
            await self._session.execute(
                delete(ProjectSchemeModel).where(ProjectSchemeModel.project_id == model.id)
            )
            await self._session.delete(model)
            await self._session.flush()
            remaining = await self._ordered_models()
            for index, item in enumerate(remaining):
                item.order = index
        logger.info("project.deleted", slug=slug)
        return True

    async def reorder(self, slugs: list[str]) -> None:
        """Give listed projects the order of their position; the rest follow in current order."""

        if not slugs:
            return
        async with transaction(self._session):
            models = await self._ordered_models()
            by_slug = {model.slug: model for model in models}
            listed: list[ProjectModel] = []
            for slug in slugs:
                model = by_slug.pop(slug, None)
                if model is not None:
                    listed.append(model)
            rest = [model for model in models if model.slug in by_slug]
            for index, model in enumerate(listed + rest):
                model.order = index

    async def replace_media(
        self,
        slug: str,
        *,
        feature_image_url: str | None = UNSET,
        gallery: Iterable[dict[str, Any]] = (),
        schemes: Iterable[dict[str, Any]] = (),
    ) -> None:
        """
        Replace all media and scheme rows of a project in one transaction.

        The feature image, when given, becomes the FEATURE row at order 0 and
        gallery rows start at 1; otherwise gallery rows start at 0. Passing
        ``feature_image_url`` (even as None) also overwrites ``heroImageUrl``.
        Scheme rows keep their position in ``schemes`` as their order.
        """

        async with transaction(self._session):
            model = await self._find_model(slug)
            if model is None:
                raise ProjectNotFoundError(slug)

            await self._session.execute(
                delete(ProjectMediaModel).where(ProjectMediaModel.project_id == model.id)
            )
            await self._session.execute(
                delete(ProjectSchemeModel).where(ProjectSchemeModel.project_id == model.id)
            )

            if feature_image_url is not UNSET:
                model.hero_image_url = feature_image_url

            has_feature = feature_image_url is not UNSET and bool(feature_image_url)
            rows: list[Any] = []
            if has_feature:
                rows.append(
                    ProjectMediaModel(
                        project_id=model.id,
                        url=feature_image_url,
                        caption=None,
                        kind=MediaKind.FEATURE.value,
                        order=0,
                    )
                )
            gallery_index = 1 if has_feature else 0
            for item in gallery:
                if not item.get("url"):
                    continue
                rows.append(
                    ProjectMediaModel(
                        project_id=model.id,
                        url=item["url"],
                        caption=item.get("caption"),
                        kind=MediaKind.GALLERY.value,
                        order=gallery_index,
                    )
                )
                gallery_index += 1
            for index, item in enumerate(schemes):
                if not item.get("url"):
                    continue
                rows.append(
                    ProjectSchemeModel(
                        project_id=model.id,
                        title=item.get("title") or f"Схема {index + 1}",
                        url=item["url"],
                        order=index,
                    )
                )
            self._session.add_all(rows)
            await self._session.flush()
        logger.info("project.media_replaced", slug=slug, rows=len(rows))

    async def _find_model(self, slug: str) -> ProjectModel | None:
        result = await self._session.execute(
            select(ProjectModel).where(ProjectModel.slug == slug).limit(1)
        )
        return result.scalar_one_or_none()

    async def _ordered_models(self) -> list[ProjectModel]:
        result = await self._session.execute(
            select(ProjectModel).order_by(ProjectModel.order.asc(), ProjectModel.id.asc())
        )
        return list(result.scalars().all())

    @staticmethod
    def _resequence(siblings: list[ProjectModel], model: ProjectModel, position: int) -> None:
        position = max(0, min(position, len(siblings)))
        ordered = siblings[:position] + [model] + siblings[position:]
        for index, item in enumerate(ordered):
            item.order = index

    async def _with_relations(self, model: ProjectModel) -> Project:
        media = await self._session.execute(
            select(ProjectMediaModel)
            .where(ProjectMediaModel.project_id == model.id)
            .order_by(ProjectMediaModel.order.asc(), ProjectMediaModel.id.asc())
        )
        schemes = await self._session.execute(
            select(ProjectSchemeModel)
            .where(ProjectSchemeModel.project_id == model.id)
            .order_by(ProjectSchemeModel.order.asc(), ProjectSchemeModel.id.asc())
        )
        return self._to_domain(model, media.scalars().all(), schemes.scalars().all())

    @staticmethod
    def _to_domain(
        model: ProjectModel,
        media: Iterable[ProjectMediaModel] = (),
        schemes: Iterable[ProjectSchemeModel] = (),
    ) -> Project:
        content = parse_json_value(model.content, None)
        return Project(
            id=model.id,
            slug=model.slug,
            title=model.title,
            tagline=model.tagline,
            location=model.location,
            year=model.year,
            area=model.area,
            scope=model.scope,
            intro=model.intro,
            hero_image_url=model.hero_image_url,
            order=model.order,
            categories=parse_string_list_column(model.categories),
            content=content if isinstance(content, dict) else None,
            created_at=model.created_at,
            updated_at=model.updated_at,
            media=[ProjectMedia.model_validate(row) for row in media],
            schemes=[ProjectScheme.model_validate(row) for row in schemes],
        )
