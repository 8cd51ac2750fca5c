from __future__ import annotations

from typing import Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import run_with_retry, transaction
from ..domain.seo import PageSeo
from ..models.page_seo import PageSeoModel
from ..services.content import parse_string_list_column


class PageSeoRepository(Protocol):
    async def list_all(self) -> list[PageSeo]: ...

    async def get(self, slug: str) -> PageSeo | None: ...

    async def upsert(
        self,
        slug: str,
        *,
        title: str | None,
        description: str | None,
        keywords: list[str],
        og_image_url: str | None,
    ) -> PageSeo: ...


class SqlAlchemyPageSeoRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_all(self) -> list[PageSeo]:
        async def _load() -> list[PageSeoModel]:
            result = await self._session.execute(select(PageSeoModel).order_by(PageSeoModel.slug))
            return list(result.scalars().all())

        return [self._to_domain(model) for model in await run_with_retry(self._session, _load)]

    async def get(self, slug: str) -> PageSeo | None:
        async def _load() -> PageSeoModel | None:
            return await self._find(slug)

        model = await run_with_retry(self._session, _load)
        return self._to_domain(model) if model else None

    async def upsert(
        self,
        slug: str,
        *,
        title: str | None,
        description: str | None,
        keywords: list[str],
        og_image_url: str | None,
    ) -> PageSeo:
        async with transaction(self._session):
            model = await self._find(slug)
            if model is None:
                model = PageSeoModel(slug=slug)
                self._session.add(model)
            model.title = title
            model.description = description
            model.keywords = list(keywords) or None
            model.og_image_url = og_image_url
            await self._session.flush()
        await self._session.refresh(model)
        return self._to_domain(model)

    async def _find(self, slug: str) -> PageSeoModel | None:
        result = await self._session.execute(
            select(PageSeoModel).where(PageSeoModel.slug == slug).limit(1)
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _to_domain(model: PageSeoModel) -> PageSeo:
        return PageSeo(
            slug=model.slug,
            title=model.title,
            description=model.description,
            keywords=parse_string_list_column(model.keywords),
            og_image_url=model.og_image_url,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
