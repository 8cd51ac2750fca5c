from __future__ import annotations

from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import run_with_retry, transaction
from ..models.settings import GlobalBlockModel, SiteSettingModel
from ..services.content import parse_json_value


class SiteSettingsRepository(Protocol):
    async def get(self, key: str) -> Any | None: ...

    async def list_all(self) -> dict[str, Any]: ...

    async def upsert(self, key: str, value: Any) -> Any: ...


class GlobalBlocksRepository(Protocol):
    async def get(self, slug: str) -> Any | None: ...

    async def list_all(self) -> dict[str, Any]: ...

    async def upsert(self, slug: str, data: Any) -> Any: ...


class SqlAlchemySiteSettingsRepository:
    """JSON values stored under a unique key."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, key: str) -> Any | None:
        async def _load() -> SiteSettingModel | None:
            result = await self._session.execute(
                select(SiteSettingModel).where(SiteSettingModel.key == key).limit(1)
            )
            return result.scalar_one_or_none()

        model = await run_with_retry(self._session, _load)
        return parse_json_value(model.value, None) if model else None

    async def list_all(self) -> dict[str, Any]:
        async def _load() -> list[SiteSettingModel]:
            result = await self._session.execute(select(SiteSettingModel))
            return list(result.scalars().all())

        return {
            model.key: parse_json_value(model.value, None)
            for model in await run_with_retry(self._session, _load)
        }

    async def upsert(self, key: str, value: Any) -> Any:
        async with transaction(self._session):
            result = await self._session.execute(
                select(SiteSettingModel).where(SiteSettingModel.key == key).limit(1)
            )
            model = result.scalar_one_or_none()
            if model is None:
                model = SiteSettingModel(key=key, value=value)
                self._session.add(model)
            else:
                model.value = value
            await self._session.flush()
        return value


class SqlAlchemyGlobalBlocksRepository:
    """JSON payloads of the named site-wide content blocks."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, slug: str) -> Any | None:
        async def _load() -> GlobalBlockModel | None:
            result = await self._session.execute(
                select(GlobalBlockModel).where(GlobalBlockModel.slug == slug).limit(1)
            )
            return result.scalar_one_or_none()

        model = await run_with_retry(self._session, _load)
        return parse_json_value(model.data, None) if model else None

    async def list_all(self) -> dict[str, Any]:
        async def _load() -> list[GlobalBlockModel]:
            result = await self._session.execute(select(GlobalBlockModel))
            return list(result.scalars().all())

        return {
            model.slug: parse_json_value(model.data, None)
            for model in await run_with_retry(self._session, _load)
        }

    async def upsert(self, slug: str, data: Any) -> Any:
        async with transaction(self._session):
            result = await self._session.execute(
                select(GlobalBlockModel).where(GlobalBlockModel.slug == slug).limit(1)
            )
            model = result.scalar_one_or_none()
            if model is None:
                model = GlobalBlockModel(slug=slug, data=data)
                self._session.add(model)
            else:
                model.data = data
            await self._session.flush()
        return data
