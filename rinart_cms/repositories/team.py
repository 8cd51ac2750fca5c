from __future__ import annotations

from typing import Any, Protocol

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import run_with_retry, transaction
from ..domain.team import TeamMember
from ..models.team import TeamMemberModel

logger = structlog.get_logger(__name__)

MEMBER_FIELDS = ("name", "role", "label", "image_url", "mobile_image_url", "is_featured")


class TeamRepository(Protocol):
    async def list_all(self) -> list[TeamMember]: ...

    async def create(self, data: dict[str, Any]) -> TeamMember: ...

    async def update(self, member_id: int, updates: dict[str, Any]) -> TeamMember | None: ...

    async def delete(self, member_id: int) -> bool: ...

    async def reorder(self, member_ids: list[int]) -> None: ...


class SqlAlchemyTeamRepository:
    """Team members; ``order`` is kept as a gap-free 0..n-1 sequence."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_all(self) -> list[TeamMember]:
        models = await run_with_retry(self._session, self._ordered_models)
        return [TeamMember.model_validate(model) for model in models]

    async def get(self, member_id: int) -> TeamMember | None:
        model = await self._session.get(TeamMemberModel, member_id)
        return TeamMember.model_validate(model) if model else None

    async def create(self, data: dict[str, Any]) -> TeamMember:
        async with transaction(self._session):
            existing = await self._ordered_models()
            values = {key: data[key] for key in MEMBER_FIELDS if key in data}
            model = TeamMemberModel(**values, order=len(existing))
            self._session.add(model)
            await self._session.flush()
            self._resequence(existing + [model])
        await self._session.refresh(model)
        logger.info("team.member_created", member_id=model.id)
        return TeamMember.model_validate(model)

    async def update(self, member_id: int, updates: dict[str, Any]) -> TeamMember | None:
        async with transaction(self._session):
            model = await self._session.get(TeamMemberModel, member_id)
            if model is None:
                return None
            for key in MEMBER_FIELDS:
                if key not in updates:
                    continue
                if key in ("name", "is_featured") and updates[key] is None:
                    continue
                setattr(model, key, updates[key])
            if updates.get("order") is not None:
                siblings = [item for item in await self._ordered_models() if item.id != model.id]
                position = max(0, min(int(updates["order"]), len(siblings)))
                self._resequence(siblings[:position] + [model] + siblings[position:])
        await self._session.refresh(model)
        return TeamMember.model_validate(model)

    async def delete(self, member_id: int) -> bool:
        async with transaction(self._session):
            model = await self._session.get(TeamMemberModel, member_id)
            if model is None:
                return False
            await self._session.delete(model)
            await self._session.flush()
            self._resequence(await self._ordered_models())
        logger.info("team.member_deleted", member_id=member_id)
        return True

    async def reorder(self, member_ids: list[int]) -> None:
        """Listed members take their list position; unlisted ones follow in current order."""

        async with transaction(self._session):
            models = await self._ordered_models()
            by_id = {model.id: model for model in models}
            listed = [by_id.pop(member_id) for member_id in member_ids if member_id in by_id]
            rest = [model for model in models if model.id in by_id]
            self._resequence(listed + rest)

    async def _ordered_models(self) -> list[TeamMemberModel]:
        result = await self._session.execute(
            select(TeamMemberModel).order_by(TeamMemberModel.order.asc(), TeamMemberModel.id.asc())
        )
        return list(result.scalars().all())

    @staticmethod
    def _resequence(models: list[TeamMemberModel]) -> None:
        for index, model in enumerate(models):
            model.order = index
