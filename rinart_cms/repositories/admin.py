from __future__ import annotations

from datetime import datetime
from typing import Protocol

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import run_with_retry, transaction
from ..domain.auth import AdminSession, AdminUser
from ..models.admin import AdminSessionModel, AdminUserModel


class AdminRepository(Protocol):
    async def find_user_by_login(self, login: str) -> AdminUser | None: ...

    async def create_user(self, login: str, password_hash: str) -> AdminUser: ...

    async def create_session(self, user_id: int, token: str, expires_at: datetime) -> None: ...

    async def find_session(self, token: str) -> AdminSession | None: ...

    async def delete_session(self, token: str) -> None: ...

    async def delete_expired_sessions(self, now: datetime | None = None) -> int: ...


class SqlAlchemyAdminRepository:
    """Admin accounts and their session tokens."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_user_by_login(self, login: str) -> AdminUser | None:
        async def _load() -> AdminUserModel | None:
            result = await self._session.execute(
                select(AdminUserModel).where(AdminUserModel.login == login).limit(1)
            )
            return result.scalar_one_or_none()

        model = await run_with_retry(self._session, _load)
        return self._user_to_domain(model) if model else None

    async def create_user(self, login: str, password_hash: str) -> AdminUser:
        model = AdminUserModel(login=login, password_hash=password_hash)
        try:
            async with transaction(self._session):
                self._session.add(model)
                await self._session.flush()
        except IntegrityError as exc:
            raise ValueError(f"Admin user '{login}' already exists") from exc
        return self._user_to_domain(model)

    async def update_password(self, login: str, password_hash: str) -> AdminUser | None:
        async with transaction(self._session):
            result = await self._session.execute(
                select(AdminUserModel).where(AdminUserModel.login == login).limit(1)
            )
            model = result.scalar_one_or_none()
            if model is None:
                return None
            model.password_hash = password_hash
        return self._user_to_domain(model)

    async def create_session(self, user_id: int, token: str, expires_at: datetime) -> None:
        async with transaction(self._session):
            self._session.add(AdminSessionModel(user_id=user_id, token=token, expires_at=expires_at))

    async def find_session(self, token: str) -> AdminSession | None:
        """Return the session joined to its user, regardless of expiry."""

        async def _load():
            result = await self._session.execute(
                select(AdminSessionModel, AdminUserModel)
                .join(AdminUserModel, AdminUserModel.id == AdminSessionModel.user_id)
                .where(AdminSessionModel.token == token)
                .limit(1)
            )
            return result.first()

        row = await run_with_retry(self._session, _load)
        if row is None:
            return None
        session_model, user_model = row
        return AdminSession(
            token=session_model.token,
            user=self._user_to_domain(user_model),
            expires_at=session_model.expires_at,
        )

    async def delete_session(self, token: str) -> None:
        async with transaction(self._session):
            await self._session.execute(delete(AdminSessionModel).where(AdminSessionModel.token == token))

    async def delete_expired_sessions(self, now: datetime | None = None) -> int:
        async with transaction(self._session):
            result = await self._session.execute(
                delete(AdminSessionModel).where(AdminSessionModel.expires_at < (now or datetime.utcnow()))
            )
        return result.rowcount or 0

    @staticmethod
    def _user_to_domain(model: AdminUserModel) -> AdminUser:
        return AdminUser(id=model.id, login=model.login, password_hash=model.password_hash)
