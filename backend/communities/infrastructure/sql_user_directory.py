"""SQL User Directory: resolves token subjects (emails) to directory users."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from communities.core.domain_types import UserId
from communities.core.identity import User
from communities.models.user import UserModel


class SqlUserDirectory:
    """UserDirectory backed by the users table."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def find_by_email(self, email: str) -> User | None:
        row = (await self._db.execute(
            select(UserModel.id, UserModel.email).where(UserModel.email == email),
        )).one_or_none()
        if row is None:
            return None
        return User(id=UserId(row.id), email=row.email)
