from typing import Optional

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import User


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserRepository:
    """Accounts, looked up by id or by normalised email. Writes only flush."""

    @staticmethod
    async def add(db: AsyncSession, user: User) -> User:
        user.email = normalize_email(user.email)
        db.add(user)
        await db.flush()
        await db.refresh(user)
        return user

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: int) -> Optional[User]:
        return await db.get(User, user_id)

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == normalize_email(email)))
        return result.scalars().first()

    @staticmethod
    async def email_taken(db: AsyncSession, email: str) -> bool:
        result = await db.execute(select(exists().where(User.email == normalize_email(email))))
        return bool(result.scalar())

    @staticmethod
    async def delete(db: AsyncSession, user: User) -> None:
        await db.delete(user)
        await db.flush()
