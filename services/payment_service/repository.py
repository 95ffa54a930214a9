from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import PaymentIntent


class PaymentRepository:
    @staticmethod
    async def create_intent(db: AsyncSession, intent: PaymentIntent) -> PaymentIntent:
        db.add(intent)
        await db.commit()
        await db.refresh(intent)
        return intent

    @staticmethod
    async def get_intent(db: AsyncSession, intent_id: str) -> Optional[PaymentIntent]:
        result = await db.execute(select(PaymentIntent).where(PaymentIntent.id == intent_id))
        return result.scalars().first()

    @staticmethod
    async def save(db: AsyncSession, intent: PaymentIntent) -> PaymentIntent:
        await db.commit()
        await db.refresh(intent)
        return intent
