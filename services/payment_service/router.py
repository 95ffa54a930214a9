"""
Payment-intent endpoints. Service-to-service only: every route requires
the X-Internal-API-Key header, so nobody can mint intents without going
through checkout.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security.dependencies import verify_internal_api_key

from .schemas import PaymentIntentCreate, PaymentIntentResponse
from .service import PaymentService

router = APIRouter(prefix="/payments", tags=["Payments"], dependencies=[Depends(verify_internal_api_key)])


@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(payload: PaymentIntentCreate, db: AsyncSession = Depends(get_db)):
    return await PaymentService.create_payment_intent(db, payload)


@router.post("/{intent_id}/refund", response_model=PaymentIntentResponse)
async def refund_payment_intent(intent_id: str, db: AsyncSession = Depends(get_db)):
    return await PaymentService.refund_payment_intent(db, intent_id)
