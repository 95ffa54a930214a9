"""
Simulated payment processor.

Plays the part of the card processor behind ``create-payment-intent``:
every intent is confirmed immediately, and the well-known declining test
payment methods are turned down the way a real processor reports it.
"""
import uuid

import structlog
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from .models import PaymentIntent
from .repository import PaymentRepository
from .schemas import PaymentIntentCreate

log = structlog.get_logger(__name__)

SUCCEEDED = "succeeded"
REQUIRES_PAYMENT_METHOD = "requires_payment_method"
REFUNDED = "refunded"

DECLINING_PAYMENT_METHODS = {
    "pm_card_chargeDeclined": ("card_declined", "generic_decline", "Your card was declined."),
    "pm_card_insufficientFunds": ("card_declined", "insufficient_funds", "Your card has insufficient funds."),
}


class PaymentService:
    @staticmethod
    async def create_payment_intent(db: AsyncSession, data: PaymentIntentCreate) -> PaymentIntent:
        intent_id = f"pi_{uuid.uuid4().hex[:24]}"
        intent = PaymentIntent(
            id=intent_id,
            amount=data.amount,
            currency=data.currency.lower(),
            payment_method=data.payment_method,
            status=SUCCEEDED,
            client_secret=f"{intent_id}_secret_{uuid.uuid4().hex[:24]}",
        )

        decline = DECLINING_PAYMENT_METHODS.get(data.payment_method)
        if decline:
            code, decline_code, message = decline
            intent.status = REQUIRES_PAYMENT_METHOD
            intent.last_payment_error = {
                "type": "card_error",
                "code": code,
                "decline_code": decline_code,
                "message": message,
            }

        intent = await PaymentRepository.create_intent(db, intent)
        log.info(
            "payment_intent_created",
            intent_id=intent.id,
            amount=intent.amount,
            currency=intent.currency,
            status=intent.status,
        )
        return intent

    @staticmethod
    async def refund_payment_intent(db: AsyncSession, intent_id: str) -> PaymentIntent:
        intent = await PaymentRepository.get_intent(db, intent_id)
        if not intent:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment intent not found")
        if intent.status == REFUNDED:
            return intent
        if intent.status != SUCCEEDED:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Payment intent was not charged")

        intent.status = REFUNDED
        intent = await PaymentRepository.save(db, intent)
        log.info("payment_intent_refunded", intent_id=intent.id, amount=intent.amount)
        return intent
