from typing import Any

import structlog
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.settings import Settings
from shared.observability import ecomm_checkout_duration_seconds, ecomm_checkout_total

from .errors import CheckoutError, CheckoutFailureKind, InvalidPayload
from .gateway import PaymentGateway
from .schemas import CheckoutFailure, CheckoutRequest, CheckoutResult, CheckoutSuccess
from .steps import build_checkout_saga

log = structlog.get_logger(__name__)


class CheckoutService:
    """
    Turns a submitted cart plus a payment method into an order.

    Transport agnostic: every outcome, including unexpected errors, comes
    back as a ``CheckoutSuccess`` or a ``CheckoutFailure``; nothing raises
    out of ``place_order``.
    """

    def __init__(self, gateway: PaymentGateway, settings: Settings):
        self.gateway = gateway
        self.settings = settings

    async def place_order(self, db: AsyncSession, payload: Any) -> CheckoutResult:
        with ecomm_checkout_duration_seconds.time():
            result = await self._place_order(db, payload)

        status = "success" if isinstance(result, CheckoutSuccess) else result.kind.value
        ecomm_checkout_total.labels(status=status).inc()
        return result

    async def _place_order(self, db: AsyncSession, payload: Any) -> CheckoutResult:
        try:
            request = CheckoutRequest.model_validate(payload)
        except ValidationError as exc:
            log.info(
                "checkout_invalid_payload",
                fields=[".".join(str(part) for part in error["loc"]) for error in exc.errors()],
            )
            return CheckoutFailure(kind=InvalidPayload.kind, message=InvalidPayload.message)

        ctx = {
            "db": db,
            "gateway": self.gateway,
            "settings": self.settings,
            "request": request,
        }
        try:
            await build_checkout_saga().execute(ctx)
        except CheckoutError as exc:
            log.info("checkout_rejected", user_id=request.user_id, reason=exc.kind.value)
            return CheckoutFailure(kind=exc.kind, message=exc.message, details=exc.details)
        except Exception:
            log.exception("checkout_failed", user_id=request.user_id)
            return CheckoutFailure(kind=CheckoutFailureKind.INTERNAL, message="Internal server error")

        log.info(
            "order_placed",
            user_id=request.user_id,
            order_id=ctx["order_id"],
            total=str(ctx["total"]),
            amount=ctx["amount"],
            payment_intent_id=ctx["intent"].intent_id,
            lines=len(ctx["lines"]),
        )
        return CheckoutSuccess(
            order_id=ctx["order_id"],
            total=ctx["total"],
            amount=ctx["amount"],
            payment_intent_id=ctx["intent"].intent_id,
        )
