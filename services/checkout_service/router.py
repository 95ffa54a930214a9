from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from slowapi import Limiter
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.config.settings import Settings, get_app_settings
from shared.security import get_current_user

from .errors import CheckoutFailureKind
from .schemas import CheckoutRequest, CheckoutResult, CheckoutSuccess
from .service import CheckoutService

STATUS_BY_FAILURE = {
    CheckoutFailureKind.INVALID_PAYLOAD: status.HTTP_400_BAD_REQUEST,
    CheckoutFailureKind.OUT_OF_STOCK: status.HTTP_400_BAD_REQUEST,
    CheckoutFailureKind.PAYMENT_FAILED: status.HTTP_400_BAD_REQUEST,
    CheckoutFailureKind.GATEWAY_TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
    CheckoutFailureKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_checkout_service(request: Request, settings: Settings = Depends(get_app_settings)) -> CheckoutService:
    return CheckoutService(request.app.state.payment_gateway, settings)


def to_response(result: CheckoutResult) -> JSONResponse:
    if isinstance(result, CheckoutSuccess):
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"message": "Order placed successfully", "orderId": result.order_id},
        )

    content = {"message": result.message}
    if result.kind is CheckoutFailureKind.PAYMENT_FAILED:
        # Processor payload goes out as received
        content["details"] = result.details
    return JSONResponse(status_code=STATUS_BY_FAILURE[result.kind], content=content)


def build_router(limiter: Limiter, settings: Settings) -> APIRouter:
    """Checkout routes, rate limited by the app's own limiter."""
    router = APIRouter(tags=["Checkout"])

    @router.post("/checkout")
    @limiter.limit(settings.checkout_rate_limit)
    async def checkout(
        request: Request,
        user_id: str = Depends(get_current_user),
        db: AsyncSession = Depends(get_db),
        service: CheckoutService = Depends(get_checkout_service),
    ):
        try:
            payload = await request.json()
        except ValueError:
            payload = None

        # Malformed bodies are left to place_order, which answers "Invalid payload"
        try:
            checkout_request = CheckoutRequest.model_validate(payload)
        except ValidationError:
            checkout_request = None

        if checkout_request is not None and str(checkout_request.user_id) != user_id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot check out for another user")

        return to_response(await service.place_order(db, checkout_request or payload))

    return router
