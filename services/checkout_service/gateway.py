"""
Client for the payment-intent API.

Only the contract matters to checkout: an amount in minor units, a
currency and a payment method go in; either a succeeded intent comes back
or one of ``GatewayRejected`` / ``GatewayTimeout`` is raised.
"""
from typing import Any, Optional, Protocol

import httpx
import structlog
from pydantic import BaseModel

from shared.observability import ecomm_payment_gateway_requests_total

from .errors import GatewayRejected, GatewayTimeout

log = structlog.get_logger(__name__)

SUCCEEDED = "succeeded"


class PaymentIntentResult(BaseModel):
    intent_id: str
    status: str
    payload: dict[str, Any] = {}


class PaymentGateway(Protocol):
    async def create_payment_intent(self, amount: int, currency: str, payment_method_id: str) -> PaymentIntentResult:
        ...

    async def refund_payment_intent(self, intent_id: str) -> None:
        ...


def _body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {"error": response.text}


class HttpPaymentGateway:
    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"X-Internal-API-Key": api_key},
            timeout=timeout,
            transport=transport,
        )

    async def create_payment_intent(self, amount: int, currency: str, payment_method_id: str) -> PaymentIntentResult:
        payload = {"amount": amount, "currency": currency, "payment_method": payment_method_id}
        try:
            response = await self._client.post("/create-payment-intent", json=payload)
        except httpx.TimeoutException as exc:
            ecomm_payment_gateway_requests_total.labels(outcome="timeout").inc()
            log.warning("payment_gateway_timeout", amount=amount, currency=currency)
            raise GatewayTimeout() from exc
        except httpx.HTTPError as exc:
            ecomm_payment_gateway_requests_total.labels(outcome="error").inc()
            log.warning("payment_gateway_unreachable", error=str(exc))
            raise GatewayRejected({"error": str(exc)}) from exc

        body = _body(response)
        if response.is_error or not isinstance(body, dict) or body.get("status") != SUCCEEDED:
            ecomm_payment_gateway_requests_total.labels(outcome="rejected").inc()
            log.info("payment_rejected", http_status=response.status_code, amount=amount)
            raise GatewayRejected(body)

        ecomm_payment_gateway_requests_total.labels(outcome="succeeded").inc()
        return PaymentIntentResult(intent_id=body["id"], status=body["status"], payload=body)

    async def refund_payment_intent(self, intent_id: str) -> None:
        response = await self._client.post(f"/{intent_id}/refund")
        response.raise_for_status()

    async def aclose(self) -> None:
        await self._client.aclose()
