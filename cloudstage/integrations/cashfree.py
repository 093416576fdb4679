"""Cashfree Payment Gateway: order creation.

Webhook verification lives in services.signature_service; this client only
talks to the Orders API.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from cloudstage.core.config import Settings
from cloudstage.core.exceptions import ProviderError
from cloudstage.schemas.checkout import CheckoutRequest

logger = logging.getLogger(__name__)


class CashfreeClient:
    """Client for the Cashfree PG Orders API."""

    name = "cashfree"

    def __init__(self, settings: Settings, http: httpx.AsyncClient):
        self.settings = settings
        self.http = http

    def is_configured(self) -> bool:
        return bool(self.settings.CASHFREE_APP_ID and self.settings.CASHFREE_SECRET_KEY)

    @property
    def webhook_secret(self) -> str:
        # Cashfree signs webhooks with the API secret key
        return self.settings.CASHFREE_SECRET_KEY

    def _headers(self) -> dict[str, str]:
        return {
            "x-client-id": self.settings.CASHFREE_APP_ID,
            "x-client-secret": self.settings.CASHFREE_SECRET_KEY,
            "x-api-version": self.settings.CASHFREE_API_VERSION,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def build_order(
        self,
        request: CheckoutRequest,
        *,
        return_url: str,
        notify_url: str,
    ) -> dict[str, Any]:
        order_meta: dict[str, Any] = {
            "return_url": return_url,
            "notify_url": notify_url,
        }
        # Echoed back verbatim in the webhook
        order_meta.update(request.metadata())

        return {
            "order_id": request.receipt_id,
            "order_amount": float(request.amount),
            "order_currency": self.settings.PAYMENT_CURRENCY,
            "customer_details": {
                "customer_id": request.user_id,
                "customer_name": request.customer.name,
                "customer_email": request.customer.email,
                "customer_phone": request.customer.phone,
            },
            "order_meta": order_meta,
        }

    async def create_order(
        self,
        request: CheckoutRequest,
        *,
        return_url: str,
        notify_url: str,
    ) -> dict[str, Any]:
        body = self.build_order(request, return_url=return_url, notify_url=notify_url)

        try:
            response = await self.http.post(
                f"{self.settings.CASHFREE_BASE_URL.rstrip('/')}/orders",
                headers=self._headers(),
                json=body,
                timeout=self.settings.PROVIDER_TIMEOUT_SECONDS,
            )
        except httpx.HTTPError as e:
            logger.error("Cashfree order request failed: %s", e)
            raise ProviderError(self.name, "Could not reach the payment provider. Please try again.") from e

        if response.status_code >= 400:
            message = _error_message(response) or "Could not initiate payment. Please try again."
            logger.warning("Cashfree rejected order %s (%s): %s", request.receipt_id, response.status_code, message)
            raise ProviderError(self.name, message, status_code=response.status_code)

        return response.json()


def _error_message(response: httpx.Response) -> str | None:
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict):
        return data.get("message")
    return None
