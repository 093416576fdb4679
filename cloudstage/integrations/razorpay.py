"""Razorpay: order creation for ticket checkouts."""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import httpx

from cloudstage.core.config import Settings
from cloudstage.core.exceptions import ProviderError
from cloudstage.schemas.checkout import CheckoutRequest

logger = logging.getLogger(__name__)


def to_paise(amount: Decimal) -> int:
    """Amount in the smallest currency unit."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class RazorpayClient:
    """Client for the Razorpay Orders API."""

    name = "razorpay"

    def __init__(self, settings: Settings, http: httpx.AsyncClient):
        self.settings = settings
        self.http = http

    def is_configured(self) -> bool:
        return bool(self.settings.RAZORPAY_KEY_ID and self.settings.RAZORPAY_KEY_SECRET)

    @property
    def webhook_secret(self) -> str:
        return self.settings.RAZORPAY_WEBHOOK_SECRET

    def build_order(self, request: CheckoutRequest) -> dict[str, Any]:
        notes: dict[str, str] = {
            "type": "ticket" if request.event_id else "premium",
            "buyerName": request.customer.name,
            "buyerEmail": request.customer.email,
            "buyerPhone": request.customer.phone,
        }
        notes.update(request.metadata())

        return {
            "amount": to_paise(request.amount),
            "currency": self.settings.PAYMENT_CURRENCY,
            "receipt": request.receipt_id,
            "notes": notes,
        }

    async def create_order(
        self,
        request: CheckoutRequest,
        *,
        return_url: str,
        notify_url: str,
    ) -> dict[str, Any]:
        # Razorpay takes its webhook URL from the dashboard, not per order
        body = self.build_order(request)

        try:
            response = await self.http.post(
                f"{self.settings.RAZORPAY_BASE_URL.rstrip('/')}/orders",
                auth=(self.settings.RAZORPAY_KEY_ID, self.settings.RAZORPAY_KEY_SECRET),
                json=body,
                timeout=self.settings.PROVIDER_TIMEOUT_SECONDS,
            )
        except httpx.HTTPError as e:
            logger.error("Razorpay order request failed: %s", e)
            raise ProviderError(self.name, "Could not reach the payment provider. Please try again.") from e

        if response.status_code >= 400:
            message = _error_description(response) or "Could not initiate payment. Please try again."
            logger.warning("Razorpay rejected order %s (%s): %s", request.receipt_id, response.status_code, message)
            raise ProviderError(self.name, message, status_code=response.status_code)

        return response.json()


def _error_description(response: httpx.Response) -> str | None:
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict):
        err = data.get("error") or {}
        if isinstance(err, dict):
            return err.get("description")
    return None
