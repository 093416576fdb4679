from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol
from urllib.parse import urlencode, urlparse

from pydantic import ValidationError

from cloudstage.core.config import Settings
from cloudstage.core.exceptions import ConfigurationError, InvalidInput
from cloudstage.schemas.checkout import CheckoutRequest, CheckoutResponse

logger = logging.getLogger(__name__)


class PaymentGateway(Protocol):
    name: str

    def is_configured(self) -> bool: ...

    async def create_order(
        self,
        request: CheckoutRequest,
        *,
        return_url: str,
        notify_url: str,
    ) -> dict[str, Any]: ...


def _first_error_message(err: ValidationError) -> str:
    issues = err.errors()
    if not issues:
        return "Invalid input."
    first = issues[0]
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "__root__")
    msg = first.get("msg", "Invalid input.")
    return f"{loc}: {msg}" if loc else msg


def parse_checkout_request(payload: Any) -> CheckoutRequest:
    """
    Accepts the raw request body or an already decoded mapping.
    """
    try:
        if isinstance(payload, (bytes, str)):
            return CheckoutRequest.model_validate_json(payload)
        return CheckoutRequest.model_validate(payload)
    except ValidationError as e:
        raise InvalidInput(_first_error_message(e)) from e


def public_base_url(settings: Settings) -> str:
    """
    Payment callbacks are only ever sent to an https origin.
    """
    base = (settings.PUBLIC_BASE_URL or "").strip().rstrip("/")
    if not base:
        raise ConfigurationError("PUBLIC_BASE_URL is not configured")

    parsed = urlparse(base)
    if parsed.scheme != "https" or not parsed.netloc:
        raise ConfigurationError("PUBLIC_BASE_URL must be an absolute https URL")
    return base


def callback_urls(settings: Settings, provider: str, request: CheckoutRequest) -> tuple[str, str]:
    base = public_base_url(settings)
    if request.event_id:
        return_path = f"/confirm-ticket/{request.event_id}"
    else:
        return_path = "/artist/dashboard"
    return_url = f"{base}{return_path}?{urlencode({'order_id': request.receipt_id})}"
    notify_url = f"{base}/api/{provider}-webhook"
    return return_url, notify_url


async def create_checkout_order(
    provider: str,
    payload: Any,
    *,
    settings: Settings,
    gateways: Mapping[str, PaymentGateway],
) -> CheckoutResponse:
    """
    Validate the browser's request, then create the order with the provider.

    Raises InvalidInput, ConfigurationError or ProviderError. Nothing is
    written locally; the ticket or upgrade happens when the webhook arrives.
    """
    request = parse_checkout_request(payload)

    gateway = gateways.get(provider)
    if gateway is None:
        raise InvalidInput(f"Unknown payment provider '{provider}'")
    if not gateway.is_configured():
        logger.error("%s credentials are not configured", provider)
        raise ConfigurationError(f"{provider} credentials are not configured")

    return_url, notify_url = callback_urls(settings, provider, request)

    order = await gateway.create_order(request, return_url=return_url, notify_url=notify_url)

    logger.info("Created %s order %s for user %s", provider, order.get("order_id") or order.get("id"), request.user_id)

    if provider == "razorpay":
        return CheckoutResponse(
            provider=provider,
            order_id=order["id"],
            amount=request.amount,
            currency=order.get("currency") or settings.PAYMENT_CURRENCY,
            return_url=return_url,
            key_id=settings.RAZORPAY_KEY_ID,
        )

    return CheckoutResponse(
        provider=provider,
        order_id=order.get("order_id") or request.receipt_id,
        amount=request.amount,
        currency=order.get("order_currency") or settings.PAYMENT_CURRENCY,
        return_url=return_url,
        payment_session_id=order.get("payment_session_id"),
    )
