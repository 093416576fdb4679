from __future__ import annotations

import base64
import hashlib
import hmac
from dataclasses import dataclass

from cloudstage.core.exceptions import AuthenticationError


@dataclass(frozen=True)
class WebhookSignatureContext:
    """
    Everything needed to check one delivery. Never persisted.
    raw_body must be the exact bytes received, not a re-serialized parse.
    """
    raw_body: bytes
    signature_header: str
    secret: str
    timestamp_header: str | None = None


def _hmac_sha256(secret: str, message: bytes) -> bytes:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def cashfree_signature(secret: str, timestamp: str, raw_body: bytes) -> str:
    """
    Cashfree signs timestamp + body and sends the digest base64-encoded.
    """
    digest = _hmac_sha256(secret, timestamp.encode("utf-8") + raw_body)
    return base64.b64encode(digest).decode("ascii")


def razorpay_signature(secret: str, raw_body: bytes) -> str:
    """
    Razorpay signs the body alone and sends the digest hex-encoded.
    """
    return _hmac_sha256(secret, raw_body).hex()


def _require_match(expected: str, received: str) -> None:
    if not hmac.compare_digest(expected.encode("utf-8"), received.encode("utf-8")):
        raise AuthenticationError("Invalid signature")


def verify_cashfree(ctx: WebhookSignatureContext) -> None:
    if not ctx.timestamp_header:
        raise AuthenticationError("Missing webhook timestamp")
    expected = cashfree_signature(ctx.secret, ctx.timestamp_header, ctx.raw_body)
    _require_match(expected, ctx.signature_header)


def verify_razorpay(ctx: WebhookSignatureContext) -> None:
    expected = razorpay_signature(ctx.secret, ctx.raw_body)
    _require_match(expected, ctx.signature_header)
