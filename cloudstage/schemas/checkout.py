from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator


class CustomerIdentity(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=32)


class CheckoutRequest(BaseModel):
    """
    Order request coming from the browser.

    event_id marks a ticket purchase, plan_name a premium subscription;
    one of them must be present or the payment could never be fulfilled.
    """
    amount: Decimal = Field(..., gt=0)
    receipt_id: str = Field(..., max_length=64)
    customer: CustomerIdentity
    user_id: str = Field(..., min_length=1, max_length=128)
    event_id: str | None = None
    plan_name: str | None = None

    @field_validator("receipt_id")
    @classmethod
    def validate_receipt_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Receipt ID is required")
        return v

    @model_validator(mode="after")
    def require_purpose(self) -> "CheckoutRequest":
        if not self.event_id and not self.plan_name:
            raise ValueError("Either event_id or plan_name is required")
        return self

    def metadata(self) -> dict[str, str]:
        meta = {"userId": self.user_id}
        if self.event_id:
            meta["eventId"] = self.event_id
        if self.plan_name:
            meta["planName"] = self.plan_name
        return meta


class CheckoutResponse(BaseModel):
    provider: str
    order_id: str
    amount: Decimal
    currency: str
    return_url: str
    # Cashfree drop-in checkout
    payment_session_id: str | None = None
    # Razorpay checkout widget
    key_id: str | None = None
