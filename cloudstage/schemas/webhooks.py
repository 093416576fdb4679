"""
Provider webhook envelopes.

Only the shapes we act on are modelled strictly; every other event type
decodes into a permissive "other" model so it can be acknowledged and ignored.
A known event with a missing or mistyped field fails validation instead of
being read as None.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter, field_validator


CASHFREE_PAYMENT_SUCCESS = "PAYMENT_SUCCESS_WEBHOOK"
CASHFREE_ORDER_PAID = "PAID"
RAZORPAY_ORDER_PAID = "order.paid"


def _id_to_str(v: Any) -> Any:
    # Providers send numeric ids for some accounts
    if isinstance(v, int) and not isinstance(v, bool):
        return str(v)
    return v


# -----------------------------
# Cashfree
# -----------------------------
class CashfreeCustomerDetails(BaseModel):
    model_config = ConfigDict(extra="ignore")

    customer_id: str
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None

    coerce_customer_id = field_validator("customer_id", mode="before")(_id_to_str)


class CashfreeOrderMeta(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    event_id: str | None = Field(default=None, alias="eventId")
    user_id: str | None = Field(default=None, alias="userId")
    plan_name: str | None = Field(default=None, alias="planName")
    return_url: str | None = None
    notify_url: str | None = None


class CashfreeOrder(BaseModel):
    model_config = ConfigDict(extra="ignore")

    order_id: str | None = None
    order_amount: Decimal
    order_currency: str | None = None
    order_status: str | None = None
    order_meta: CashfreeOrderMeta = Field(default_factory=CashfreeOrderMeta)
    customer_details: CashfreeCustomerDetails | None = None


class CashfreePayment(BaseModel):
    model_config = ConfigDict(extra="ignore")

    cf_payment_id: str
    payment_status: str | None = None
    payment_amount: Decimal | None = None

    coerce_payment_id = field_validator("cf_payment_id", mode="before")(_id_to_str)


class CashfreePaymentData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    order: CashfreeOrder
    payment: CashfreePayment
    customer_details: CashfreeCustomerDetails | None = None


class CashfreePaymentSuccessEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Literal["PAYMENT_SUCCESS_WEBHOOK"]
    event_time: str | None = None
    data: CashfreePaymentData
    # Some integrations post customer_details beside "data" rather than inside it
    customer_details: CashfreeCustomerDetails | None = None

    @property
    def is_paid(self) -> bool:
        return self.data.order.order_status == CASHFREE_ORDER_PAID

    @property
    def customer(self) -> CashfreeCustomerDetails | None:
        return (
            self.data.customer_details
            or self.data.order.customer_details
            or self.customer_details
        )


class CashfreeOtherEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str
    data: dict[str, Any] = Field(default_factory=dict)


def _cashfree_tag(v: Any) -> str:
    t = v.get("type") if isinstance(v, dict) else getattr(v, "type", None)
    return "payment_success" if t == CASHFREE_PAYMENT_SUCCESS else "other"


CashfreeWebhookEvent = Annotated[
    Union[
        Annotated[CashfreePaymentSuccessEvent, Tag("payment_success")],
        Annotated[CashfreeOtherEvent, Tag("other")],
    ],
    Discriminator(_cashfree_tag),
]

cashfree_event_adapter: TypeAdapter[CashfreeWebhookEvent] = TypeAdapter(CashfreeWebhookEvent)


# -----------------------------
# Razorpay
# -----------------------------
class RazorpayNotes(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: str | None = None
    user_id: str | None = Field(default=None, alias="userId")
    event_id: str | None = Field(default=None, alias="eventId")
    plan_name: str | None = Field(default=None, alias="planName")
    buyer_name: str | None = Field(default=None, alias="buyerName")
    buyer_email: str | None = Field(default=None, alias="buyerEmail")
    buyer_phone: str | None = Field(default=None, alias="buyerPhone")


def _empty_notes(v: Any) -> Any:
    # Razorpay serializes empty notes as []
    if v is None or v == []:
        return {}
    return v


class RazorpayOrderEntity(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    amount: int  # paise
    currency: str | None = None
    status: str | None = None
    receipt: str | None = None
    notes: RazorpayNotes = Field(default_factory=RazorpayNotes)

    normalize_notes = field_validator("notes", mode="before")(_empty_notes)


class RazorpayPaymentEntity(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    amount: int | None = None
    email: str | None = None
    contact: str | None = None


class RazorpayOrderWrapper(BaseModel):
    entity: RazorpayOrderEntity


class RazorpayPaymentWrapper(BaseModel):
    entity: RazorpayPaymentEntity


class RazorpayOrderPaidPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    order: RazorpayOrderWrapper
    payment: RazorpayPaymentWrapper


class RazorpayOrderPaidEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    event: Literal["order.paid"]
    account_id: str | None = None
    created_at: int | None = None
    payload: RazorpayOrderPaidPayload


class RazorpayOtherEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    event: str
    payload: dict[str, Any] = Field(default_factory=dict)


def _razorpay_tag(v: Any) -> str:
    e = v.get("event") if isinstance(v, dict) else getattr(v, "event", None)
    return "order_paid" if e == RAZORPAY_ORDER_PAID else "other"


RazorpayWebhookEvent = Annotated[
    Union[
        Annotated[RazorpayOrderPaidEvent, Tag("order_paid")],
        Annotated[RazorpayOtherEvent, Tag("other")],
    ],
    Discriminator(_razorpay_tag),
]

razorpay_event_adapter: TypeAdapter[RazorpayWebhookEvent] = TypeAdapter(RazorpayWebhookEvent)


class WebhookAck(BaseModel):
    status: str = "ok"
    ignored: bool = False
    fulfilled: bool = False
    reconciliation_id: str | None = None
