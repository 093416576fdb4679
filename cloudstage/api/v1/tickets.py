from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from cloudstage.api.deps import get_settings
from cloudstage.core.config import Settings
from cloudstage.db.session import get_db
from cloudstage.schemas.ticket import TicketCreateResult, TicketSummary, UnpaidBookingRequest
from cloudstage.services.event_service import get_event
from cloudstage.services.ticket_service import create_ticket, list_user_tickets

router = APIRouter(tags=["tickets"])


@router.post(
    "/tickets/test-booking",
    response_model=TicketCreateResult,
    status_code=status.HTTP_201_CREATED,
)
async def create_test_booking(
    booking: UnpaidBookingRequest,
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
):
    """
    Book without a payment. Staging only: off unless TEST_MODE_BOOKINGS_ENABLED.
    """
    if not settings.TEST_MODE_BOOKINGS_ENABLED:
        raise HTTPException(status_code=404, detail="Not found")

    event = await get_event(db, booking.event_id)

    return await create_ticket(
        db,
        user_id=booking.user_id,
        event_id=event.id,
        price_paid=event.ticket_price,
        buyer=booking.buyer,
        payment_id=None,
        is_test=True,
    )


@router.get(
    "/users/{user_id}/tickets",
    response_model=list[TicketSummary],
)
async def get_user_tickets(
    user_id: str,
    db: AsyncSession = Depends(get_db),
):
    return await list_user_tickets(db, user_id=user_id)
