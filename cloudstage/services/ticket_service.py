from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cloudstage.core.exceptions import StoreWriteError
from cloudstage.models.ticket import Ticket
from cloudstage.schemas.fulfillment import BuyerContact
from cloudstage.schemas.ticket import TicketCreateResult, TicketRead

logger = logging.getLogger(__name__)


async def find_ticket(
    db: AsyncSession,
    *,
    user_id: str,
    event_id: str,
) -> Ticket | None:
    res = await db.execute(
        select(Ticket)
        .where(
            Ticket.user_id == user_id,
            Ticket.event_id == event_id,
        )
        .limit(1)
    )
    return res.scalar_one_or_none()


async def insert_ticket(db: AsyncSession, ticket: Ticket) -> Ticket:
    db.add(ticket)
    await db.commit()
    # created_at is assigned by the database
    await db.refresh(ticket)
    return ticket


async def create_ticket(
    db: AsyncSession,
    *,
    user_id: str,
    event_id: str,
    price_paid: Decimal,
    buyer: BuyerContact,
    payment_id: str | None,
    is_test: bool = False,
) -> TicketCreateResult:
    """
    Create the ticket for (user_id, event_id) unless one already exists.

    A retried webhook finds the first ticket and returns it with created=False.
    Two deliveries racing past the lookup are settled by the unique constraint:
    the loser's IntegrityError is turned back into "already exists".
    Raises StoreWriteError only when the write genuinely fails.
    """
    try:
        existing = await find_ticket(db, user_id=user_id, event_id=event_id)
    except SQLAlchemyError as e:
        raise StoreWriteError(f"Ticket lookup failed: {e}") from e

    if existing:
        logger.info(
            "Ticket already exists for user %s event %s (payment %s); skipping",
            user_id, event_id, payment_id,
        )
        return TicketCreateResult(ticket=TicketRead.model_validate(existing), created=False)

    ticket = Ticket(
        user_id=user_id,
        event_id=event_id,
        buyer_name=buyer.name,
        buyer_email=buyer.email,
        buyer_phone=buyer.phone,
        price_paid=price_paid,
        payment_id=payment_id,
        is_test=is_test,
    )

    try:
        ticket = await insert_ticket(db, ticket)
    except IntegrityError as e:
        await db.rollback()
        winner = await find_ticket(db, user_id=user_id, event_id=event_id)
        if winner is None:
            raise StoreWriteError(f"Ticket insert failed: {e}") from e
        logger.info("Concurrent ticket insert for user %s event %s; keeping %s", user_id, event_id, winner.id)
        return TicketCreateResult(ticket=TicketRead.model_validate(winner), created=False)
    except SQLAlchemyError as e:
        await db.rollback()
        raise StoreWriteError(f"Ticket insert failed: {e}") from e

    return TicketCreateResult(ticket=TicketRead.model_validate(ticket), created=True)


async def list_user_tickets(db: AsyncSession, *, user_id: str) -> list[Ticket]:
    res = await db.execute(
        select(Ticket)
        .where(Ticket.user_id == user_id)
        .order_by(Ticket.created_at.desc())
    )
    return list(res.scalars().all())
