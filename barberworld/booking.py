# barberworld/booking.py

import logging
from datetime import date
from typing import Optional

from sqlmodel import Session

from .errors import SlotAlreadyBooked, ValidationError
from .models import Appointment
from .repository import AppointmentRepository, ShopRepository
from .schemas import AppointmentStatus
from .slots import canonical_label, in_catalog

logger = logging.getLogger(__name__)


def _missing(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class BookingConflictGuard:
    """
    Decides whether a booking may proceed and commits it.

    The lookup before insert only gives a quick, friendly rejection. Two
    requests can both pass it; the partial unique index on
    (shop_id, date, time_slot) for active rows decides which one wins.
    """

    def __init__(self, session: Session):
        self.appointments = AppointmentRepository(session)
        self.shops = ShopRepository(session)

    def try_book(
        self,
        shop_id: Optional[int],
        on_date: Optional[date],
        time_slot: Optional[str],
        client_id: Optional[int],
        service: Optional[str],
        barber_id: Optional[int] = None,
    ) -> Appointment:
        # 1) Every field is required, no stand-in client id
        missing = [
            name
            for name, value in (
                ("shopId", shop_id),
                ("date", on_date),
                ("timeSlot", time_slot),
                ("clientId", client_id),
                ("service", service),
            )
            if _missing(value)
        ]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        time_slot = canonical_label(time_slot)
        service = service.strip()

        # 2) Shop must exist
        self.shops.get(shop_id)

        # 3) Ad hoc labels are allowed, just noted
        if not in_catalog(time_slot):
            logger.info(f"Booking off-catalog slot {time_slot!r} for shop {shop_id}")

        # 4) Fast-path conflict check
        existing = self.appointments.find_active_at(shop_id, on_date, time_slot)
        if existing is not None:
            logger.info(f"Slot {time_slot} on {on_date} at shop {shop_id} already held by appointment {existing.id}")
            raise SlotAlreadyBooked()

        # 5) Commit straight to confirmed; the unique index catches a racing insert
        return self.appointments.create(
            client_id=client_id,
            shop_id=shop_id,
            barber_id=barber_id,
            date=on_date,
            time_slot=time_slot,
            service=service,
            status=AppointmentStatus.confirmed.value,
        )
