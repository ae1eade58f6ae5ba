# barberworld/repository.py
"""Database operations for appointments and shops"""

import logging
from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from .errors import ConflictError, NotFound, SlotAlreadyBooked, ValidationError
from .models import Appointment, Shop
from .slots import ACTIVE_STATUSES, sort_labels

logger = logging.getLogger(__name__)

REQUIRED_APPOINTMENT_FIELDS = ("client_id", "shop_id", "date", "time_slot", "service")


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _in_schedule_order(appointments) -> List[Appointment]:
    """Sort by date, then by slot time-of-day rather than label text"""
    by_date = {}
    for appt in appointments:
        by_date.setdefault(appt.date, []).append(appt)
    ordered = []
    for day in sorted(by_date):
        day_appts = by_date[day]
        rank = {label: i for i, label in enumerate(sort_labels({a.time_slot for a in day_appts}))}
        ordered.extend(sorted(day_appts, key=lambda a: (rank[a.time_slot], a.id or 0)))
    return ordered


class AppointmentRepository:
    """Repository for appointment database operations"""

    def __init__(self, session: Session):
        self.session = session

    def create(self, **fields) -> Appointment:
        missing = [name for name in REQUIRED_APPOINTMENT_FIELDS if _blank(fields.get(name))]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        appt = Appointment(**fields)
        self.session.add(appt)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise SlotAlreadyBooked()
        self.session.refresh(appt)  # fills appt.id
        logger.info(f"Created appointment {appt.id} for shop {appt.shop_id} on {appt.date} at {appt.time_slot}")
        return appt

    def get(self, appointment_id: int) -> Appointment:
        appt = self.session.get(Appointment, appointment_id)
        if appt is None:
            raise NotFound("Appointment not found")
        return appt

    def find_all(self) -> List[Appointment]:
        return _in_schedule_order(self.session.exec(select(Appointment)).all())

    def find_by_shop(self, shop_id: int) -> List[Appointment]:
        stmt = select(Appointment).where(Appointment.shop_id == shop_id)
        return _in_schedule_order(self.session.exec(stmt).all())

    def find_by_client(self, client_id: int) -> List[Appointment]:
        stmt = select(Appointment).where(Appointment.client_id == client_id)
        return _in_schedule_order(self.session.exec(stmt).all())

    def find_by_date(self, shop_id: int, on_date: date) -> List[Appointment]:
        stmt = (
            select(Appointment)
            .where(Appointment.shop_id == shop_id)
            .where(Appointment.date == on_date)
        )
        return _in_schedule_order(self.session.exec(stmt).all())

    def find_active_at(self, shop_id: int, on_date: date, time_slot: str) -> Optional[Appointment]:
        stmt = (
            select(Appointment)
            .where(Appointment.shop_id == shop_id)
            .where(Appointment.date == on_date)
            .where(Appointment.time_slot == time_slot)
            .where(col(Appointment.status).in_(sorted(ACTIVE_STATUSES)))
        )
        return self.session.exec(stmt).first()

    def update_status(self, appointment_id: int, status: str) -> Appointment:
        # No transition rules here; any status may move to any other
        appt = self.get(appointment_id)
        previous = appt.status
        appt.status = status
        self.session.add(appt)
        try:
            self.session.commit()
        except IntegrityError:
            # Reactivating a slot someone else holds now
            self.session.rollback()
            raise SlotAlreadyBooked()
        self.session.refresh(appt)
        logger.info(f"Appointment {appointment_id} status {previous} -> {status}")
        return appt

    def delete(self, appointment_id: int) -> None:
        appt = self.get(appointment_id)
        self.session.delete(appt)
        self.session.commit()
        logger.info(f"Deleted appointment {appointment_id}")


class ShopRepository:
    """Repository for shop database operations"""

    def __init__(self, session: Session):
        self.session = session

    def get(self, shop_id: int) -> Shop:
        shop = self.session.get(Shop, shop_id)
        if shop is None:
            raise NotFound("Shop not found")
        return shop

    def get_by_owner(self, owner_user_id: int) -> Shop:
        shop = self.session.exec(
            select(Shop).where(Shop.owner_user_id == owner_user_id)
        ).first()
        if shop is None:
            raise NotFound("Shop not found")
        return shop

    def ids_owned_by(self, owner_user_id: int) -> set:
        return set(self.session.exec(select(Shop.id).where(Shop.owner_user_id == owner_user_id)).all())

    def create(self, owner_user_id: int, **fields) -> Shop:
        shop = Shop(owner_user_id=owner_user_id, **fields)
        self.session.add(shop)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise ConflictError("Owner already has a shop")
        self.session.refresh(shop)
        logger.info(f"Created shop {shop.id} for owner {owner_user_id}")
        return shop

    def update(self, shop: Shop, **updates) -> Shop:
        for key, value in updates.items():
            if value is not None and hasattr(shop, key):
                setattr(shop, key, value)
        shop.updated_at = datetime.now(timezone.utc)
        self.session.add(shop)
        self.session.commit()
        self.session.refresh(shop)
        return shop
