# barberworld/client/models.py

from datetime import datetime, date as Date
from typing import Any, Optional

from pydantic import BaseModel, field_validator

from barberworld.refs import Resolved, id_of, parse_ref
from barberworld.schemas import ApiModel, AppointmentStatus, UserRole


class Identity(BaseModel):
    actor_id: str
    role: UserRole
    email: Optional[str] = None

    @classmethod
    def from_profile(cls, profile: dict) -> "Identity":
        actor_id = id_of(profile.get("id") or profile.get("_id") or profile.get("userId"))
        return cls(actor_id=actor_id, role=profile.get("role"), email=profile.get("email"))


def _pick(raw: dict, *names) -> Any:
    for name in names:
        if raw.get(name) not in (None, ""):
            return raw[name]
    return None


class EnrichedAppointment(ApiModel):
    id: str
    client_id: str
    shop_id: str
    barber_id: Optional[str] = None
    date: Date
    time_slot: str
    service: str
    status: AppointmentStatus
    created_at: Optional[datetime] = None
    shop_name: Optional[str] = None
    barber_name: Optional[str] = None
    user_id: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def drop_time_of_day(cls, value):
        # Stored dates sometimes come back as midnight timestamps
        if isinstance(value, str):
            return value[:10]
        if isinstance(value, datetime):
            return value.date()
        return value

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value):
        if isinstance(value, str) and value.lower() == "canceled":
            return AppointmentStatus.cancelled.value
        return value

    @classmethod
    def from_payload(cls, raw: dict) -> "EnrichedAppointment":
        """Build from a server record whose refs may be raw ids or populated objects"""
        shop = parse_ref(_pick(raw, "shopId", "shop_id", "shop"))
        client = parse_ref(_pick(raw, "clientId", "client_id", "client"))
        barber = parse_ref(_pick(raw, "barberId", "barber_id", "barber"))

        shop_name = raw.get("shopName")
        if not shop_name and isinstance(shop, Resolved):
            shop_name = shop.name
        barber_name = raw.get("barberName")
        if not barber_name and isinstance(barber, Resolved):
            barber_name = barber.name

        return cls(
            id=id_of(_pick(raw, "id", "_id")),
            client_id=client.id if client else None,
            shop_id=shop.id if shop else None,
            barber_id=barber.id if barber else None,
            date=raw.get("date"),
            time_slot=_pick(raw, "timeSlot", "time_slot"),
            service=raw.get("service"),
            status=raw.get("status") or AppointmentStatus.pending.value,
            created_at=_pick(raw, "createdAt", "created_at"),
            shop_name=shop_name,
            barber_name=barber_name,
            user_id=_pick(raw, "userId", "user_id"),
        )
