# barberworld/models.py

from typing import Optional, List
from datetime import datetime, date as Date, timezone

from sqlalchemy import Index, text
from sqlalchemy.types import JSON
from sqlmodel import SQLModel, Field, Column

# Only pending/confirmed rows hold a slot; cancelled/completed rows free it
_ACTIVE_WHERE = text("status IN ('pending', 'confirmed')")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    password_hash: str
    role: str  # barber (shop owner) or client
    name: Optional[str] = None


class Shop(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    owner_user_id: int = Field(foreign_key="user.id", index=True, unique=True)
    name: str
    description: Optional[str] = None
    location: dict = Field(default_factory=dict, sa_column=Column(JSON))
    services: List[dict] = Field(default_factory=list, sa_column=Column(JSON))
    images: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    reviews: List[dict] = Field(default_factory=list, sa_column=Column(JSON))
    rating: float = 0
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Appointment(SQLModel, table=True):
    __table_args__ = (
        # The real double-booking barrier: one active row per shop/date/slot
        Index(
            "uq_appointment_active_slot",
            "shop_id",
            "date",
            "time_slot",
            unique=True,
            sqlite_where=_ACTIVE_WHERE,
            postgresql_where=_ACTIVE_WHERE,
        ),
        Index("ix_appointment_date_status", "date", "status"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    client_id: int = Field(foreign_key="user.id", index=True)
    shop_id: int = Field(foreign_key="shop.id", index=True)
    barber_id: Optional[int] = Field(default=None, foreign_key="user.id")
    date: Date
    time_slot: str
    service: str
    status: str = "pending"
    created_at: datetime = Field(default_factory=utcnow)
