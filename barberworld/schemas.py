# barberworld/schemas.py

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from enum import Enum
from datetime import datetime, date as Date
from typing import List, Optional


class ApiModel(BaseModel):
    # The mobile app speaks camelCase (clientId, timeSlot, ...)
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserRole(str, Enum):
    barber = "barber"
    client = "client"


class AppointmentStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"
    completed = "completed"


class UserPublic(BaseModel):
    id: int
    email: str
    role: UserRole
    name: Optional[str] = None


class UserCreate(BaseModel):
    email: str
    password: str = Field(min_length=8, max_length=72)
    role: UserRole
    name: Optional[str] = None


class AppointmentCreate(ApiModel):
    # Optional here so a missing field surfaces as our own validation_error
    client_id: Optional[int] = None
    shop_id: Optional[int] = None
    barber_id: Optional[int] = None
    date: Optional[Date] = None
    time_slot: Optional[str] = None
    service: Optional[str] = None
    status: Optional[AppointmentStatus] = None


class AppointmentPublic(ApiModel):
    id: int
    client_id: int
    shop_id: int
    barber_id: Optional[int] = None
    date: Date
    time_slot: str
    service: str
    status: AppointmentStatus
    created_at: datetime


class StatusUpdate(BaseModel):
    status: AppointmentStatus


class CancelResponse(BaseModel):
    message: str
    appointment: AppointmentPublic


class SlotAvailability(ApiModel):
    time_slot: str
    is_booked: bool


class AvailableSlotsResponse(ApiModel):
    shop_id: int
    date: Date
    available_slots: List[str]
    slots: List[SlotAvailability]


class ShopServiceItem(BaseModel):
    name: str
    price: float = 0
    duration: int = 30


class ShopLocation(BaseModel):
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None


class ShopReview(ApiModel):
    user_id: Optional[int] = None
    rating: float = Field(ge=0, le=5)
    comment: Optional[str] = None
    date: Optional[datetime] = None


class ShopCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    location: ShopLocation = Field(default_factory=ShopLocation)
    services: List[ShopServiceItem] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name cannot be blank")
        return value


class ShopUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    location: Optional[ShopLocation] = None
    services: Optional[List[ShopServiceItem]] = None
    images: Optional[List[str]] = None


class ShopPublic(ApiModel):
    id: int
    owner_user_id: int
    name: str
    description: Optional[str] = None
    location: ShopLocation = Field(default_factory=ShopLocation)
    services: List[ShopServiceItem] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    reviews: List[ShopReview] = Field(default_factory=list)
    rating: float = 0
