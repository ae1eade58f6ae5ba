# barberworld/routers/appointments_routes.py

import logging
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from barberworld.db import get_session
from barberworld.models import Appointment
from barberworld.schemas import (
    AppointmentCreate,
    AppointmentPublic,
    AppointmentStatus,
    AvailableSlotsResponse,
    CancelResponse,
    StatusUpdate,
)
from barberworld.auth import get_current_user
from barberworld.booking import BookingConflictGuard
from barberworld.deps import require_role, require_self_or_role
from barberworld.repository import AppointmentRepository, ShopRepository
from barberworld.slots import all_open, available_labels, compute_availability

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/appointments",
    tags=["appointments"],
)


def _owns_shop(session: Session, user: dict, shop_id: int) -> bool:
    if user["role"] != "barber":
        return False
    return ShopRepository(session).get(shop_id).owner_user_id == user["id"]


def _require_shop_owner(session: Session, user: dict, shop_id: int):
    require_role(user, "barber")
    if not _owns_shop(session, user, shop_id):
        raise HTTPException(status_code=403, detail="Forbidden")


def _require_party(session: Session, user: dict, appt: Appointment) -> bool:
    """The booking client or the shop's owner; returns True for the owner"""
    if user["id"] == appt.client_id:
        return _owns_shop(session, user, appt.shop_id)
    if _owns_shop(session, user, appt.shop_id):
        return True
    raise HTTPException(status_code=403, detail="Forbidden")


@router.get("/available-slots/{shop_id}/{on_date}", response_model=AvailableSlotsResponse)
def available_slots(
    shop_id: int,
    on_date: date,
    session: Session = Depends(get_session),
):
    try:
        booked = AppointmentRepository(session).find_by_date(shop_id, on_date)
        slots = compute_availability(shop_id, on_date, booked)
    except SQLAlchemyError as e:
        # Availability fails open; booking re-checks anyway
        logger.warning(f"Availability lookup failed for shop {shop_id} on {on_date}, showing all slots: {e}")
        session.rollback()
        slots = all_open()

    return {
        "shop_id": shop_id,
        "date": on_date,
        "available_slots": available_labels(slots),
        "slots": slots,
    }


@router.post("", response_model=AppointmentPublic, status_code=201)
def create_appointment(
    appt: AppointmentCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    if appt.client_id is not None:
        require_self_or_role(current_user, appt.client_id, "barber")
    if appt.status is not None and appt.status != AppointmentStatus.confirmed:
        logger.info(f"Ignoring requested status {appt.status.value}; bookings commit as confirmed")

    return BookingConflictGuard(session).try_book(
        shop_id=appt.shop_id,
        on_date=appt.date,
        time_slot=appt.time_slot,
        client_id=appt.client_id,
        service=appt.service,
        barber_id=appt.barber_id,
    )


@router.get("", response_model=List[AppointmentPublic])
def list_all_appointments(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    # Only rows the caller booked or that sit in a shop they own
    owned = ShopRepository(session).ids_owned_by(current_user["id"]) if current_user["role"] == "barber" else set()
    return [
        appt
        for appt in AppointmentRepository(session).find_all()
        if appt.client_id == current_user["id"] or appt.shop_id in owned
    ]


@router.get("/shop/{shop_id}", response_model=List[AppointmentPublic])
def list_shop_appointments(
    shop_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    _require_shop_owner(session, current_user, shop_id)
    return AppointmentRepository(session).find_by_shop(shop_id)


@router.get("/shop/{shop_id}/date/{on_date}", response_model=List[AppointmentPublic])
def list_shop_appointments_on_date(
    shop_id: int,
    on_date: date,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    _require_shop_owner(session, current_user, shop_id)
    return AppointmentRepository(session).find_by_date(shop_id, on_date)


@router.get("/client/{client_id}", response_model=List[AppointmentPublic])
def list_client_appointments(
    client_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_self_or_role(current_user, client_id, "barber")
    appts = AppointmentRepository(session).find_by_client(client_id)
    if current_user["role"] == "barber" and current_user["id"] != client_id:
        # Owners only see their own shop's bookings for a client
        appts = [a for a in appts if _owns_shop(session, current_user, a.shop_id)]
    return appts


@router.patch("/{appt_id}/status", response_model=AppointmentPublic)
def update_appointment_status(
    appt_id: int,
    update: StatusUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    repo = AppointmentRepository(session)
    target = repo.get(appt_id)
    is_owner = _require_party(session, current_user, target)

    # Clients can only call their booking off
    if not is_owner and update.status != AppointmentStatus.cancelled:
        raise HTTPException(status_code=403, detail="Forbidden")

    return repo.update_status(appt_id, update.status.value)


@router.delete("/{appt_id}", response_model=CancelResponse)
def cancel_appointment(
    appt_id: int,
    hard: bool = False,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    repo = AppointmentRepository(session)
    target = repo.get(appt_id)
    is_owner = _require_party(session, current_user, target)

    if hard:
        # Purging history is an owner action only
        if not is_owner:
            raise HTTPException(status_code=403, detail="Forbidden")
        repo.delete(appt_id)
        return Response(status_code=204)

    if target.status == AppointmentStatus.cancelled.value:
        raise HTTPException(status_code=409, detail="Appointment already cancelled")

    cancelled = repo.update_status(appt_id, AppointmentStatus.cancelled.value)
    return {"message": "Appointment cancelled successfully", "appointment": AppointmentPublic.model_validate(cancelled)}
