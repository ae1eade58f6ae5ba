# barberworld/client/api.py

import logging
from datetime import date
from typing import Any, List, Optional

import httpx

from barberworld.config import API_URL, HTTP_TIMEOUT_SECONDS
from barberworld.errors import (
    ERRORS_BY_CODE,
    BookingError,
    ConflictError,
    IdentityUnavailable,
    NotFound,
    TransientNetworkError,
    ValidationError,
)
from barberworld.schemas import SlotAvailability
from barberworld.slots import sort_labels

logger = logging.getLogger(__name__)


def error_for(response: httpx.Response) -> BookingError:
    """Classify an error response into the booking error taxonomy"""
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    message = body.get("message") or body.get("detail")
    if not isinstance(message, str):
        message = None

    cls = ERRORS_BY_CODE.get(body.get("error"))
    if cls is None:
        status = response.status_code
        if status in (400, 422):
            cls = ValidationError
        elif status in (401, 403):
            cls = IdentityUnavailable
        elif status == 404:
            cls = NotFound
        elif status == 409:
            cls = ConflictError
        else:
            cls = TransientNetworkError
    return cls(message)


class BarberWorldApi:
    """Thin async wrapper over the Barber World REST API"""

    def __init__(
        self,
        base_url: str = API_URL,
        token: Optional[str] = None,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self._client.aclose()

    async def _request(self, method: str, path: str, token: Optional[str] = None, **kwargs) -> Any:
        token = token or self.token
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise TransientNetworkError() from e

        if response.is_error:
            error = error_for(response)
            logger.info(f"{method} {path} -> {response.status_code} {error.code}")
            raise error
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise TransientNetworkError("Unreadable response from server") from e

    # Identity

    async def whoami(self, token: str) -> dict:
        return await self._request("GET", "/me", token=token)

    async def get_user(self, user_id: str) -> dict:
        return await self._request("GET", f"/users/{user_id}")

    # Shops

    async def get_shop(self, shop_id: str) -> dict:
        return await self._request("GET", f"/api/shop/{shop_id}")

    async def get_shop_by_owner(self, user_id: str) -> dict:
        return await self._request("GET", f"/api/shop/byUserId/{user_id}")

    # Appointments

    async def available_slots(self, shop_id: str, on_date: date) -> List[SlotAvailability]:
        body = await self._request("GET", f"/api/appointments/available-slots/{shop_id}/{on_date.isoformat()}")
        if not isinstance(body, dict):
            raise TransientNetworkError("Unexpected availability payload")
        if body.get("slots"):
            slots = [SlotAvailability.model_validate(slot) for slot in body["slots"]]
            order = sort_labels([slot.time_slot for slot in slots])
            by_label = {slot.time_slot: slot for slot in slots}
            return [by_label[label] for label in order]
        # Older servers only list the open labels
        return [
            SlotAvailability(time_slot=label, is_booked=False)
            for label in sort_labels(body.get("availableSlots") or [])
        ]

    async def create_appointment(self, payload: dict) -> dict:
        return await self._request("POST", "/api/appointments", json=payload)

    async def find_all(self) -> List[dict]:
        return await self._request("GET", "/api/appointments")

    async def find_by_shop(self, shop_id: str) -> List[dict]:
        return await self._request("GET", f"/api/appointments/shop/{shop_id}")

    async def find_by_client(self, client_id: str) -> List[dict]:
        return await self._request("GET", f"/api/appointments/client/{client_id}")

    async def find_by_date(self, shop_id: str, on_date: date) -> List[dict]:
        return await self._request("GET", f"/api/appointments/shop/{shop_id}/date/{on_date.isoformat()}")

    async def update_status(self, appointment_id: str, status: str) -> dict:
        return await self._request("PATCH", f"/api/appointments/{appointment_id}/status", json={"status": status})

    async def delete(self, appointment_id: str, hard: bool = False) -> Optional[dict]:
        params = {"hard": "true"} if hard else None
        return await self._request("DELETE", f"/api/appointments/{appointment_id}", params=params)
