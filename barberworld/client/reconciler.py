# barberworld/client/reconciler.py
"""
Appointment lists as the app shows them.

Cached lists are served while fresh; otherwise the server is queried, first
through the actor's own endpoint and then through the full list filtered on
this side. Bare shop/barber references are filled in with names before the
result is cached again.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, List, Optional, Sequence

from pydantic import ValidationError as SchemaError

from barberworld.config import APPOINTMENT_CACHE_TTL_SECONDS, SLOT_SNAPSHOT_TTL_SECONDS
from barberworld.errors import (
    BookingError,
    ConflictError,
    IdentityUnavailable,
    NotFound,
    SlotAlreadyBooked,
    TransientNetworkError,
    ValidationError,
)
from barberworld.refs import Resolved, id_of, parse_ref, same_id
from barberworld.schemas import AppointmentStatus, SlotAvailability, UserRole
from barberworld.slots import SLOT_LABELS, all_open
from .cache import CacheStore, appointments_key, load_snapshot, save_snapshot, slots_key
from .models import EnrichedAppointment, Identity

logger = logging.getLogger(__name__)

SHOP_NAME_PLACEHOLDER = "Barbershop"


@dataclass
class ReconcilerContext:
    cache: CacheStore
    api: object
    clock: Callable[[], float] = time.time
    list_ttl: float = APPOINTMENT_CACHE_TTL_SECONDS
    slot_ttl: float = SLOT_SNAPSHOT_TTL_SECONDS
    catalog: Sequence[str] = field(default_factory=lambda: list(SLOT_LABELS))


def _dump(appt: EnrichedAppointment) -> dict:
    return appt.model_dump(mode="json", by_alias=True)


class _NameLookup:
    """Shop and barber names for one reconciliation pass, each id fetched at most once"""

    def __init__(self, api):
        self.api = api
        self.shops: Dict[str, str] = {}
        self.barbers: Dict[str, Optional[str]] = {}

    async def shop_name(self, shop_id: str) -> str:
        if shop_id not in self.shops:
            try:
                shop = await self.api.get_shop(shop_id)
                self.shops[shop_id] = shop.get("name") or SHOP_NAME_PLACEHOLDER
            except BookingError as e:
                logger.info(f"Shop lookup for {shop_id} failed ({e.code}), using placeholder")
                self.shops[shop_id] = SHOP_NAME_PLACEHOLDER
        return self.shops[shop_id]

    async def barber_name(self, barber_id: str) -> Optional[str]:
        if barber_id not in self.barbers:
            try:
                user = await self.api.get_user(barber_id)
                self.barbers[barber_id] = user.get("name")
            except BookingError as e:
                logger.info(f"Barber lookup for {barber_id} failed ({e.code})")
                self.barbers[barber_id] = None
        return self.barbers[barber_id]

    async def enrich(self, appt: EnrichedAppointment) -> EnrichedAppointment:
        updates = {}
        if not appt.shop_name:
            updates["shop_name"] = await self.shop_name(appt.shop_id)
        if appt.barber_id and not appt.barber_name:
            name = await self.barber_name(appt.barber_id)
            if name:
                updates["barber_name"] = name
        return appt.model_copy(update=updates) if updates else appt


class AppointmentReconciler:
    def __init__(self, context: ReconcilerContext):
        self.context = context

    @property
    def api(self):
        return self.context.api

    @property
    def cache(self) -> CacheStore:
        return self.context.cache

    # Reads

    async def list_for(self, identity: Optional[Identity]) -> List[EnrichedAppointment]:
        if identity is None:
            raise IdentityUnavailable()

        key = appointments_key(identity.actor_id, identity.role.value)
        cached = await load_snapshot(self.cache, key)
        now = self.context.clock()
        if cached is not None and cached.is_fresh(now, self.context.list_ttl):
            logger.debug(f"Serving {len(cached.items)} cached appointments for {key}")
            return self._parse(cached.items)

        try:
            raw = await self._fetch(identity)
        except BookingError as e:
            if cached is not None:
                logger.warning(f"Appointment refresh failed ({e.code}), serving stale cache for {key}")
                return self._parse(cached.items)
            raise

        lookup = _NameLookup(self.api)
        appointments = []
        for appt in self._parse(raw):
            appt = await lookup.enrich(appt)
            appointments.append(appt.model_copy(update={"user_id": identity.actor_id}))

        await save_snapshot(self.cache, key, [_dump(a) for a in appointments], self.context.clock())
        logger.info(f"Fetched {len(appointments)} appointments for {key}")
        return appointments

    async def available_slots(self, shop_id, on_date: date) -> List[SlotAvailability]:
        key = slots_key(shop_id, on_date)
        cached = await load_snapshot(self.cache, key)
        if cached is not None and cached.is_fresh(self.context.clock(), self.context.slot_ttl):
            return [SlotAvailability.model_validate(item) for item in cached.items]

        try:
            slots = await self.api.available_slots(shop_id, on_date)
        except BookingError as e:
            # Showing every slot beats a blank screen; booking re-checks
            logger.warning(f"Availability for shop {shop_id} on {on_date} unavailable ({e.code}), showing all slots")
            return all_open(self.context.catalog)

        await save_snapshot(
            self.cache,
            key,
            [slot.model_dump(mode="json", by_alias=True) for slot in slots],
            self.context.clock(),
        )
        return slots

    async def invalidate(self, identity: Identity) -> None:
        await self.cache.remove(appointments_key(identity.actor_id, identity.role.value))

    # Writes

    async def book(
        self,
        identity: Optional[Identity],
        shop_id,
        on_date: Optional[date],
        time_slot: Optional[str],
        service: Optional[str],
    ) -> EnrichedAppointment:
        if identity is None:
            raise IdentityUnavailable()

        # 1) Check fields before touching the network
        missing = [
            name
            for name, value in (("shopId", shop_id), ("date", on_date), ("timeSlot", time_slot), ("service", service))
            if value is None or (isinstance(value, str) and not value.strip())
        ]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        if identity.role != UserRole.client:
            raise ValidationError("Only client accounts can book appointments")

        # 2) Commit on the server, which re-checks the slot
        payload = {
            "clientId": identity.actor_id,
            "shopId": id_of(shop_id),
            "date": on_date.isoformat(),
            "timeSlot": time_slot.strip(),
            "service": service.strip(),
            "status": AppointmentStatus.confirmed.value,
        }
        try:
            created = await self.api.create_appointment(payload)
        except ConflictError as e:
            raise SlotAlreadyBooked() from e

        # 3) Mirror into the cached list so the next read needn't go out
        appt = EnrichedAppointment.from_payload(created)
        appt = await _NameLookup(self.api).enrich(appt)
        appt = appt.model_copy(update={"user_id": identity.actor_id})
        await self._replace_cached(identity, appt)
        await self.cache.remove(slots_key(appt.shop_id, appt.date))
        return appt

    async def cancel(self, identity: Optional[Identity], appointment_id) -> EnrichedAppointment:
        """Soft cancel: the record stays, only its status changes"""
        if identity is None:
            raise IdentityUnavailable()

        updated = await self.api.update_status(id_of(appointment_id), AppointmentStatus.cancelled.value)
        appt = EnrichedAppointment.from_payload(updated)

        key = appointments_key(identity.actor_id, identity.role.value)
        cached = await load_snapshot(self.cache, key)
        if cached is not None:
            for item in cached.items:
                if same_id(item.get("id"), appt.id):
                    item["status"] = appt.status.value
            await save_snapshot(self.cache, key, cached.items, cached.fetched_at)
        await self.cache.remove(slots_key(appt.shop_id, appt.date))
        return appt

    # Internals

    async def _fetch(self, identity: Identity) -> List[dict]:
        shop_id = None
        try:
            if identity.role == UserRole.client:
                indexed = await self.api.find_by_client(identity.actor_id)
            else:
                shop = await self.api.get_shop_by_owner(identity.actor_id)
                shop_id = id_of(shop.get("id") or shop.get("_id"))
                indexed = await self.api.find_by_shop(shop_id)
        except (NotFound, TransientNetworkError) as e:
            logger.info(f"Indexed appointment query unavailable ({e.code}), falling back to full list")
            indexed = None

        if indexed:
            return list(indexed)

        everything = await self.api.find_all() or []
        return [raw for raw in everything if isinstance(raw, dict) and self._belongs_to(raw, identity, shop_id)]

    @staticmethod
    def _belongs_to(raw: dict, identity: Identity, shop_id: Optional[str]) -> bool:
        if identity.role == UserRole.client:
            return same_id(raw.get("clientId", raw.get("client_id")), identity.actor_id)

        shop = parse_ref(raw.get("shopId", raw.get("shop_id")))
        if shop is None:
            return False
        if shop_id is not None:
            return shop.id == shop_id
        # Owner's shop id unknown; a populated shop still names its owner
        if isinstance(shop, Resolved):
            owner = shop.summary.get("ownerUserId", shop.summary.get("userId"))
            return same_id(owner, identity.actor_id)
        return False

    @staticmethod
    def _parse(items) -> List[EnrichedAppointment]:
        parsed = []
        for raw in items:
            if not isinstance(raw, dict):
                continue
            try:
                parsed.append(EnrichedAppointment.from_payload(raw))
            except SchemaError as e:
                logger.warning(f"Skipping malformed appointment {raw.get('id', raw.get('_id'))!r}: {e.error_count()} errors")
        return parsed

    async def _replace_cached(self, identity: Identity, appt: EnrichedAppointment) -> None:
        key = appointments_key(identity.actor_id, identity.role.value)
        cached = await load_snapshot(self.cache, key)
        if cached is None:
            return
        items = [item for item in cached.items if not same_id(item.get("id"), appt.id)]
        items.append(_dump(appt))
        await save_snapshot(self.cache, key, items, cached.fetched_at)
