# barberworld/slots.py

import logging
from datetime import datetime, date, time
from typing import Iterable, List, Optional, Sequence

from .refs import id_of
from .schemas import SlotAvailability

logger = logging.getLogger(__name__)

# Fixed daily schedule: hourly 9 AM to 4 PM, no lunch-hour slot
SLOT_LABELS = (
    "9:00 AM", "10:00 AM", "11:00 AM",
    "1:00 PM", "2:00 PM", "3:00 PM", "4:00 PM",
)

ACTIVE_STATUSES = frozenset({"pending", "confirmed"})


def list_all_slots() -> List[str]:
    return list(SLOT_LABELS)


def parse_time_label(label: str) -> time:
    return datetime.strptime("".join(label.split()).upper(), "%I:%M%p").time()


def canonical_label(label: str) -> str:
    """Catalog spelling of a time label; labels that don't parse come back stripped"""
    try:
        t = parse_time_label(label)
    except ValueError:
        return label.strip()
    return f"{t.hour % 12 or 12}:{t.minute:02d} {'AM' if t.hour < 12 else 'PM'}"


def sort_labels(labels: Iterable[str]) -> List[str]:
    """Chronological order; labels that don't parse keep their order at the end"""
    parsed = []
    unparsed = []
    for label in labels:
        try:
            parsed.append((parse_time_label(label), label))
        except (ValueError, AttributeError):
            unparsed.append(label)
    parsed.sort(key=lambda pair: pair[0])
    return [label for _, label in parsed] + unparsed


def _status_value(status) -> Optional[str]:
    return getattr(status, "value", status)


def _as_date(value) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    return None


def booked_labels(shop_id, on_date: date, booked: Iterable) -> set:
    taken = set()
    wanted_shop = id_of(shop_id)
    for appt in booked:
        try:
            if id_of(appt.shop_id) != wanted_shop:
                continue
            if _as_date(appt.date) != on_date:
                continue
            if _status_value(appt.status) not in ACTIVE_STATUSES:
                continue
            taken.add(parse_time_label(appt.time_slot))
        except (AttributeError, TypeError, ValueError):
            # Skip malformed records rather than fail the whole day
            logger.debug(f"Skipping malformed appointment record: {appt!r}")
    return taken


def compute_availability(
    shop_id,
    on_date: date,
    booked: Iterable,
    catalog: Optional[Sequence[str]] = None,
) -> List[SlotAvailability]:
    taken = booked_labels(shop_id, on_date, booked)
    result = []
    for label in sort_labels(catalog if catalog is not None else SLOT_LABELS):
        try:
            is_booked = parse_time_label(label) in taken
        except ValueError:
            is_booked = False
        result.append(SlotAvailability(time_slot=label, is_booked=is_booked))
    return result


def all_open(catalog: Optional[Sequence[str]] = None) -> List[SlotAvailability]:
    return [
        SlotAvailability(time_slot=label, is_booked=False)
        for label in sort_labels(catalog if catalog is not None else SLOT_LABELS)
    ]


def available_labels(slots: Iterable[SlotAvailability]) -> List[str]:
    return [slot.time_slot for slot in slots if not slot.is_booked]


def in_catalog(label: str, catalog: Optional[Sequence[str]] = None) -> bool:
    try:
        wanted = parse_time_label(label)
    except ValueError:
        return False
    for candidate in catalog if catalog is not None else SLOT_LABELS:
        try:
            if parse_time_label(candidate) == wanted:
                return True
        except ValueError:
            continue
    return False
