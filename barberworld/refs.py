# barberworld/refs.py
"""
Foreign-key references as they arrive over the wire.

Depending on the query path an appointment's shopId/clientId/barberId is
either a bare id (``"42"``, ``42``) or a populated object
(``{"_id": "42", "name": "Fade Factory"}``). ``parse_ref`` turns either form
into a ``Ref`` and ``id_of`` is the one place ids are compared from.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Union


@dataclass(frozen=True)
class Unresolved:
    id: str


@dataclass(frozen=True)
class Resolved:
    id: str
    summary: dict = field(default_factory=dict, compare=False)

    @property
    def name(self) -> Optional[str]:
        name = self.summary.get("name")
        return str(name) if name else None


Ref = Union[Unresolved, Resolved]


def parse_ref(raw: Any) -> Optional[Ref]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, (Unresolved, Resolved)):
        return raw
    if isinstance(raw, dict):
        raw_id = raw.get("_id", raw.get("id"))
        if raw_id is None or raw_id == "":
            return None
        summary = {k: v for k, v in raw.items() if k not in ("_id", "id")}
        return Resolved(str(raw_id), summary)
    return Unresolved(str(raw))


def id_of(ref: Any) -> Optional[str]:
    """String id for a ref, a raw id, or a populated object"""
    parsed = parse_ref(ref)
    return parsed.id if parsed is not None else None


def same_id(left: Any, right: Any) -> bool:
    left_id = id_of(left)
    return left_id is not None and left_id == id_of(right)
