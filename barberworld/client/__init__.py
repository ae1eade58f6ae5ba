# barberworld/client/__init__.py
"""Client-side booking services: REST client, cache, identity and reconciliation"""

from .api import BarberWorldApi
from .cache import MemoryCacheStore, RedisCacheStore, make_cache_store
from .identity import IdentityResolver
from .models import EnrichedAppointment, Identity
from .reconciler import AppointmentReconciler, ReconcilerContext

__all__ = [
    "AppointmentReconciler",
    "BarberWorldApi",
    "EnrichedAppointment",
    "Identity",
    "IdentityResolver",
    "MemoryCacheStore",
    "ReconcilerContext",
    "RedisCacheStore",
    "make_cache_store",
]
