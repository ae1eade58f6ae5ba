# barberworld/client/identity.py

import logging
import time
from typing import Callable, Optional

from jose import jwt, JWTError
from pydantic import ValidationError as SchemaError

from barberworld.errors import BookingError, IdentityUnavailable
from .cache import CacheStore, appointments_key
from .models import Identity

logger = logging.getLogger(__name__)

USER_DATA_KEY = "userData"


class IdentityResolver:
    """
    Works out who is calling, first match wins:

    1. the identity cached from an earlier lookup
    2. the id/role claims inside the bearer token (decoded locally, unverified)
    3. ``GET /me`` on the server, which is then cached for next time
    """

    def __init__(self, cache: CacheStore, api, clock: Callable[[], float] = time.time):
        self.cache = cache
        self.api = api
        self.clock = clock

    async def resolve(self, token: Optional[str]) -> Identity:
        identity = await self._from_cache()
        if identity is not None:
            return identity

        if token:
            identity = self._from_token(token)
            if identity is not None:
                return identity

            identity = await self._from_remote(token)
            if identity is not None:
                return identity

        logger.warning("Could not resolve caller identity")
        raise IdentityUnavailable()

    async def remember(self, profile: dict) -> Identity:
        identity = Identity.from_profile(profile)
        await self.cache.set(USER_DATA_KEY, profile)
        return identity

    async def forget(self) -> None:
        """Drop the cached identity and anything cached on its behalf"""
        identity = await self._from_cache()
        if identity is not None:
            await self.cache.remove(appointments_key(identity.actor_id, identity.role.value))
        await self.cache.remove(USER_DATA_KEY)

    async def _from_cache(self) -> Optional[Identity]:
        profile = await self.cache.get(USER_DATA_KEY)
        if not isinstance(profile, dict):
            return None
        try:
            return Identity.from_profile(profile)
        except SchemaError:
            logger.info("Cached user data has no usable id/role, ignoring it")
            return None

    def _from_token(self, token: str) -> Optional[Identity]:
        try:
            claims = jwt.get_unverified_claims(token)
        except JWTError:
            return None

        exp = claims.get("exp")
        if isinstance(exp, (int, float)) and exp <= self.clock():
            logger.info("Bearer token has expired, skipping local decode")
            return None
        try:
            return Identity.from_profile(claims)
        except SchemaError:
            return None

    async def _from_remote(self, token: str) -> Optional[Identity]:
        try:
            profile = await self.api.whoami(token)
        except BookingError as e:
            logger.warning(f"Identity lookup failed: {e.message}")
            return None
        if not isinstance(profile, dict):
            logger.warning("Identity lookup returned an unexpected payload")
            return None
        try:
            return await self.remember(profile)
        except SchemaError:
            logger.warning("Identity lookup returned no id/role")
            return None
