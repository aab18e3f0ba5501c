"""
Memoization of computed day slots.

Key format: (barber_id, date, service_id, service_duration, lunch_fingerprint)
Value: ordered list of available start minutes for that day, before any
"in the past" filtering, so an entry stays valid as the clock moves.

Bookings are not part of the key. Code that writes a booking must call
``invalidate_date`` (or ``invalidate_barber``). Code that edits opening hours
must call ``invalidate``.
"""

import hashlib
import threading
from datetime import date
from typing import Callable, Dict, Iterable, List, NamedTuple, Optional, Sequence
from urllib.parse import quote, unquote

import structlog

from barber_availability.core.config import settings
from barber_availability.core.redis import RedisClient, redis_client
from barber_availability.schemas.availability import LunchBreak

logger = structlog.get_logger(__name__)

NO_LUNCH_BREAKS = "no-breaks"


class AvailabilityCacheKey(NamedTuple):
    barber_id: str
    day: date
    service_id: Optional[str]
    service_duration: int
    lunch_fingerprint: str


KeyPredicate = Callable[[AvailabilityCacheKey], bool]


def fingerprint(lunch_breaks: Iterable[LunchBreak]) -> str:
    """Stable digest of the active lunch breaks; any edit changes it."""
    parts = sorted(
        f"{lunch.lunch_break_id or ''}_{lunch.start_time}_{lunch.duration_minutes}"
        for lunch in lunch_breaks
        if lunch.is_active
    )
    if not parts:
        return NO_LUNCH_BREAKS
    return hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()[:16]


def build_cache_key(
    barber_id: str,
    day: date,
    service_duration: int,
    lunch_breaks: Iterable[LunchBreak],
    service_id: Optional[str] = None,
) -> AvailabilityCacheKey:
    return AvailabilityCacheKey(
        barber_id=str(barber_id),
        day=day,
        service_id=service_id,
        service_duration=service_duration,
        lunch_fingerprint=fingerprint(lunch_breaks),
    )


class BaseAvailabilityCache:
    """Interface shared by the cache backends."""

    async def get(self, key: AvailabilityCacheKey) -> Optional[List[int]]:
        raise NotImplementedError

    async def put(self, key: AvailabilityCacheKey, result: Sequence[int]) -> None:
        raise NotImplementedError

    async def invalidate(self, predicate: Optional[KeyPredicate] = None) -> int:
        raise NotImplementedError

    async def invalidate_barber(self, barber_id: str) -> int:
        barber_id = str(barber_id)
        return await self.invalidate(lambda key: key.barber_id == barber_id)

    async def invalidate_date(self, barber_id: str, day: date) -> int:
        barber_id = str(barber_id)
        return await self.invalidate(
            lambda key: key.barber_id == barber_id and key.day == day
        )


class AvailabilityCache(BaseAvailabilityCache):
    """Process-local last-write-wins cache guarded by a single lock."""

    def __init__(self):
        self._entries: Dict[AvailabilityCacheKey, tuple] = {}
        self._lock = threading.Lock()

    async def get(self, key: AvailabilityCacheKey) -> Optional[List[int]]:
        """Cached slots for ``key`` or ``None`` on a miss."""
        with self._lock:
            entry = self._entries.get(key)
        return None if entry is None else list(entry)

    async def put(self, key: AvailabilityCacheKey, result: Sequence[int]) -> None:
        with self._lock:
            self._entries[key] = tuple(result)

    async def invalidate(self, predicate: Optional[KeyPredicate] = None) -> int:
        """Drop entries matching ``predicate``, or every entry when it is None."""
        with self._lock:
            if predicate is None:
                removed = len(self._entries)
                self._entries.clear()
            else:
                stale = [key for key in self._entries if predicate(key)]
                for key in stale:
                    del self._entries[key]
                removed = len(stale)

        logger.info("Availability cache invalidated", removed=removed, full=predicate is None)
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RedisAvailabilityCache(BaseAvailabilityCache):
    """Availability cache shared between processes through Redis.

    Entries expire after ``AVAILABILITY_CACHE_TTL_SECONDS``. A Redis failure
    reads as a miss, so the caller recomputes instead of failing.
    """

    KEY_PREFIX = "availability"

    def __init__(
        self,
        client: Optional[RedisClient] = None,
        ttl_seconds: Optional[int] = None,
        prefix: Optional[str] = None,
    ):
        self.client = client or redis_client
        self.ttl_seconds = (
            settings.AVAILABILITY_CACHE_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        )
        self.prefix = prefix or self.KEY_PREFIX

    def _key(self, key: AvailabilityCacheKey) -> str:
        parts = [
            key.barber_id,
            key.day.isoformat(),
            key.service_id or "",
            str(key.service_duration),
            key.lunch_fingerprint,
        ]
        return ":".join([self.prefix] + [quote(part, safe="") for part in parts])

    def _parse_key(self, raw: str) -> Optional[AvailabilityCacheKey]:
        parts = raw[len(self.prefix) + 1:].split(":")
        if len(parts) != 5:
            return None
        barber_id, day, service_id, duration, lunch = (unquote(part) for part in parts)
        try:
            return AvailabilityCacheKey(
                barber_id=barber_id,
                day=date.fromisoformat(day),
                service_id=service_id or None,
                service_duration=int(duration),
                lunch_fingerprint=lunch,
            )
        except ValueError:
            return None

    async def get(self, key: AvailabilityCacheKey) -> Optional[List[int]]:
        value = await self.client.get(self._key(key))
        if value is None:
            return None
        if not isinstance(value, list) or not all(isinstance(v, int) for v in value):
            logger.warning("Ignoring malformed cache entry", key=self._key(key))
            return None
        return value

    async def put(self, key: AvailabilityCacheKey, result: Sequence[int]) -> None:
        stored = await self.client.set(
            self._key(key), list(result), expire=self.ttl_seconds or None
        )
        if not stored:
            logger.warning("Availability cache write failed", key=self._key(key))

    async def invalidate(self, predicate: Optional[KeyPredicate] = None) -> int:
        keys = await self.client.scan_keys(f"{self.prefix}:*")
        if predicate is not None:
            matching = []
            for raw in keys:
                parsed = self._parse_key(raw)
                if parsed is not None and predicate(parsed):
                    matching.append(raw)
            keys = matching
        removed = await self.client.delete(*keys)
        logger.info("Availability cache invalidated", removed=removed, full=predicate is None)
        return removed
