# backend/app/discovery/field_cache.py
import logging
import time
from typing import Callable, Dict, List, Optional

from app.schemas.field import AvailableField
from settings import FieldDiscoveryConfig

logger = logging.getLogger("uvicorn")

ALL_FIELDS_KEY = FieldDiscoveryConfig.ALL_FIELDS_KEY


class FieldCache:
    """
    In-process cache of normalized fields, keyed by table name plus the
    reserved ALL_FIELDS_KEY for the aggregate.

    Validity is global: one `last_update` timestamp covers every entry. The
    first write into an empty cache opens the window, a full refresh via
    `set_all` restarts it, and per-table writes never extend it.
    """

    def __init__(self, ttl_ms: int = FieldDiscoveryConfig.CACHE_TTL_MS,
                 clock: Callable[[], float] = time.time):
        self.ttl_ms = ttl_ms
        self._clock = clock
        self._entries: Dict[str, List[AvailableField]] = {}
        self._last_update_ms: float = 0

    def _now_ms(self) -> float:
        return self._clock() * 1000

    @property
    def last_update_ms(self) -> float:
        return self._last_update_ms

    def is_valid(self) -> bool:
        return self._now_ms() - self._last_update_ms < self.ttl_ms

    def get(self, key: str) -> Optional[List[AvailableField]]:
        if self.is_valid() and key in self._entries:
            return self._entries[key]
        return None

    def set(self, key: str, fields: List[AvailableField]) -> None:
        self._entries[key] = fields
        if self._last_update_ms == 0:
            self._last_update_ms = self._now_ms()

    def set_all(self, fields: List[AvailableField]) -> None:
        self._entries[ALL_FIELDS_KEY] = fields
        self._last_update_ms = self._now_ms()

    def invalidate(self) -> None:
        self._entries.clear()
        self._last_update_ms = 0
        logger.info("🧹 Field discovery cache cleared")

    def info(self) -> dict:
        age_ms = self._now_ms() - self._last_update_ms if self._last_update_ms else None
        return {
            "entries": len(self._entries),
            "keys": list(self._entries.keys()),
            "age_ms": age_ms,
            "ttl_ms": self.ttl_ms,
            "valid": self.is_valid() if self._last_update_ms else False,
        }
