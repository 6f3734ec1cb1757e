# bo_core/iam/permission_cache.py
"""
Per-actor permission sets with a TTL.

One instance lives on the iam AppConfig for the life of the process
(see `get_permission_cache`). Tests build their own with a fake clock.

Entries are immutable and the map is only ever swapped or assigned key by
key, so readers never see a half-written entry and need no lock.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from bo_core.iam.constants import SUPER_PERMISSION

logger = logging.getLogger(__name__)

Loader = Callable[[Any], Iterable[str]]
Clock = Callable[[], float]


@dataclass(frozen=True)
class CacheEntry:
    permissions: frozenset[str]
    expires_at: float


class PermissionCache:
    def __init__(
        self,
        *,
        loader: Loader,
        ttl_seconds: float = 60.0,
        sweep_every: int = 10,
        clock: Clock = time.monotonic,
    ) -> None:
        self._loader = loader
        self._ttl = float(ttl_seconds)
        self._sweep_every = max(1, int(sweep_every))
        self._clock = clock

        self._entries: dict[Any, CacheEntry] = {}
        self._generation = 0
        self._misses = 0
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls) -> "PermissionCache":
        from django.conf import settings

        from bo_core.iam.selectors import load_permissions

        return cls(
            loader=load_permissions,
            ttl_seconds=getattr(settings, "PERMISSION_CACHE_TTL_SECONDS", 60),
            sweep_every=getattr(settings, "PERMISSION_CACHE_SWEEP_EVERY", 10),
        )

    def __len__(self) -> int:
        return len(self._entries)

    def permissions_for(self, actor_id) -> frozenset[str]:
        """
        Cached permission names for `actor_id`, loading on miss or expiry.
        Loader errors propagate so callers fail closed.
        """
        now = self._clock()
        entry = self._entries.get(actor_id)
        if entry is not None and now < entry.expires_at:
            return entry.permissions

        generation = self._generation
        self._on_miss(now)

        permissions = frozenset(self._loader(actor_id))
        fresh = CacheEntry(permissions=permissions, expires_at=now + self._ttl)

        with self._lock:
            # an invalidate_all() that ran during the load wins
            if self._generation == generation:
                self._entries[actor_id] = fresh
        return permissions

    def has_permission(self, actor_id, *names: str) -> bool:
        permissions = self.permissions_for(actor_id)
        if SUPER_PERMISSION in permissions:
            return True
        return any(name in permissions for name in names)

    def invalidate_all(self) -> None:
        with self._lock:
            self._generation += 1
            self._entries = {}
        logger.info("permission cache cleared")

    def _on_miss(self, now: float) -> None:
        with self._lock:
            self._misses += 1
            if self._misses % self._sweep_every:
                return
            live = {actor: e for actor, e in self._entries.items() if now < e.expires_at}
            swept = len(self._entries) - len(live)
            self._entries = live
        if swept:
            logger.debug("permission cache swept %d expired entries", swept)


def get_permission_cache() -> PermissionCache:
    from django.apps import apps

    return apps.get_app_config("iam").permission_cache


# entity kinds whose writes can change who holds which permission
ACCESS_ENTITIES = frozenset({"role", "user"})


def drop_on_access_change(payload: dict) -> None:
    """`cache.invalidated` handler: role and user writes clear every entry."""
    if payload.get("entity") in ACCESS_ENTITIES:
        get_permission_cache().invalidate_all()
