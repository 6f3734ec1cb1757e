# bo_core/common/invalidation.py
"""
Which client-side cached views go stale after a write.

The graph is declared, not inferred: each entity kind lists the kinds whose
cached views embed it. The audit view is stale after every write.
"""
from __future__ import annotations

import logging

from bo_core.common.events import CACHE_INVALIDATED, publish

logger = logging.getLogger(__name__)

INVALIDATE_HEADER = "X-Invalidate"
AUDIT_VIEW = "audit"

DEPENDENTS: dict[str, tuple[str, ...]] = {
    "category": ("item", "order"),
    "item": ("order",),
    "order": (),
    "user": (),
    "role": ("user",),
}


def stale_views(entity_kind: str) -> tuple[str, ...]:
    """
    The kind itself, everything reachable through DEPENDENTS, then `audit`.
    Order is stable and free of duplicates.
    """
    if entity_kind not in DEPENDENTS:
        raise ValueError(f"Unknown entity kind: {entity_kind}")

    seen: list[str] = []
    pending = [entity_kind]
    while pending:
        kind = pending.pop(0)
        if kind in seen:
            continue
        seen.append(kind)
        pending.extend(DEPENDENTS.get(kind, ()))

    if AUDIT_VIEW not in seen:
        seen.append(AUDIT_VIEW)
    return tuple(seen)


def invalidate(entity_kind: str) -> tuple[str, ...]:
    views = stale_views(entity_kind)
    logger.info("cache invalidated for %s: %s", entity_kind, ", ".join(views))
    publish(CACHE_INVALIDATED, {"entity": entity_kind, "views": list(views)})
    return views


def mark_stale(response, entity_kind: str):
    """Attach the stale view list to a successful mutation response."""
    response[INVALIDATE_HEADER] = ",".join(invalidate(entity_kind))
    return response
