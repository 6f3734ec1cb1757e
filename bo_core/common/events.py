# bo_core/common/events.py
"""
In-process event bus.

Handlers run synchronously in the publishing thread. A failing handler is
logged and skipped; it never fails the request that published the event.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

Payload = Dict[str, Any]
Handler = Callable[[Payload], None]

# {"entity": "<kind>", "views": ["<kind>", ..., "audit"]}
CACHE_INVALIDATED = "cache.invalidated"

_handlers: Dict[str, List[Handler]] = defaultdict(list)


def subscribe(event_name: str) -> Callable[[Handler], Handler]:
    def _register(fn: Handler) -> Handler:
        if fn not in _handlers[event_name]:
            _handlers[event_name].append(fn)
        return fn
    return _register


def unsubscribe(event_name: str, fn: Handler) -> None:
    try:
        _handlers[event_name].remove(fn)
    except ValueError:
        pass


def publish(event_name: str, payload: Payload) -> int:
    """Deliver to every handler; returns how many ran without raising."""
    delivered = 0
    for fn in tuple(_handlers.get(event_name, ())):
        try:
            fn(payload)
        except Exception:
            logger.exception("Handler %r failed for %s", fn, event_name)
            continue
        delivered += 1
    return delivered
