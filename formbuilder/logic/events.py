"""Domain event constants and publisher.

Defines event type constants and a simple publish() callable used by
submission, publication and delete flows.
"""

from __future__ import annotations

from typing import Any, Dict, List
import logging
import threading

logger = logging.getLogger(__name__)

RESPONSE_SUBMITTED = "response.submitted"
RESPONSE_DELETED = "response.deleted"
FORM_PUBLISHED = "form.published"
FORM_UNPUBLISHED = "form.unpublished"
FORM_DELETED = "form.deleted"

# In-memory buffer for domain events (observation in tests and local runs)
EVENT_BUFFER: List[Dict[str, Any]] = []
_BUFFER_LIMIT = 1000
_LOCK = threading.Lock()


def publish(event_type: str, payload: Dict[str, Any]) -> None:
    """Publish a domain event.

    Events are logged for observability and kept in a bounded buffer.
    """
    logger.info("event_publish type=%s payload=%s", event_type, payload)
    with _LOCK:
        EVENT_BUFFER.append({"type": event_type, "payload": dict(payload)})
        if len(EVENT_BUFFER) > _BUFFER_LIMIT:
            del EVENT_BUFFER[: len(EVENT_BUFFER) - _BUFFER_LIMIT]


def get_buffered_events(clear: bool = True) -> List[Dict[str, Any]]:
    """Return buffered domain events; optionally clear the buffer."""
    with _LOCK:
        events = list(EVENT_BUFFER)
        if clear:
            EVENT_BUFFER.clear()
    return events


__all__ = [
    "FORM_DELETED",
    "FORM_PUBLISHED",
    "FORM_UNPUBLISHED",
    "RESPONSE_DELETED",
    "RESPONSE_SUBMITTED",
    "EVENT_BUFFER",
    "get_buffered_events",
    "publish",
]
