"""Push event relevance filtering.

The push channel carries human-readable messages rather than structured
recipients. An event concerns a viewer when its title is one the surface
cares about and its message mentions the viewer's identity verbatim
(case-sensitive substring). One identity being a substring of another
(bob@x.com inside bob@x.company.com) yields a false positive; that matches
server behavior and is kept.
"""

import json
from collections.abc import Collection, Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from eventsync.config.logging_config import get_logger
from eventsync.domain.models import InboundEvent, ViewerContext

logger = get_logger(__name__)


def parse_inbound_event(payload: Any) -> InboundEvent | None:
    """Parse a raw push payload into an InboundEvent.

    Args:
        payload: Mapping, or JSON text/bytes holding an object

    Returns:
        InboundEvent, or None when the payload is not an object or has no
        string title. A missing or non-string message becomes "".
    """
    if isinstance(payload, str | bytes | bytearray):
        try:
            payload = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.debug("push_event_dropped", reason="invalid_json")
            return None

    if not isinstance(payload, Mapping):
        logger.debug("push_event_dropped", reason="not_an_object")
        return None

    title = payload.get("title")
    if not isinstance(title, str):
        logger.debug("push_event_dropped", reason="missing_title")
        return None

    message = payload.get("message")
    fields: dict[str, Any] = {
        "title": title,
        "message": message if isinstance(message, str) else "",
    }
    for alias in ("projectId", "recipientEmail"):
        value = payload.get(alias)
        if isinstance(value, str):
            fields[alias] = value

    try:
        return InboundEvent.model_validate(fields)
    except PydanticValidationError:
        logger.debug("push_event_dropped", reason="validation_failed")
        return None


def is_relevant(
    event: InboundEvent | None,
    viewer: ViewerContext,
    interested_titles: Collection[str],
) -> bool:
    """Decide whether an event concerns the viewer and should trigger a refresh.

    Relevant iff the title is in interested_titles AND the message contains
    the viewer identity as a literal substring.

    Example:
        >>> evt = InboundEvent(title="Activity join", message="alice@example.com joined X")
        >>> is_relevant(evt, ViewerContext(identity="alice@example.com"), {"Activity join"})
        True
    """
    if event is None:
        return False
    if event.title not in interested_titles:
        return False
    if not viewer.identity:
        return False
    return viewer.identity in event.message


class EventRelevanceFilter:
    """Relevance filter bound to one surface's title set."""

    def __init__(self, interested_titles: Collection[str]) -> None:
        self._interested_titles = frozenset(interested_titles)

    @property
    def interested_titles(self) -> frozenset[str]:
        return self._interested_titles

    def is_relevant(self, event: InboundEvent | None, viewer: ViewerContext) -> bool:
        return is_relevant(event, viewer, self._interested_titles)
