"""Change descriptors emitted by every mutating engine operation."""

import logging
from enum import Enum
from typing import Callable, List, Optional
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class ChangeKind(Enum):
    SCENE_UPDATED = "scene_updated"
    STATE_UPDATED = "state_updated"
    STATE_CLEARED = "state_cleared"
    EVENT_CREATED = "event_created"
    EVENT_UPDATED = "event_updated"
    EVENT_ENDED = "event_ended"
    EVENT_REOPENED = "event_reopened"
    EVENT_DELETED = "event_deleted"
    OBSERVATION_RECORDED = "observation_recorded"
    VISIBILITY_UPDATED = "visibility_updated"
    PRESENCE_RECOMPUTED = "presence_recomputed"
    PROGRESSION_APPLIED = "progression_applied"


@dataclass(frozen=True)
class Change:
    """What an operation changed, for subscribers to refresh or persist."""
    kind: ChangeKind
    scene: Optional[int] = None
    character: Optional[str] = None
    event_id: Optional[str] = None


Subscriber = Callable[[Change], None]


class ChangeNotifier:
    """Fan-out of change descriptors to subscribers.

    Presentation layers and the autosaver subscribe here instead of being
    called from engine code.
    """

    def __init__(self):
        self._subscribers: List[Subscriber] = []

    def subscribe(self, subscriber: Subscriber) -> None:
        if subscriber not in self._subscribers:
            self._subscribers.append(subscriber)

    def unsubscribe(self, subscriber: Subscriber) -> None:
        if subscriber in self._subscribers:
            self._subscribers.remove(subscriber)

    def emit(self, change: Change) -> Change:
        logger.debug(f"Change emitted: {change}")
        for subscriber in list(self._subscribers):
            subscriber(change)
        return change
