"""Continuity event lifecycle: open, observe, resolve."""

import logging
from typing import Dict, List, Optional, Union

from ..core.project import ContinuityProject
from ..core.event import (
    ContinuityEvent,
    EventCategory,
    TimelineEntry,
    TimelineSource,
    VisibilityRecord,
    VisibilityStatus,
    validate_healing_days,
)
from ..core.changes import Change, ChangeKind
from ..core.errors import CharacterNotFound, EventNotFound, InvalidEndScene

logger = logging.getLogger(__name__)


class ContinuityTracker:
    """Tracks continuity events across scenes.

    An event is active until ``end_event`` gives it an end scene, which marks
    it completed. Observations are logged by the user and always override
    generated timeline entries at the same scene.
    """

    def __init__(self, project: ContinuityProject):
        self.project = project

    def get_event(self, event_id: str) -> ContinuityEvent:
        """Get an event by id."""
        event = self.project.events.get(event_id)
        if event is None:
            raise EventNotFound(event_id)
        return event

    def list_events(self) -> List[ContinuityEvent]:
        """All events ordered by start scene."""
        return sorted(self.project.events.values(), key=lambda e: (e.start_scene, e.created_at))

    def events_for_character(self, character: str) -> List[ContinuityEvent]:
        """All events for a character ordered by start scene."""
        return [e for e in self.list_events() if e.character == character]

    def create_event(
        self,
        character: str,
        category: Union[str, EventCategory],
        start_scene: int,
        description: str,
        name: str = "",
        healing_days: Optional[int] = None,
    ) -> ContinuityEvent:
        """Open a new event starting at ``start_scene``."""
        self.project.scenes.validate_index(start_scene)
        if not self.project.scenes.scenes_with(character):
            raise CharacterNotFound(character)
        if healing_days is None:
            healing_days = self.project.default_healing_days
        validate_healing_days(healing_days)

        if isinstance(category, EventCategory):
            parsed, label = category, category.value
        else:
            parsed, label = EventCategory.parse(category), (category or "").strip() or "other"

        event = ContinuityEvent(
            character=character,
            category=parsed,
            category_label=label,
            start_scene=start_scene,
            name=name.strip(),
            description=description,
            healing_days=healing_days,
        )
        event.upsert_observation(start_scene, description)
        event.upsert_timeline(TimelineEntry(scene=start_scene, state=description))
        self._scan_presence(event)

        self.project.events[event.id] = event
        logger.info(f"Created {label} event {event.id} for {character} at scene index {start_scene}")
        self._emit(ChangeKind.EVENT_CREATED, event, start_scene)
        return event

    def update_event(
        self,
        event_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        category: Optional[Union[str, EventCategory]] = None,
        healing_days: Optional[int] = None,
    ) -> ContinuityEvent:
        """Edit event metadata."""
        event = self.get_event(event_id)
        if healing_days is not None:
            validate_healing_days(healing_days)

        if name is not None:
            event.name = name.strip()
        if description is not None:
            event.description = description
        if category is not None:
            if isinstance(category, EventCategory):
                event.category, event.category_label = category, category.value
            else:
                event.category, event.category_label = EventCategory.parse(category), category.strip()
        if healing_days is not None:
            event.healing_days = healing_days

        self._emit(ChangeKind.EVENT_UPDATED, event)
        return event

    def record_observation(self, event_id: str, scene: int, description: str) -> ContinuityEvent:
        """Log what the event looks like in a scene. Empty text removes the entry."""
        event = self.get_event(event_id)
        self.project.scenes.validate_index(scene)

        description = (description or "").strip()
        if description:
            event.upsert_observation(scene, description)
            event.upsert_timeline(TimelineEntry(scene=scene, state=description, source=TimelineSource.LOGGED))
        else:
            event.remove_observation(scene)
            event.remove_logged_timeline(scene)

        self._emit(ChangeKind.OBSERVATION_RECORDED, event, scene)
        return event

    def end_event(self, event_id: str, scene: int, final_description: Optional[str] = None) -> ContinuityEvent:
        """Resolve an event in a scene after the one it started in."""
        event = self.get_event(event_id)
        self.project.scenes.validate_index(scene)
        if scene <= event.start_scene:
            raise InvalidEndScene(event_id, event.start_scene, scene)

        event.end_scene = scene
        self._scan_presence(event)
        if final_description:
            self.record_observation(event_id, scene, final_description)

        logger.info(f"Ended event {event_id} at scene index {scene}")
        self._emit(ChangeKind.EVENT_ENDED, event, scene)
        return event

    def reopen_event(self, event_id: str) -> ContinuityEvent:
        """Clear the end scene so the event is ongoing again."""
        event = self.get_event(event_id)
        event.end_scene = None
        self._scan_presence(event)
        self._emit(ChangeKind.EVENT_REOPENED, event)
        return event

    def set_visibility(
        self,
        event_id: str,
        scene: int,
        hidden: bool,
        coverage: Optional[str] = None,
        note: Optional[str] = None,
    ) -> VisibilityRecord:
        """Record whether the event shows on camera in a scene."""
        event = self.get_event(event_id)
        self.project.scenes.validate_index(scene)

        if hidden:
            record = VisibilityRecord(
                scene=scene,
                status=VisibilityStatus.HIDDEN,
                coverage=coverage or None,
                note=note or None,
            )
        else:
            record = VisibilityRecord(scene=scene)
        event.visibility[scene] = record

        self._emit(ChangeKind.VISIBILITY_UPDATED, event, scene)
        return record

    def recompute_actor_presence(self, event_id: str) -> List[int]:
        """Rescan cast membership over the event's range.

        Returns the scenes newly added to the presence set. Visibility records
        outside the new range are kept.
        """
        event = self.get_event(event_id)
        added = self._scan_presence(event)
        self._emit(ChangeKind.PRESENCE_RECOMPUTED, event)
        return added

    def merge_generated_timeline(self, event_id: str, entries: Dict[int, str]) -> int:
        """Add generated timeline states, leaving any logged entry in place."""
        event = self.get_event(event_id)
        for scene in entries:
            self.project.scenes.validate_index(scene)

        merged = 0
        for scene in sorted(entries):
            entry = TimelineEntry(scene=scene, state=entries[scene], source=TimelineSource.GENERATED)
            if event.upsert_timeline(entry):
                merged += 1

        if merged:
            self._emit(ChangeKind.EVENT_UPDATED, event)
        return merged

    def delete_event(self, event_id: str) -> None:
        """Permanently remove an event."""
        event = self.get_event(event_id)
        del self.project.events[event_id]
        logger.info(f"Deleted event {event_id}")
        self._emit(ChangeKind.EVENT_DELETED, event)

    def _scan_presence(self, event: ContinuityEvent) -> List[int]:
        presence = self.project.scenes.scenes_with(event.character, event.start_scene, event.end_scene)
        added = [scene for scene in presence if scene not in event.actor_presence]
        event.actor_presence = presence
        for scene in presence:
            if scene not in event.visibility:
                event.visibility[scene] = VisibilityRecord(scene=scene)
        return added

    def _emit(self, kind: ChangeKind, event: ContinuityEvent, scene: Optional[int] = None) -> None:
        self.project.touch()
        self.project.notifier.emit(
            Change(kind=kind, scene=scene, character=event.character, event_id=event.id)
        )

