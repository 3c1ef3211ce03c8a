"""Read-only continuity queries for presentation layers."""

from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional

from ..core.project import ContinuityProject
from ..core.character_state import CharacterSceneState
from ..core.event import ContinuityEvent, VisibilityRecord
from .state_table import CharacterStateTable
from .healing import HealingSnapshot, healing_snapshot, current_stage


@dataclass
class ActiveEventView:
    event: ContinuityEvent
    healing: HealingSnapshot
    visibility: VisibilityRecord
    stage: str


@dataclass
class CharacterSnapshot:
    """Everything known about a character in one scene."""
    character: str
    scene_index: int
    state: Optional[CharacterSceneState]
    previous_state: Optional[CharacterSceneState]
    active_events: List[ActiveEventView] = field(default_factory=list)

    @property
    def first_appearance(self) -> bool:
        return self.previous_state is None


class ContinuityQuery:
    """Answers what is active for a character, or touches a scene."""

    def __init__(self, project: ContinuityProject):
        self.project = project
        self.states = CharacterStateTable(project)

    def active_events_at(self, scene_index: int) -> List[ContinuityEvent]:
        """Events whose [start_scene, end_scene] range contains the scene."""
        return [
            event for event in self._ordered_events()
            if event.is_active_at(scene_index)
        ]

    def active_events_for_character(self, character: str, scene_index: int) -> List[ContinuityEvent]:
        return [e for e in self.active_events_at(scene_index) if e.character == character]

    def events_touching_scene(self, scene_index: int) -> List[ContinuityEvent]:
        """Events active at the scene or holding any record for it."""
        touching = []
        for event in self._ordered_events():
            if (
                event.is_active_at(scene_index)
                or event.observation_at(scene_index) is not None
                or event.timeline_at(scene_index) is not None
                or scene_index in event.visibility
            ):
                touching.append(event)
        return touching

    def find_previous_state(self, character: str, scene_index: int) -> Optional[CharacterSceneState]:
        return self.states.find_previous_state(character, scene_index)

    def character_snapshot(self, character: str, scene_index: int) -> CharacterSnapshot:
        """State, previous state and active events of a character at a scene."""
        snapshot = CharacterSnapshot(
            character=character,
            scene_index=scene_index,
            state=self.states.get_state(character, scene_index),
            previous_state=self.states.find_previous_state(character, scene_index),
        )
        for event in self.active_events_for_character(character, scene_index):
            snapshot.active_events.append(
                ActiveEventView(
                    event=event,
                    healing=healing_snapshot(event, scene_index),
                    visibility=event.visibility_at(scene_index),
                    stage=current_stage(event, scene_index),
                )
            )
        return snapshot

    def character_timeline(self, character: str) -> List[Dict[str, Any]]:
        """One row per scene the character is cast in."""
        rows = []
        for scene_index in self.project.scenes.scenes_with(character):
            scene = self.project.scenes.get(scene_index)
            state = self.states.get_state(character, scene_index)
            rows.append({
                "scene_index": scene_index,
                "scene_number": scene.number,
                "story_day": scene.story_day,
                "heading": scene.heading,
                "change_status": state.change_status.value if state else None,
                "events": [e.id for e in self.active_events_for_character(character, scene_index)],
            })
        return rows

    def _ordered_events(self) -> List[ContinuityEvent]:
        return sorted(self.project.events.values(), key=lambda e: (e.start_scene, e.created_at))
