"""Project state for ContinuityCraft.

A ``ContinuityProject`` owns the whole continuity state tree: the scene
store, the character state table and the event store. Editors in
``continuitycraft.editor`` receive the project explicitly and mutate it
through their operations.
"""

from typing import Dict, Any, Optional, List
from datetime import datetime

from .scene import Scene, SceneStore
from .character_state import CharacterSceneState
from .event import ContinuityEvent, DEFAULT_HEALING_DAYS
from .changes import Change, ChangeKind, ChangeNotifier


class ContinuityProject:
    """Represents a production's continuity breakdown."""

    def __init__(
        self,
        title: str = "",
        scenes: Optional[SceneStore] = None,
        metadata: Optional[Dict[str, Any]] = None,
        default_healing_days: int = DEFAULT_HEALING_DAYS,
    ):
        self.title = title
        self.scenes = scenes if scenes is not None else SceneStore()
        self.metadata = metadata or {}
        self.default_healing_days = default_healing_days

        # scene index -> character name -> state
        self.character_states: Dict[int, Dict[str, CharacterSceneState]] = {}
        self.events: Dict[str, ContinuityEvent] = {}

        self.notifier = ChangeNotifier()
        self.created_at = datetime.now()
        self.modified_at = datetime.now()

    def touch(self) -> None:
        self.modified_at = datetime.now()

    def set_scene_metadata(self, scene_index: int, **fields: Any) -> Scene:
        """Edit scene metadata and notify subscribers."""
        scene = self.scenes.set_metadata(scene_index, **fields)
        self._scene_changed(scene_index)
        return scene

    def add_to_cast(self, scene_index: int, character_name: str) -> None:
        """Add a character to a scene's cast.

        A record left behind when the character was removed earlier is
        discarded, so the scene starts from a blank state.
        """
        scene = self.scenes.get(scene_index)
        if scene.has_character(character_name):
            return
        states = self.character_states.get(scene_index, {})
        if states.pop(character_name, None) is not None and not states:
            self.character_states.pop(scene_index, None)
        scene.add_character(character_name)
        self._scene_changed(scene_index, character_name)

    def remove_from_cast(self, scene_index: int, character_name: str) -> None:
        """Remove a character from a scene's cast. Its record is kept but no longer surfaced."""
        self.scenes.remove_from_cast(scene_index, character_name)
        self._scene_changed(scene_index, character_name)

    def replace_scenes(self, scenes: SceneStore) -> None:
        """Swap in a freshly imported scene list."""
        self.scenes = scenes
        self._scene_changed()

    def _scene_changed(self, scene_index: Optional[int] = None, character: Optional[str] = None) -> None:
        self.touch()
        self.notifier.emit(Change(kind=ChangeKind.SCENE_UPDATED, scene=scene_index, character=character))

    def get_statistics(self) -> Dict[str, Any]:
        """Summary counts for the project."""
        recorded = sum(len(states) for states in self.character_states.values())
        ongoing = [e for e in self.events.values() if e.end_scene is None]
        return {
            "total_scenes": self.scenes.scene_count,
            "total_characters": len(self.scenes.all_characters()),
            "recorded_states": recorded,
            "total_events": len(self.events),
            "ongoing_events": len(ongoing),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert project to dictionary for serialization."""
        states: List[Dict[str, Any]] = []
        for scene_index in sorted(self.character_states):
            for name in sorted(self.character_states[scene_index]):
                states.append(self.character_states[scene_index][name].to_dict())

        return {
            "title": self.title,
            "metadata": self.metadata,
            "default_healing_days": self.default_healing_days,
            "scenes": self.scenes.to_list(),
            "character_states": states,
            "events": [event.to_dict() for event in self.events.values()],
            "created_at": self.created_at.isoformat(),
            "modified_at": self.modified_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContinuityProject":
        """Create project from dictionary."""
        project = cls(
            title=data.get("title", ""),
            scenes=SceneStore.from_list(data.get("scenes", [])),
            metadata=data.get("metadata", {}),
            default_healing_days=data.get("default_healing_days", DEFAULT_HEALING_DAYS),
        )

        for state_data in data.get("character_states", []):
            state = CharacterSceneState.from_dict(state_data)
            project.character_states.setdefault(state.scene_index, {})[state.character] = state

        for event_data in data.get("events", []):
            event = ContinuityEvent.from_dict(event_data)
            project.events[event.id] = event

        if "created_at" in data:
            project.created_at = datetime.fromisoformat(data["created_at"])
        if "modified_at" in data:
            project.modified_at = datetime.fromisoformat(data["modified_at"])

        return project

    def __str__(self) -> str:
        return f"{self.title or 'Untitled'} ({self.scenes.scene_count} scenes, {len(self.events)} events)"
