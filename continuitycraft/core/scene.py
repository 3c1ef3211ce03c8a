"""Scene list and cast membership for ContinuityCraft."""

from typing import Dict, List, Any, Optional, Iterator
from dataclasses import dataclass, field

from .errors import InvalidSceneRange


@dataclass
class Scene:
    """Represents a single scene of the script."""

    index: int
    number: str = ""
    heading: str = ""
    story_day: Optional[str] = None
    time_of_day: Optional[str] = None
    is_flashback: bool = False
    is_dream: bool = False
    cast: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Default the display number and drop duplicate cast entries."""
        if not self.number:
            self.number = str(self.index + 1)
        seen = []
        for name in self.cast:
            if name not in seen:
                seen.append(name)
        self.cast = seen

    def has_character(self, character_name: str) -> bool:
        """Check whether a character is in this scene's cast."""
        return character_name in self.cast

    def add_character(self, character_name: str) -> None:
        """Add a character to this scene."""
        if character_name not in self.cast:
            self.cast.append(character_name)

    def remove_character(self, character_name: str) -> None:
        """Remove a character from this scene."""
        if character_name in self.cast:
            self.cast.remove(character_name)

    def to_dict(self) -> Dict[str, Any]:
        """Convert scene to dictionary for serialization."""
        return {
            "index": self.index,
            "number": self.number,
            "heading": self.heading,
            "story_day": self.story_day,
            "time_of_day": self.time_of_day,
            "is_flashback": self.is_flashback,
            "is_dream": self.is_dream,
            "cast": list(self.cast),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], index: Optional[int] = None) -> "Scene":
        """Create scene from dictionary."""
        return cls(
            index=index if index is not None else data.get("index", 0),
            number=str(data.get("number", "") or ""),
            heading=data.get("heading", ""),
            story_day=data.get("story_day", data.get("storyDay")),
            time_of_day=data.get("time_of_day", data.get("timeOfDay")),
            is_flashback=bool(data.get("is_flashback", data.get("isFlashback", False))),
            is_dream=bool(data.get("is_dream", data.get("isDream", False))),
            cast=list(data.get("cast", [])),
        )

    def __str__(self) -> str:
        """String representation of scene."""
        return f"Scene {self.number}: {self.heading}"


class SceneStore:
    """Ordered, index-stable list of scenes.

    The store is filled by the script import collaborator. The engine reads
    it, and only metadata fields may be changed through ``set_metadata``.
    Edits made through ``ContinuityProject`` also notify subscribers.
    """

    EDITABLE_FIELDS = ("number", "heading", "story_day", "time_of_day", "is_flashback", "is_dream")

    def __init__(self, scenes: Optional[List[Scene]] = None):
        self._scenes: List[Scene] = []
        for scene in scenes or []:
            self.append(scene)

    def __len__(self) -> int:
        return len(self._scenes)

    def __iter__(self) -> Iterator[Scene]:
        return iter(self._scenes)

    @property
    def scene_count(self) -> int:
        return len(self._scenes)

    def append(self, scene: Scene) -> Scene:
        """Append a scene, re-indexing it to its position."""
        scene.index = len(self._scenes)
        self._scenes.append(scene)
        return scene

    def validate_index(self, scene_index: int) -> None:
        """Raise InvalidSceneRange unless the index points at a scene."""
        if not isinstance(scene_index, int) or isinstance(scene_index, bool):
            raise InvalidSceneRange(scene_index, len(self._scenes))
        if scene_index < 0 or scene_index >= len(self._scenes):
            raise InvalidSceneRange(scene_index, len(self._scenes))

    def get(self, scene_index: int) -> Scene:
        """Get a scene by index."""
        self.validate_index(scene_index)
        return self._scenes[scene_index]

    def in_cast(self, character_name: str, scene_index: int) -> bool:
        """Check cast membership without raising for out-of-range indices."""
        if scene_index < 0 or scene_index >= len(self._scenes):
            return False
        return self._scenes[scene_index].has_character(character_name)

    def scenes_with(self, character_name: str, start: int = 0, end: Optional[int] = None) -> List[int]:
        """Scene indices in [start, end] whose cast includes the character."""
        last = len(self._scenes) - 1 if end is None else min(end, len(self._scenes) - 1)
        return [
            i for i in range(max(start, 0), last + 1)
            if self._scenes[i].has_character(character_name)
        ]

    def all_characters(self) -> List[str]:
        """All character names in order of first appearance."""
        names: List[str] = []
        for scene in self._scenes:
            for name in scene.cast:
                if name not in names:
                    names.append(name)
        return names

    def set_metadata(self, scene_index: int, **fields: Any) -> Scene:
        """Update editable metadata fields of a scene."""
        scene = self.get(scene_index)
        unknown = [name for name in fields if name not in self.EDITABLE_FIELDS]
        if unknown:
            raise ValueError(f"Scene fields not editable: {', '.join(sorted(unknown))}")
        for name, value in fields.items():
            if name == "number":
                value = str(value)
            setattr(scene, name, value)
        return scene

    def add_to_cast(self, scene_index: int, character_name: str) -> None:
        """Add a character to a scene's cast."""
        self.get(scene_index).add_character(character_name)

    def remove_from_cast(self, scene_index: int, character_name: str) -> None:
        """Remove a character from a scene's cast."""
        self.get(scene_index).remove_character(character_name)

    def to_list(self) -> List[Dict[str, Any]]:
        return [scene.to_dict() for scene in self._scenes]

    @classmethod
    def from_list(cls, data: List[Dict[str, Any]]) -> "SceneStore":
        """Create a scene store from a list of scene dictionaries."""
        return cls([Scene.from_dict(item, index=i) for i, item in enumerate(data)])
