"""Per-scene character appearance records."""

from enum import Enum
from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field


class Department(Enum):
    """Appearance departments tracked on entry and exit of a scene."""
    HAIR = "hair"
    MAKEUP = "makeup"
    WARDROBE = "wardrobe"
    CONDITION = "condition"

    @property
    def enter_field(self) -> str:
        return f"enter_{self.value}"

    @property
    def exit_field(self) -> str:
        return f"exit_{self.value}"

    @property
    def legacy_field(self) -> str:
        return self.value


class ChangeStatus(Enum):
    """Whether a character's appearance changes during a scene."""
    NO_CHANGE = "no-change"
    HAS_CHANGES = "has-changes"


ENTER_FIELDS = [dept.enter_field for dept in Department]
EXIT_FIELDS = [dept.exit_field for dept in Department]
CHANGE_FIELDS = [
    "change_hair",
    "change_makeup",
    "change_wardrobe",
    "change_injuries",
    "change_dirt",
    "changes",
]
EDITABLE_FIELDS = ENTER_FIELDS + CHANGE_FIELDS + EXIT_FIELDS

# Keys written by older versions of the breakdown tool.
_CAMEL_KEYS = {
    "enterHair": "enter_hair",
    "enterMakeup": "enter_makeup",
    "enterWardrobe": "enter_wardrobe",
    "enterCondition": "enter_condition",
    "changeStatus": "change_status",
    "changeHair": "change_hair",
    "changeMakeup": "change_makeup",
    "changeWardrobe": "change_wardrobe",
    "changeInjuries": "change_injuries",
    "changeDirt": "change_dirt",
    "exitHair": "exit_hair",
    "exitMakeup": "exit_makeup",
    "exitWardrobe": "exit_wardrobe",
    "exitCondition": "exit_condition",
}


@dataclass
class CharacterSceneState:
    """Appearance of one character in one scene.

    Enter fields describe the look at the top of the scene, exit fields the
    look when the character leaves it. With ``ChangeStatus.NO_CHANGE`` the
    exit fields mirror the enter fields and every change field is empty.
    With ``ChangeStatus.HAS_CHANGES`` exit fields are authored independently.

    The single-value ``hair``/``makeup``/``wardrobe``/``condition`` fields come
    from records written before the enter/exit split and are only read.
    """

    scene_index: int
    character: str
    enter_hair: str = ""
    enter_makeup: str = ""
    enter_wardrobe: str = ""
    enter_condition: str = ""
    change_status: ChangeStatus = ChangeStatus.NO_CHANGE
    change_hair: str = ""
    change_makeup: str = ""
    change_wardrobe: str = ""
    change_injuries: str = ""
    change_dirt: str = ""
    changes: str = ""
    exit_hair: str = ""
    exit_makeup: str = ""
    exit_wardrobe: str = ""
    exit_condition: str = ""
    hair: str = ""
    makeup: str = ""
    wardrobe: str = ""
    condition: str = ""

    def enter(self, department: Department) -> str:
        return getattr(self, department.enter_field)

    def exit(self, department: Department) -> str:
        return getattr(self, department.exit_field)

    def carry_value(self, department: Department) -> str:
        """Value carried into the next scene: exit, then enter, then legacy."""
        return (
            self.exit(department)
            or self.enter(department)
            or getattr(self, department.legacy_field)
            or ""
        )

    def has_change_text(self) -> bool:
        return any(getattr(self, name) for name in CHANGE_FIELDS)

    def change_notes(self) -> List[str]:
        """Lines of the free-text change log."""
        return [line for line in self.changes.split("\n") if line.strip()]

    def append_change_note(self, note: str) -> bool:
        """Append a line to the change log unless an identical line exists."""
        if note in self.change_notes():
            return False
        self.changes = f"{self.changes}\n{note}" if self.changes else note
        self.change_status = ChangeStatus.HAS_CHANGES
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Convert state to dictionary for serialization."""
        data: Dict[str, Any] = {
            "scene_index": self.scene_index,
            "character": self.character,
            "change_status": self.change_status.value,
        }
        for name in EDITABLE_FIELDS:
            data[name] = getattr(self, name)
        for dept in Department:
            legacy = getattr(self, dept.legacy_field)
            if legacy:
                data[dept.legacy_field] = legacy
        return data

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        scene_index: Optional[int] = None,
        character: Optional[str] = None,
    ) -> "CharacterSceneState":
        """Create state from dictionary, accepting legacy camelCase keys."""
        normalized = {_CAMEL_KEYS.get(key, key): value for key, value in data.items()}

        state = cls(
            scene_index=scene_index if scene_index is not None else normalized.get("scene_index", 0),
            character=character if character is not None else normalized.get("character", ""),
        )
        for name in EDITABLE_FIELDS + [dept.legacy_field for dept in Department]:
            value = normalized.get(name)
            if value:
                setattr(state, name, str(value))

        if "change_status" in normalized:
            state.change_status = ChangeStatus(normalized["change_status"])
        elif state.has_change_text():
            state.change_status = ChangeStatus.HAS_CHANGES

        return state
