"""Character state table, previous-state resolver and change-status machine."""

import logging
from typing import List, Optional

from ..core.project import ContinuityProject
from ..core.character_state import (
    CharacterSceneState,
    ChangeStatus,
    Department,
    CHANGE_FIELDS,
    EDITABLE_FIELDS,
    EXIT_FIELDS,
)
from ..core.changes import Change, ChangeKind
from ..core.errors import CharacterNotFound, NoPriorAppearance

logger = logging.getLogger(__name__)


class CharacterStateTable:
    """Reads and edits per (scene, character) appearance records.

    Records are created lazily on the first edit. A record whose character
    has been removed from the scene's cast is orphaned: it stays in storage
    but no lookup returns it.
    """

    def __init__(self, project: ContinuityProject):
        self.project = project

    def get_state(self, character: str, scene_index: int) -> Optional[CharacterSceneState]:
        """Get the recorded state, or None if nothing is recorded or the character left the cast."""
        scene = self.project.scenes.get(scene_index)
        if not scene.has_character(character):
            return None
        return self.project.character_states.get(scene_index, {}).get(character)

    def states_for_character(self, character: str) -> List[CharacterSceneState]:
        """All surfaced states of a character, in scene order."""
        states = []
        for scene_index in self.project.scenes.scenes_with(character):
            state = self.project.character_states.get(scene_index, {}).get(character)
            if state is not None:
                states.append(state)
        return states

    def find_previous_state(self, character: str, scene_index: int) -> Optional[CharacterSceneState]:
        """Nearest earlier scene where the character is cast and has a recorded state."""
        self.project.scenes.validate_index(scene_index)
        for i in range(scene_index - 1, -1, -1):
            if not self.project.scenes.in_cast(character, i):
                continue
            state = self.project.character_states.get(i, {}).get(character)
            if state is not None:
                return state
        return None

    def copy_forward(self, character: str, scene_index: int) -> CharacterSceneState:
        """Set this scene's enter fields from the character's previous state.

        Each department is carried over as exit, else enter, else the legacy
        single-value field, else empty.
        """
        self._require_cast(character, scene_index)
        previous = self.find_previous_state(character, scene_index)
        if previous is None:
            raise NoPriorAppearance(character, scene_index)

        state = self._ensure_state(character, scene_index)
        for dept in Department:
            value = previous.carry_value(dept)
            setattr(state, dept.enter_field, value)
            if state.change_status == ChangeStatus.NO_CHANGE:
                setattr(state, dept.exit_field, value)

        logger.info(f"Copied {character} forward from scene index {previous.scene_index} to {scene_index}")
        self._emit(ChangeKind.STATE_UPDATED, character, scene_index)
        return state

    def set_no_change(self, character: str, scene_index: int) -> CharacterSceneState:
        """Mark the scene as unchanged: exits mirror enters and change fields are cleared."""
        state = self._ensure_state(character, scene_index)
        state.change_status = ChangeStatus.NO_CHANGE
        for dept in Department:
            setattr(state, dept.exit_field, state.enter(dept))
        for name in CHANGE_FIELDS:
            setattr(state, name, "")
        self._emit(ChangeKind.STATE_UPDATED, character, scene_index)
        return state

    def mark_has_changes(self, character: str, scene_index: int) -> CharacterSceneState:
        """Mark the scene as changing. Exit fields are left for the user to author."""
        state = self._ensure_state(character, scene_index)
        state.change_status = ChangeStatus.HAS_CHANGES
        self._emit(ChangeKind.STATE_UPDATED, character, scene_index)
        return state

    def update_field(self, character: str, scene_index: int, field_name: str, value: str) -> CharacterSceneState:
        """Set one enter, change or exit field."""
        if field_name not in EDITABLE_FIELDS:
            raise ValueError(f"Unknown character state field: {field_name}")
        value = value or ""
        state = self._ensure_state(character, scene_index)
        setattr(state, field_name, value)

        if state.change_status == ChangeStatus.NO_CHANGE:
            if field_name in CHANGE_FIELDS and value:
                state.change_status = ChangeStatus.HAS_CHANGES
            elif field_name in EXIT_FIELDS:
                dept = Department(field_name[len("exit_"):])
                if value != state.enter(dept):
                    state.change_status = ChangeStatus.HAS_CHANGES
            elif field_name.startswith("enter_"):
                dept = Department(field_name[len("enter_"):])
                setattr(state, dept.exit_field, value)

        self._emit(ChangeKind.STATE_UPDATED, character, scene_index)
        return state

    def append_change_note(self, character: str, scene_index: int, note: str) -> bool:
        """Append a line to the scene's change log unless it is already there."""
        state = self._ensure_state(character, scene_index)
        added = state.append_change_note(note)
        if added:
            self._emit(ChangeKind.STATE_UPDATED, character, scene_index)
        return added

    def clear_state(self, character: str, scene_index: int) -> None:
        """Delete a recorded state."""
        self.project.scenes.validate_index(scene_index)
        states = self.project.character_states.get(scene_index, {})
        if character not in states:
            raise CharacterNotFound(character, scene_index)
        del states[character]
        if not states:
            self.project.character_states.pop(scene_index, None)
        self._emit(ChangeKind.STATE_CLEARED, character, scene_index)

    def _require_cast(self, character: str, scene_index: int) -> None:
        if not self.project.scenes.get(scene_index).has_character(character):
            raise CharacterNotFound(character, scene_index)

    def _ensure_state(self, character: str, scene_index: int) -> CharacterSceneState:
        self._require_cast(character, scene_index)
        states = self.project.character_states.setdefault(scene_index, {})
        if character not in states:
            states[character] = CharacterSceneState(scene_index=scene_index, character=character)
        return states[character]

    def _emit(self, kind: ChangeKind, character: str, scene_index: int) -> None:
        self.project.touch()
        self.project.notifier.emit(Change(kind=kind, scene=scene_index, character=character))
