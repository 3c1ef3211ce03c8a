"""Tests for the character state table and previous-state resolver."""

import pytest

from continuitycraft.core import (
    ChangeKind,
    ChangeStatus,
    CharacterNotFound,
    CharacterSceneState,
    InvalidSceneRange,
    NoPriorAppearance,
)


def test_find_previous_state_none_on_first_appearance(table):
    """A character's first cast appearance has no previous state."""
    assert table.find_previous_state("ANNA", 2) is None


def test_find_previous_state_returns_nearest(table):
    """The nearest earlier recorded scene wins over older ones."""
    table.update_field("ANNA", 2, "enter_hair", "braid")
    table.update_field("ANNA", 3, "enter_hair", "loose")

    previous = table.find_previous_state("ANNA", 5)
    assert previous.scene_index == 3
    assert previous.enter_hair == "loose"


def test_find_previous_state_skips_unrecorded_scenes(table):
    """Cast scenes without a record are skipped."""
    table.update_field("ANNA", 2, "enter_hair", "braid")
    assert table.find_previous_state("ANNA", 5).scene_index == 2


def test_find_previous_state_reflects_edits_immediately(table):
    """No stale results after an edit."""
    table.update_field("ANNA", 2, "enter_hair", "braid")
    assert table.find_previous_state("ANNA", 6).scene_index == 2
    table.update_field("ANNA", 5, "enter_hair", "cropped")
    assert table.find_previous_state("ANNA", 6).scene_index == 5


def test_find_previous_state_ignores_orphaned_records(project, table):
    """Records of characters removed from a scene's cast are not surfaced."""
    table.update_field("ANNA", 2, "enter_hair", "braid")
    table.update_field("ANNA", 3, "enter_hair", "loose")
    project.remove_from_cast(3, "ANNA")

    assert table.get_state("ANNA", 3) is None
    assert table.find_previous_state("ANNA", 5).scene_index == 2
    assert [s.scene_index for s in table.states_for_character("ANNA")] == [2]


def test_copy_forward_uses_exit_then_enter_then_legacy(project, table):
    """Each department is carried over through the fallback chain."""
    project.character_states[2] = {
        "ANNA": CharacterSceneState(
            scene_index=2,
            character="ANNA",
            exit_hair="wet",
            enter_makeup="natural",
            wardrobe="grey hoodie",
        )
    }

    state = table.copy_forward("ANNA", 3)
    assert state.enter_hair == "wet"
    assert state.enter_makeup == "natural"
    assert state.enter_wardrobe == "grey hoodie"
    assert state.enter_condition == ""


def test_copy_forward_without_history_fails_cleanly(project, table):
    """No prior appearance: error raised and nothing recorded."""
    with pytest.raises(NoPriorAppearance):
        table.copy_forward("ANNA", 2)
    assert 2 not in project.character_states


def test_copy_forward_requires_cast_membership(table):
    """A character outside the scene's cast cannot be edited there."""
    table.update_field("ANNA", 3, "enter_hair", "loose")
    with pytest.raises(CharacterNotFound):
        table.copy_forward("ANNA", 4)


def test_set_no_change_mirrors_enter_and_clears_changes(table):
    """No change: exits equal enters, every change field is empty."""
    table.update_field("ANNA", 2, "enter_hair", "braid")
    table.update_field("ANNA", 2, "enter_makeup", "bruised cheek")
    table.update_field("ANNA", 2, "change_injuries", "cut on arm")
    table.update_field("ANNA", 2, "exit_hair", "messy braid")
    table.append_change_note("ANNA", 2, "[injury] cut on arm")

    state = table.set_no_change("ANNA", 2)
    assert state.change_status == ChangeStatus.NO_CHANGE
    assert state.exit_hair == state.enter_hair == "braid"
    assert state.exit_makeup == "bruised cheek"
    assert state.exit_wardrobe == state.enter_wardrobe
    assert state.exit_condition == state.enter_condition
    assert not state.has_change_text()


def test_mark_has_changes_keeps_exit_fields(table):
    """Exit fields are not derived when changes are marked."""
    table.update_field("ANNA", 2, "enter_hair", "braid")
    state = table.mark_has_changes("ANNA", 2)
    assert state.change_status == ChangeStatus.HAS_CHANGES
    assert state.exit_hair == "braid"

    table.update_field("ANNA", 2, "enter_hair", "bun")
    assert state.exit_hair == "braid"


def test_update_field_keeps_no_change_invariant(table):
    """Editing enters while unchanged keeps exits in step; diverging exits flip the status."""
    state = table.update_field("ANNA", 2, "enter_wardrobe", "red coat")
    assert state.change_status == ChangeStatus.NO_CHANGE
    assert state.exit_wardrobe == "red coat"

    table.update_field("ANNA", 2, "exit_wardrobe", "no coat")
    assert state.change_status == ChangeStatus.HAS_CHANGES


def test_update_field_change_text_marks_changes(table):
    """Writing a change field moves the record to has-changes."""
    state = table.update_field("ANNA", 2, "change_dirt", "muddy knees")
    assert state.change_status == ChangeStatus.HAS_CHANGES


def test_update_field_rejects_unknown_fields(project, table):
    """Unknown field names are rejected before anything is created."""
    with pytest.raises(ValueError):
        table.update_field("ANNA", 2, "tattoo", "anchor")
    assert 2 not in project.character_states


def test_out_of_range_scene_rejected(table):
    """Scene indices outside the store raise InvalidSceneRange."""
    with pytest.raises(InvalidSceneRange):
        table.update_field("ANNA", 10, "enter_hair", "braid")
    with pytest.raises(InvalidSceneRange):
        table.find_previous_state("ANNA", 7)


def test_clear_state(table):
    """Cleared records disappear from lookups."""
    table.update_field("ANNA", 2, "enter_hair", "braid")
    table.clear_state("ANNA", 2)
    assert table.get_state("ANNA", 2) is None
    with pytest.raises(CharacterNotFound):
        table.clear_state("ANNA", 2)


def test_edits_emit_changes(table, changes):
    """Every edit emits a change descriptor."""
    table.update_field("ANNA", 2, "enter_hair", "braid")
    table.set_no_change("ANNA", 2)
    assert [c.kind for c in changes] == [ChangeKind.STATE_UPDATED, ChangeKind.STATE_UPDATED]
    assert changes[0].character == "ANNA"
    assert changes[0].scene == 2


def test_orphaned_record_discarded_when_recast(project, table, changes):
    """A character re-added to a scene starts from a blank record."""
    table.update_field("ANNA", 3, "enter_hair", "stale")
    project.remove_from_cast(3, "ANNA")
    project.add_to_cast(3, "ANNA")

    assert table.get_state("ANNA", 3) is None
    assert [c.kind for c in changes[-2:]] == [ChangeKind.SCENE_UPDATED, ChangeKind.SCENE_UPDATED]
    assert table.update_field("ANNA", 3, "enter_makeup", "clean").enter_hair == ""
