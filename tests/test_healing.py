"""Tests for healing progress and progression application."""

import pytest

from continuitycraft.core import (
    ChangeStatus,
    InvalidSceneRange,
    ProgressionLengthMismatch,
    SceneStore,
    TimelineSource,
)
from continuitycraft.editor import (
    apply_progression,
    basic_progression,
    current_stage,
    healing_progress,
    healing_snapshot,
)


def test_healing_progress_bounds(tracker):
    """0% at the start scene, 100% after healing_days scenes, never decreasing."""
    event = tracker.create_event("ANNA", "injury", 2, "cut on arm")
    assert healing_progress(event, event.start_scene) == 0
    assert healing_progress(event, event.start_scene + event.healing_days) == 100

    values = [healing_progress(event, event.start_scene + i) for i in range(event.healing_days + 3)]
    assert values == sorted(values)
    assert max(values) == 100


def test_healing_progress_scenario(tracker):
    """ANNA injured at scene 2 with four healing days is 75% healed at scene 5."""
    event = tracker.create_event("ANNA", "injury", 2, "cut on arm", healing_days=4)
    assert healing_progress(event, 5) == 75
    assert healing_progress(event, 1) == 0


def test_healing_and_lifecycle_are_independent(tracker):
    """A healed but unresolved event is still active in its lifecycle."""
    event = tracker.create_event("ANNA", "injury", 2, "cut on arm", healing_days=2)
    snapshot = healing_snapshot(event, 6)
    assert snapshot.percent == 100
    assert not snapshot.healing_active
    assert snapshot.lifecycle_active

    tracker.end_event(event.id, 3)
    snapshot = healing_snapshot(event, 3)
    assert snapshot.healing_active
    assert snapshot.lifecycle_active
    assert not healing_snapshot(event, 5).lifecycle_active


def test_apply_progression_length_mismatch(project, tracker):
    """Three stages for a four-scene event are rejected with nothing written."""
    event = tracker.create_event("ANNA", "injury", 2, "cut on arm")
    tracker.end_event(event.id, 5)

    with pytest.raises(ProgressionLengthMismatch):
        apply_progression(project, event.id, ["fresh", "healing", "scar"])

    assert all(
        not state.changes
        for states in project.character_states.values()
        for state in states.values()
    )
    assert event.progression == []


def test_apply_progression_requires_fixed_range(project, tracker):
    """Ongoing events cannot take a progression."""
    event = tracker.create_event("ANNA", "injury", 2, "cut on arm")
    with pytest.raises(ProgressionLengthMismatch):
        apply_progression(project, event.id, ["fresh"])


def test_apply_progression_writes_notes(project, table, tracker):
    """Each cast scene in range gets a tagged note; uncast scenes are skipped."""
    event = tracker.create_event("ANNA", "injury", 2, "cut on arm")
    tracker.end_event(event.id, 5)

    added = apply_progression(project, event.id, ["fresh cut", "scabbing", "off screen", "faint scar"])
    assert added == 3
    assert table.get_state("ANNA", 2).change_notes() == ["[injury] fresh cut"]
    assert table.get_state("ANNA", 3).change_notes() == ["[injury] scabbing"]
    assert table.get_state("ANNA", 5).change_notes() == ["[injury] faint scar"]
    assert table.get_state("ANNA", 5).change_status == ChangeStatus.HAS_CHANGES
    assert "ANNA" not in project.character_states.get(4, {})
    assert event.progression[1] == "scabbing"


def test_apply_progression_is_idempotent(project, table, tracker):
    """Applying the same stages twice gives the same change log as once."""
    event = tracker.create_event("ANNA", "injury", 2, "cut on arm")
    tracker.end_event(event.id, 3)
    table.update_field("ANNA", 3, "changes", "[wardrobe] sleeve rolled up")

    stages = ["fresh cut", "scabbing"]
    apply_progression(project, event.id, stages)
    first = {i: table.get_state("ANNA", i).changes for i in (2, 3)}
    assert apply_progression(project, event.id, stages) == 0
    second = {i: table.get_state("ANNA", i).changes for i in (2, 3)}

    assert first == second
    assert second[3] == "[wardrobe] sleeve rolled up\n[injury] scabbing"


def test_apply_progression_keeps_logged_timeline(project, tracker):
    """Generated stages fill the timeline but never replace logged observations."""
    event = tracker.create_event("ANNA", "injury", 2, "cut on arm")
    tracker.end_event(event.id, 3, "stitched")
    apply_progression(project, event.id, ["fresh cut", "healing"])

    assert event.timeline_at(2).state == "cut on arm"
    assert event.timeline_at(3).state == "stitched"
    assert event.timeline_at(3).source == TimelineSource.LOGGED


def test_basic_progression_stages(tracker):
    """The non-AI fallback covers the range from early to late."""
    event = tracker.create_event("ANNA", "injury", 2, "cut on arm")
    tracker.end_event(event.id, 6)
    stages = basic_progression(event)
    assert stages == [
        "injury - early stage",
        "injury - developing stage",
        "injury - progressing stage",
        "injury - late stage",
        "injury - late stage",
    ]


def test_current_stage(project, tracker):
    """Stages come from the cached progression, else the description."""
    event = tracker.create_event("ANNA", "injury", 2, "cut on arm")
    assert current_stage(event, 3) == "cut on arm"
    tracker.end_event(event.id, 3)
    apply_progression(project, event.id, ["fresh cut", "healing"])
    assert current_stage(event, 3) == "healing"
    assert current_stage(event, 6) == "cut on arm"


def test_apply_progression_rejects_range_past_scene_list(project, tracker):
    """An event left pointing past a shortened scene list is refused before any write."""
    event = tracker.create_event("ANNA", "injury", 2, "cut on arm")
    tracker.end_event(event.id, 6)
    project.replace_scenes(SceneStore(list(project.scenes)[:4]))

    with pytest.raises(InvalidSceneRange):
        apply_progression(project, event.id, ["a", "b", "c", "d", "e"])

    assert project.character_states == {}
    assert event.progression == []
    assert event.timeline_at(3) is None
