"""Healing progress and progression application for continuity events."""

import logging
from dataclasses import dataclass
from typing import List

from ..core.project import ContinuityProject
from ..core.event import ContinuityEvent
from ..core.changes import Change, ChangeKind
from ..core.errors import ProgressionLengthMismatch
from .state_table import CharacterStateTable
from .continuity_tracker import ContinuityTracker

logger = logging.getLogger(__name__)

BASIC_STAGES = [
    (25.0, "early"),
    (50.0, "developing"),
    (75.0, "progressing"),
]


@dataclass(frozen=True)
class HealingSnapshot:
    """Both continuity signals for an event at one scene.

    ``healing_active`` follows the numeric healing model, ``lifecycle_active``
    follows the explicit start/end scenes. They are independent and may
    disagree.
    """
    percent: float
    healing_active: bool
    lifecycle_active: bool


def healing_progress(event: ContinuityEvent, scene_index: int) -> float:
    """Linear healing percentage, 0 at the start scene and 100 after ``healing_days`` scenes."""
    elapsed = scene_index - event.start_scene
    percent = elapsed * 100.0 / event.healing_days
    return max(0.0, min(100.0, percent))


def healing_snapshot(event: ContinuityEvent, scene_index: int) -> HealingSnapshot:
    percent = healing_progress(event, scene_index)
    return HealingSnapshot(
        percent=percent,
        healing_active=scene_index >= event.start_scene and percent < 100.0,
        lifecycle_active=event.is_active_at(scene_index),
    )


def basic_progression(event: ContinuityEvent) -> List[str]:
    """Stage labels for every scene of a fixed range, without AI."""
    span = event.scene_span
    if span is None:
        raise ProgressionLengthMismatch(event.id, None, 0)

    stages = []
    for i in range(span):
        percentage = (i / (span - 1)) * 100 if span > 1 else 0.0
        stage = "late"
        for limit, label in BASIC_STAGES:
            if percentage < limit:
                stage = label
                break
        stages.append(f"{event.category_label} - {stage} stage")
    return stages


def current_stage(event: ContinuityEvent, scene_index: int) -> str:
    """The cached progression stage for a scene, else the event description."""
    offset = scene_index - event.start_scene
    if event.progression and 0 <= offset < len(event.progression):
        return event.progression[offset]
    return event.description


def apply_progression(project: ContinuityProject, event_id: str, stages: List[str]) -> int:
    """Write one ``[category] stage`` note per scene of the event's range.

    The stage count must equal the event's scene span. Notes already present
    in a scene's change log are not added again, so re-applying the same
    stages is harmless. Scenes where the character is not cast get no note.
    Returns the number of notes added.
    """
    tracker = ContinuityTracker(project)
    table = CharacterStateTable(project)
    event = tracker.get_event(event_id)

    span = event.scene_span
    if span is None or len(stages) != span:
        raise ProgressionLengthMismatch(event.id, span, len(stages))
    project.scenes.validate_index(event.start_scene)
    project.scenes.validate_index(event.end_scene)

    stages = [str(stage).strip() for stage in stages]
    added = 0
    for offset, stage in enumerate(stages):
        scene_index = event.start_scene + offset
        if not stage or not project.scenes.in_cast(event.character, scene_index):
            continue
        note = f"[{event.category_label}] {stage}"
        if table.append_change_note(event.character, scene_index, note):
            added += 1

    event.progression = stages
    tracker.merge_generated_timeline(
        event.id,
        {event.start_scene + offset: stage for offset, stage in enumerate(stages) if stage},
    )

    logger.info(f"Applied progression to event {event.id}: {added} new notes")
    project.touch()
    project.notifier.emit(
        Change(kind=ChangeKind.PROGRESSION_APPLIED, character=event.character, event_id=event.id)
    )
    return added
