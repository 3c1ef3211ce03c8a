"""Continuity engine operations."""

from .state_table import CharacterStateTable
from .continuity_tracker import ContinuityTracker
from .healing import (
    HealingSnapshot,
    healing_progress,
    healing_snapshot,
    basic_progression,
    current_stage,
    apply_progression,
)
from .query import ContinuityQuery, CharacterSnapshot, ActiveEventView

__all__ = [
    "CharacterStateTable",
    "ContinuityTracker",
    "HealingSnapshot",
    "healing_progress",
    "healing_snapshot",
    "basic_progression",
    "current_stage",
    "apply_progression",
    "ContinuityQuery",
    "CharacterSnapshot",
    "ActiveEventView",
]
