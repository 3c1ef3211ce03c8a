"""Core domain models for ContinuityCraft."""

from .scene import Scene, SceneStore
from .character_state import CharacterSceneState, ChangeStatus, Department
from .event import (
    ContinuityEvent,
    EventCategory,
    EventStatus,
    Observation,
    TimelineEntry,
    TimelineSource,
    VisibilityRecord,
    VisibilityStatus,
)
from .changes import Change, ChangeKind, ChangeNotifier
from .project import ContinuityProject
from .errors import (
    ContinuityError,
    NoPriorAppearance,
    InvalidSceneRange,
    InvalidEndScene,
    ProgressionLengthMismatch,
    ProgressionParseError,
    EventNotFound,
    CharacterNotFound,
)

__all__ = [
    "Scene",
    "SceneStore",
    "CharacterSceneState",
    "ChangeStatus",
    "Department",
    "ContinuityEvent",
    "EventCategory",
    "EventStatus",
    "Observation",
    "TimelineEntry",
    "TimelineSource",
    "VisibilityRecord",
    "VisibilityStatus",
    "Change",
    "ChangeKind",
    "ChangeNotifier",
    "ContinuityProject",
    "ContinuityError",
    "NoPriorAppearance",
    "InvalidSceneRange",
    "InvalidEndScene",
    "ProgressionLengthMismatch",
    "ProgressionParseError",
    "EventNotFound",
    "CharacterNotFound",
]
