"""
ContinuityCraft - scene-by-scene hair, makeup and wardrobe continuity tracking.
"""

__version__ = "1.0.0"
__author__ = "ContinuityCraft Team"

from .core import ContinuityProject, Scene, SceneStore, CharacterSceneState, ContinuityEvent
from .editor import CharacterStateTable, ContinuityTracker, ContinuityQuery
from .ai import ClaudeClient, ProgressionGenerator
from .io import ProjectLoader, ProjectAutoSaver

__all__ = [
    "ContinuityProject",
    "Scene",
    "SceneStore",
    "CharacterSceneState",
    "ContinuityEvent",
    "CharacterStateTable",
    "ContinuityTracker",
    "ContinuityQuery",
    "ClaudeClient",
    "ProgressionGenerator",
    "ProjectLoader",
    "ProjectAutoSaver",
]
