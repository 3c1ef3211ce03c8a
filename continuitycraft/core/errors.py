"""Error taxonomy for the continuity engine.

Every error here is local and recoverable: operations validate their input
before touching any state, so raising one of these leaves the project exactly
as it was.
"""

from typing import Optional


class ContinuityError(Exception):
    """Base class for all continuity engine errors."""


class NoPriorAppearance(ContinuityError):
    """Raised when copying forward a character that has no earlier recorded state."""

    def __init__(self, character: str, scene_index: int):
        self.character = character
        self.scene_index = scene_index
        super().__init__(
            f"No earlier scene with recorded state for {character} before scene index {scene_index}"
        )


class InvalidSceneRange(ContinuityError, ValueError):
    """Raised when a scene index falls outside the scene store."""

    def __init__(self, scene_index: int, scene_count: int):
        self.scene_index = scene_index
        self.scene_count = scene_count
        super().__init__(
            f"Scene index {scene_index} is out of range (project has {scene_count} scenes)"
        )


class InvalidEndScene(ContinuityError, ValueError):
    """Raised when an event is ended at or before the scene it started in."""

    def __init__(self, event_id: str, start_scene: int, end_scene: int):
        self.event_id = event_id
        self.start_scene = start_scene
        self.end_scene = end_scene
        super().__init__(
            f"Event {event_id} starts at scene {start_scene}; "
            f"it must end in a later scene (got {end_scene})"
        )


class ProgressionLengthMismatch(ContinuityError, ValueError):
    """Raised when a progression does not cover the event's scene range exactly."""

    def __init__(self, event_id: str, expected: Optional[int], actual: int):
        self.event_id = event_id
        self.expected = expected
        self.actual = actual
        if expected is None:
            message = f"Event {event_id} is ongoing; a progression needs a fixed scene range"
        else:
            message = f"Event {event_id} spans {expected} scenes but {actual} stages were supplied"
        super().__init__(message)


class ProgressionParseError(ContinuityError, ValueError):
    """Raised when AI output cannot be read as a list of stages."""


class EventNotFound(ContinuityError, LookupError):
    """Raised for a stale or unknown event id."""

    def __init__(self, event_id: str):
        self.event_id = event_id
        super().__init__(f"Continuity event not found: {event_id}")


class CharacterNotFound(ContinuityError, LookupError):
    """Raised when a character is not in the cast where it is required."""

    def __init__(self, character: str, scene_index: Optional[int] = None):
        self.character = character
        self.scene_index = scene_index
        if scene_index is None:
            message = f"Character not found in any scene: {character}"
        else:
            message = f"Character {character} is not in the cast of scene index {scene_index}"
        super().__init__(message)
