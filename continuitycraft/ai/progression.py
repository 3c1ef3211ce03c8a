"""AI-generated progression stages: parsing and application."""

import json
import re
import logging
from typing import Any, Dict, List

from ..core.project import ContinuityProject
from ..core.errors import ProgressionLengthMismatch, ProgressionParseError
from ..editor.continuity_tracker import ContinuityTracker
from ..editor.healing import apply_progression, basic_progression

logger = logging.getLogger(__name__)

_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")
_FENCE_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)


def parse_progression(text: str) -> List[str]:
    """Read a list of stage descriptions from model output.

    Tries strict JSON first, then the first ``[...]`` block found in the text
    (inside a code fence if there is one). Items may be strings or objects
    with a ``description`` or ``stage`` key.
    """
    data = _load_array(text or "")

    stages = []
    for item in data:
        if isinstance(item, str):
            stages.append(item.strip())
        elif isinstance(item, dict) and (item.get("description") or item.get("stage")):
            stages.append(str(item.get("description") or item.get("stage")).strip())
        else:
            raise ProgressionParseError(f"Unreadable progression stage: {item!r}")

    if not stages:
        raise ProgressionParseError("Progression is empty")
    return stages


def _load_array(text: str) -> List[Any]:
    try:
        data = json.loads(text.strip())
        if isinstance(data, list):
            return data
    except json.JSONDecodeError:
        pass

    candidates = [m.group(1) for m in _FENCE_PATTERN.finditer(text)] + [text]
    for candidate in candidates:
        match = _ARRAY_PATTERN.search(candidate)
        if not match:
            continue
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError:
            continue
        if isinstance(data, list):
            logger.debug("Progression recovered with permissive extraction")
            return data

    raise ProgressionParseError("No JSON array found in progression response")


class ProgressionGenerator:
    """Requests progression stages for an event and applies them.

    The request is the one await in the engine. While it is in flight the
    project may be edited, so the event is looked up and validated again
    before anything is written.
    """

    def __init__(self, project: ContinuityProject, ai_client, fallback_to_basic: bool = False):
        self.project = project
        self.ai_client = ai_client
        self.fallback_to_basic = fallback_to_basic
        self.tracker = ContinuityTracker(project)

    async def generate(self, event_id: str) -> List[str]:
        """Generate, validate and apply progression stages. Returns the stages applied."""
        event = self.tracker.get_event(event_id)
        span = event.scene_span
        if span is None:
            raise ProgressionLengthMismatch(event.id, None, 0)
        requested_range = (event.start_scene, event.end_scene)

        response = await self.ai_client.generate_progression(
            character=event.character,
            category=event.category_label,
            description=event.description or event.name,
            scenes=self._scene_context(event.start_scene, event.end_scene),
            healing_days=event.healing_days,
        )

        event = self.tracker.get_event(event_id)
        if (event.start_scene, event.end_scene) != requested_range:
            logger.warning(f"Event {event_id} range changed while generating progression")
            raise ProgressionLengthMismatch(event.id, event.scene_span, span)

        try:
            stages = parse_progression(response)
        except ProgressionParseError as e:
            if not self.fallback_to_basic:
                raise
            logger.warning(f"Using basic progression for {event_id}: {e}")
            stages = basic_progression(event)

        if len(stages) != span and self.fallback_to_basic:
            logger.warning(
                f"Progression for {event_id} had {len(stages)} stages, expected {span}; using basic progression"
            )
            stages = basic_progression(event)

        apply_progression(self.project, event_id, stages)
        return stages

    def _scene_context(self, start: int, end: int) -> List[Dict[str, str]]:
        context = []
        for scene_index in range(start, end + 1):
            scene = self.project.scenes.get(scene_index)
            context.append({
                "number": scene.number,
                "heading": scene.heading,
                "story_day": scene.story_day or "",
            })
        return context
