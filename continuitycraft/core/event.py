"""Continuity events: injuries, transformations and wardrobe changes that span scenes."""

import uuid
from enum import Enum
from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime

from .errors import InvalidEndScene


DEFAULT_HEALING_DAYS = 7


def validate_healing_days(healing_days: int) -> None:
    if not isinstance(healing_days, int) or isinstance(healing_days, bool) or healing_days < 1:
        raise ValueError(f"healing_days must be a positive integer, got {healing_days!r}")


class EventCategory(Enum):
    """Kind of continuity event."""
    INJURY = "injury"
    WARDROBE_CHANGE = "wardrobe_change"
    TRANSFORMATION = "transformation"
    CONDITION = "condition"
    MAKEUP_EFFECT = "makeup_effect"
    ILLNESS = "illness"
    HAIR_CHANGE = "hair_change"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str) -> "EventCategory":
        """Map a free-form tag to a category, falling back to OTHER."""
        normalized = (value or "").strip().lower().replace(" ", "_").replace("-", "_")
        for category in cls:
            if category.value == normalized:
                return category
        return cls.OTHER


class EventStatus(Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class TimelineSource(Enum):
    """Who wrote a timeline entry. Logged entries always win."""
    LOGGED = "logged"
    GENERATED = "generated"


class VisibilityStatus(Enum):
    VISIBLE = "visible"
    HIDDEN = "hidden"


@dataclass
class Observation:
    """A user-authored note about the event in one scene."""
    scene: int
    description: str
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scene": self.scene,
            "description": self.description,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Observation":
        observation = cls(scene=int(data["scene"]), description=data.get("description", ""))
        if data.get("timestamp"):
            observation.timestamp = datetime.fromisoformat(data["timestamp"])
        return observation


@dataclass
class TimelineEntry:
    scene: int
    state: str
    source: TimelineSource = TimelineSource.LOGGED

    def to_dict(self) -> Dict[str, Any]:
        return {"scene": self.scene, "state": self.state, "source": self.source.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimelineEntry":
        return cls(
            scene=int(data["scene"]),
            state=data.get("state", ""),
            source=TimelineSource(data.get("source", "logged")),
        )


@dataclass
class VisibilityRecord:
    """Whether the event shows on camera in a scene, and what covers it if not."""
    scene: int
    status: VisibilityStatus = VisibilityStatus.VISIBLE
    coverage: Optional[str] = None
    note: Optional[str] = None

    @property
    def hidden(self) -> bool:
        return self.status == VisibilityStatus.HIDDEN

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"scene": self.scene, "status": self.status.value}
        if self.coverage:
            data["coverage"] = self.coverage
        if self.note:
            data["note"] = self.note
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VisibilityRecord":
        return cls(
            scene=int(data["scene"]),
            status=VisibilityStatus(data.get("status", "visible")),
            coverage=data.get("coverage"),
            note=data.get("note"),
        )


def new_event_id() -> str:
    return f"event-{uuid.uuid4().hex[:12]}"


@dataclass
class ContinuityEvent:
    """Something that changes a character's look and persists across scenes.

    ``status`` is derived from ``end_scene`` so the two can never disagree.
    ``observations`` and ``timeline`` hold at most one entry per scene and are
    kept sorted by scene.
    """

    character: str
    category: EventCategory
    start_scene: int
    name: str = ""
    description: str = ""
    end_scene: Optional[int] = None
    healing_days: int = DEFAULT_HEALING_DAYS
    category_label: str = ""
    id: str = field(default_factory=new_event_id)
    observations: List[Observation] = field(default_factory=list)
    timeline: List[TimelineEntry] = field(default_factory=list)
    actor_presence: List[int] = field(default_factory=list)
    visibility: Dict[int, VisibilityRecord] = field(default_factory=dict)
    progression: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if not self.category_label:
            self.category_label = self.category.value

    @property
    def status(self) -> EventStatus:
        return EventStatus.COMPLETED if self.end_scene is not None else EventStatus.ACTIVE

    @property
    def scene_span(self) -> Optional[int]:
        """Number of scenes from start to end inclusive, None while ongoing."""
        if self.end_scene is None:
            return None
        return self.end_scene - self.start_scene + 1

    def is_active_at(self, scene_index: int) -> bool:
        """Lifecycle check: the scene lies within [start_scene, end_scene]."""
        if scene_index < self.start_scene:
            return False
        return self.end_scene is None or scene_index <= self.end_scene

    def observation_at(self, scene_index: int) -> Optional[Observation]:
        for observation in self.observations:
            if observation.scene == scene_index:
                return observation
        return None

    def timeline_at(self, scene_index: int) -> Optional[TimelineEntry]:
        for entry in self.timeline:
            if entry.scene == scene_index:
                return entry
        return None

    def upsert_observation(self, scene_index: int, description: str) -> None:
        self.observations = [o for o in self.observations if o.scene != scene_index]
        self.observations.append(Observation(scene=scene_index, description=description))
        self.observations.sort(key=lambda o: o.scene)

    def remove_observation(self, scene_index: int) -> None:
        self.observations = [o for o in self.observations if o.scene != scene_index]

    def upsert_timeline(self, entry: TimelineEntry) -> bool:
        """Insert or replace the entry at its scene.

        A generated entry never replaces a logged one. Returns whether the
        timeline changed.
        """
        existing = self.timeline_at(entry.scene)
        if existing is not None:
            if existing.source == TimelineSource.LOGGED and entry.source == TimelineSource.GENERATED:
                return False
            if existing == entry:
                return False
            self.timeline.remove(existing)
        self.timeline.append(entry)
        self.timeline.sort(key=lambda e: e.scene)
        return True

    def remove_logged_timeline(self, scene_index: int) -> None:
        self.timeline = [
            e for e in self.timeline
            if not (e.scene == scene_index and e.source == TimelineSource.LOGGED)
        ]

    def visibility_at(self, scene_index: int) -> VisibilityRecord:
        """Visibility for a scene; scenes without a record are visible."""
        return self.visibility.get(scene_index, VisibilityRecord(scene=scene_index))

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        return {
            "id": self.id,
            "character": self.character,
            "category": self.category.value,
            "category_label": self.category_label,
            "name": self.name,
            "description": self.description,
            "start_scene": self.start_scene,
            "end_scene": self.end_scene,
            "status": self.status.value,
            "healing_days": self.healing_days,
            "observations": [o.to_dict() for o in self.observations],
            "timeline": [e.to_dict() for e in self.timeline],
            "actor_presence": list(self.actor_presence),
            "visibility": [self.visibility[s].to_dict() for s in sorted(self.visibility)],
            "progression": list(self.progression),
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContinuityEvent":
        """Create event from dictionary."""
        raw_category = data.get("category", "other")
        start_scene = int(data["start_scene"])
        end_scene = data.get("end_scene")
        if end_scene is not None:
            end_scene = int(end_scene)
            if end_scene <= start_scene:
                raise InvalidEndScene(data["id"], start_scene, end_scene)
        healing_days = data.get("healing_days", DEFAULT_HEALING_DAYS)
        validate_healing_days(healing_days)

        event = cls(
            id=data["id"],
            character=data["character"],
            category=EventCategory.parse(raw_category),
            category_label=data.get("category_label", raw_category),
            start_scene=start_scene,
            end_scene=end_scene,
            name=data.get("name", ""),
            description=data.get("description", ""),
            healing_days=healing_days,
            observations=[Observation.from_dict(o) for o in data.get("observations", [])],
            timeline=[TimelineEntry.from_dict(e) for e in data.get("timeline", [])],
            actor_presence=list(data.get("actor_presence", [])),
            progression=list(data.get("progression", [])),
        )
        for record in data.get("visibility", []):
            visibility = VisibilityRecord.from_dict(record)
            event.visibility[visibility.scene] = visibility

        if "created_at" in data:
            event.created_at = datetime.fromisoformat(data["created_at"])

        return event

    def __str__(self) -> str:
        end = self.end_scene if self.end_scene is not None else "ongoing"
        return f"{self.character}: {self.name or self.description} ({self.category_label}, {self.start_scene}-{end})"
