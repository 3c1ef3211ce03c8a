"""Project loading, saving and scene-list import."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Union

from ..core.project import ContinuityProject
from ..core.scene import Scene, SceneStore
from ..core.changes import Change
from .file_handler import FileHandler

logger = logging.getLogger(__name__)


class ProjectLoader:
    """Handles loading and saving projects."""

    def __init__(self):
        self.file_handler = FileHandler()

    def load_project(self, project_file: Union[str, Path]) -> ContinuityProject:
        """Load project from file."""
        data = self.file_handler.read_structured(project_file)
        return ContinuityProject.from_dict(data)

    def save_project(self, project: ContinuityProject, project_file: Union[str, Path]) -> None:
        """Save project to file."""
        self.file_handler.write_structured(project_file, project.to_dict())

    def import_scenes(self, project: ContinuityProject, scenes_file: Union[str, Path]) -> int:
        """Replace the project's scenes with a list produced by the script importer.

        The file holds either a list of scenes or a mapping with a ``scenes``
        key. Each scene needs a ``heading`` and may carry ``number``,
        ``story_day``, ``time_of_day``, ``is_flashback``, ``is_dream`` and
        ``cast``. Recorded states and events are kept.
        """
        data = self.file_handler.read_structured(scenes_file)
        items = self._scene_items(data)
        project.replace_scenes(SceneStore([Scene.from_dict(item, index=i) for i, item in enumerate(items)]))
        logger.info(f"Imported {len(items)} scenes from {scenes_file}")
        return len(items)

    def _scene_items(self, data: Any) -> List[Dict[str, Any]]:
        if isinstance(data, dict):
            data = data.get("scenes", [])
        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise ValueError("Scene list must be a list of scene mappings")
        return data


class ProjectAutoSaver:
    """Saves the project after every change it is notified of.

    A failed save is logged as a warning; the in-memory project is never
    rolled back.
    """

    def __init__(self, project: ContinuityProject, project_file: Union[str, Path], loader: ProjectLoader = None):
        self.project = project
        self.project_file = Path(project_file)
        self.loader = loader or ProjectLoader()
        self.last_error: Exception = None

    def attach(self) -> "ProjectAutoSaver":
        self.project.notifier.subscribe(self)
        return self

    def detach(self) -> None:
        self.project.notifier.unsubscribe(self)

    def __call__(self, change: Change) -> None:
        try:
            self.loader.save_project(self.project, self.project_file)
            self.last_error = None
        except OSError as e:
            self.last_error = e
            logger.warning(f"Could not save {self.project_file} after {change.kind.value}: {e}")
