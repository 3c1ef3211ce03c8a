"""File I/O and persistence modules."""

from .file_handler import FileHandler
from .project_loader import ProjectLoader, ProjectAutoSaver

__all__ = [
    "FileHandler",
    "ProjectLoader",
    "ProjectAutoSaver",
]
