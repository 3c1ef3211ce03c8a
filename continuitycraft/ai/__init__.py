"""AI integration modules for ContinuityCraft."""

from .claude_client import ClaudeClient
from .progression import ProgressionGenerator, parse_progression

__all__ = [
    "ClaudeClient",
    "ProgressionGenerator",
    "parse_progression",
]
