"""Claude AI client for ContinuityCraft."""

import os
from typing import Dict, List, Optional
from anthropic import AsyncAnthropic
from tenacity import retry, stop_after_attempt, wait_exponential
import logging

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"


class ClaudeClient:
    """Client for the text-generation collaborator.

    Returned text is opaque to the engine; only progression arrays are
    parsed, by ``continuitycraft.ai.progression``.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        max_tokens: int = 1500,
    ):
        """Initialize Claude client with async support."""
        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise ValueError("ANTHROPIC_API_KEY environment variable or api_key parameter is required")

        self.client = AsyncAnthropic(api_key=self.api_key)
        self.model = model
        self.max_tokens = max_tokens

    @retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=4, max=10))
    async def _make_request(self, messages: List[Dict[str, str]], system: str = "") -> str:
        """Make a request to Claude API with retry logic."""
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system,
                messages=messages,
                timeout=120.0,
            )
            return response.content[0].text
        except Exception as e:
            logger.error(f"API request failed: {e}")
            raise

    async def generate_progression(
        self,
        character: str,
        category: str,
        description: str,
        scenes: List[Dict[str, str]],
        healing_days: int = 7,
    ) -> str:
        """Ask for one appearance description per scene of an event's range.

        ``scenes`` holds one ``{"number", "heading", "story_day"}`` mapping per
        scene, in order. The reply should be a JSON array of strings of the
        same length.
        """
        scene_lines = "\n".join(
            f"{i + 1}. Scene {s.get('number', '')} (Story Day {s.get('story_day') or 'Unknown'}): {s.get('heading', '')}"
            for i, s in enumerate(scenes)
        )

        system_prompt = f"""You are a film continuity expert for the hair & makeup department.

Character: {character}
Event Type: {category}
Description: {description}
Typical healing time: about {healing_days} scenes

Scenes in the span ({len(scenes)} total):
{scene_lines}

Describe how this {category} looks in each scene, evolving realistically.
Consider story time passing (not just scene count), natural healing or
progression rates, and what makeup and hair need to show on camera.

Return ONLY a JSON array with exactly {len(scenes)} strings, one brief visual
description per scene, in scene order. No other text."""

        messages = [
            {
                "role": "user",
                "content": f"Please write the {len(scenes)} progression stages for {character}'s {category}.",
            }
        ]

        return await self._make_request(messages, system_prompt)

