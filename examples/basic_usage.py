"""Basic usage example for ContinuityCraft."""

import asyncio

from continuitycraft import (
    ClaudeClient,
    CharacterStateTable,
    ContinuityProject,
    ContinuityQuery,
    ContinuityTracker,
    ProgressionGenerator,
    Scene,
)


async def main():
    """Track a cut on ANNA's arm across a short sequence."""

    # Create a project with a handful of scenes
    project = ContinuityProject(title="Night Shift")
    project.scenes.append(Scene(index=0, heading="INT. KITCHEN - NIGHT", story_day="1", cast=["ANNA"]))
    project.scenes.append(Scene(index=1, heading="EXT. STREET - NIGHT", story_day="1", cast=["BEN"]))
    project.scenes.append(Scene(index=2, heading="INT. HOSPITAL - DAY", story_day="2", cast=["ANNA", "BEN"]))
    project.scenes.append(Scene(index=3, heading="INT. FLAT - DAY", story_day="3", cast=["ANNA"]))

    table = CharacterStateTable(project)
    tracker = ContinuityTracker(project)

    table.update_field("ANNA", 0, "enter_hair", "loose curls")
    table.copy_forward("ANNA", 2)

    cut = tracker.create_event("ANNA", "injury", 0, "Fresh cut on left forearm", healing_days=4)
    tracker.set_visibility(cut.id, 2, True, coverage="bandage")
    tracker.end_event(cut.id, 3, "Pink line, nearly healed")

    # Requires ANTHROPIC_API_KEY; falls back to basic stages if the reply is unusable
    generator = ProgressionGenerator(project, ClaudeClient(), fallback_to_basic=True)
    stages = await generator.generate(cut.id)
    print("Progression:", stages)

    snapshot = ContinuityQuery(project).character_snapshot("ANNA", 2)
    for view in snapshot.active_events:
        print(f"{view.event}: {view.stage} ({view.healing.percent:.0f}% healed)")


if __name__ == "__main__":
    asyncio.run(main())
