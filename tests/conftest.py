"""Shared fixtures for ContinuityCraft tests."""

import pytest

from continuitycraft.core import ContinuityProject, Scene, SceneStore
from continuitycraft.editor import CharacterStateTable, ContinuityTracker, ContinuityQuery


def build_scenes():
    """Seven scenes; ANNA appears in 2, 3, 5 and 6 (not 4)."""
    casts = [
        ["BEN"],
        ["BEN"],
        ["ANNA", "BEN"],
        ["ANNA"],
        ["BEN"],
        ["ANNA"],
        ["ANNA", "BEN"],
    ]
    return SceneStore([
        Scene(
            index=i,
            heading=f"INT. LOCATION {i} - DAY",
            story_day=str(1 + i // 2),
            cast=cast,
        )
        for i, cast in enumerate(casts)
    ])


@pytest.fixture
def project():
    return ContinuityProject(title="Test Production", scenes=build_scenes())


@pytest.fixture
def table(project):
    return CharacterStateTable(project)


@pytest.fixture
def tracker(project):
    return ContinuityTracker(project)


@pytest.fixture
def queries(project):
    return ContinuityQuery(project)


@pytest.fixture
def changes(project):
    """Collects every change the project emits."""
    received = []
    project.notifier.subscribe(received.append)
    return received
