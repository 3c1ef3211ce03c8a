"""Tests for the command line interface."""

import json

import pytest
from click.testing import CliRunner

from continuitycraft.cli.main import cli
from continuitycraft.io import ProjectLoader


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """A working directory holding a project with three scenes."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CONTINUITYCRAFT_AUTOSAVE", raising=False)
    scenes_file = tmp_path / "scenes.json"
    scenes_file.write_text(json.dumps([
        {"number": "1", "heading": "INT. FLAT - NIGHT", "story_day": "1", "cast": ["ANNA"]},
        {"number": "2", "heading": "EXT. STREET - NIGHT", "story_day": "1", "cast": ["BEN"]},
        {"number": "3", "heading": "INT. FLAT - DAY", "story_day": "2", "cast": ["ANNA", "BEN"]},
    ]), encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(cli, ["project", "create", "proj.json", "--title", "Night Shift", "--scenes", "scenes.json"])
    assert result.exit_code == 0, result.output
    return runner, tmp_path / "proj.json"


def _load(project_file):
    return ProjectLoader().load_project(project_file)


def test_project_info(workspace):
    """Project statistics are printed."""
    runner, project_file = workspace
    result = runner.invoke(cli, ["project", "info", str(project_file)])
    assert result.exit_code == 0
    assert "Scenes: 3" in result.output


def test_state_commands(workspace):
    """State edits persist and copy-forward carries the look over."""
    runner, project_file = workspace
    result = runner.invoke(cli, ["state", "set", str(project_file), "ANNA", "0", "exit_hair", "wet"])
    assert result.exit_code == 0, result.output

    result = runner.invoke(cli, ["state", "copy-forward", str(project_file), "ANNA", "2"])
    assert result.exit_code == 0, result.output
    assert _load(project_file).character_states[2]["ANNA"].enter_hair == "wet"


def test_copy_forward_first_appearance_fails(workspace):
    """Errors are reported on stderr with a non-zero exit code."""
    runner, project_file = workspace
    result = runner.invoke(cli, ["state", "copy-forward", str(project_file), "ANNA", "0"])
    assert result.exit_code == 1
    assert "No earlier scene" in result.output


def test_event_lifecycle_commands(workspace):
    """Events are created, rejected at their start scene, ended later and queried."""
    runner, project_file = workspace
    result = runner.invoke(cli, [
        "event", "create", str(project_file), "ANNA",
        "--start", "0", "--description", "cut on arm", "--healing-days", "4",
    ])
    assert result.exit_code == 0, result.output
    event_id = next(iter(_load(project_file).events))

    result = runner.invoke(cli, ["event", "end", str(project_file), event_id, "0"])
    assert result.exit_code == 1

    result = runner.invoke(cli, ["event", "end", str(project_file), event_id, "2", "--description", "scar fading"])
    assert result.exit_code == 0, result.output

    result = runner.invoke(cli, ["query", "active", str(project_file), "2", "--character", "ANNA"])
    assert result.exit_code == 0
    assert "healed 50%" in result.output

    result = runner.invoke(cli, ["event", "hide", str(project_file), event_id, "2", "--coverage", "bandage"])
    assert result.exit_code == 0
    result = runner.invoke(cli, ["query", "snapshot", str(project_file), "ANNA", "2"])
    assert "hidden (bandage)" in result.output

    result = runner.invoke(cli, ["event", "delete", str(project_file), event_id, "--yes"])
    assert result.exit_code == 0
    assert _load(project_file).events == {}


def test_scene_metadata_command(workspace):
    """Scene metadata can be edited from the command line."""
    runner, project_file = workspace
    result = runner.invoke(cli, ["scenes", "set", str(project_file), "1", "--story-day", "5", "--flashback"])
    assert result.exit_code == 0, result.output
    scene = _load(project_file).scenes.get(1)
    assert scene.story_day == "5"
    assert scene.is_flashback
