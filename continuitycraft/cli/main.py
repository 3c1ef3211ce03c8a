"""Main CLI entry point for ContinuityCraft."""

import asyncio
import logging
import sys
from pathlib import Path

import click

from .. import __version__
from ..config import load_settings
from ..core.project import ContinuityProject
from ..core.character_state import EDITABLE_FIELDS
from ..editor.state_table import CharacterStateTable
from ..editor.continuity_tracker import ContinuityTracker
from ..editor.query import ContinuityQuery
from ..editor.healing import healing_snapshot
from ..io.project_loader import ProjectLoader, ProjectAutoSaver


@click.group()
@click.version_option(version=__version__)
@click.option('--config', 'config_path', type=click.Path(exists=True), help='Settings YAML file')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, config_path, verbose):
    """ContinuityCraft - hair, makeup and wardrobe continuity tracking"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj['settings'] = load_settings(config_path)
    ctx.obj['project_loader'] = ProjectLoader()


def _open(ctx, project_file) -> ContinuityProject:
    """Load a project; with autosave on, every change is written straight back."""
    project = ctx.obj['project_loader'].load_project(project_file)
    if ctx.obj['settings'].autosave:
        ProjectAutoSaver(project, project_file, ctx.obj['project_loader']).attach()
    return project


def _finish(ctx, project, project_file) -> None:
    if not ctx.obj['settings'].autosave:
        ctx.obj['project_loader'].save_project(project, project_file)


def _fail(action: str, error: Exception) -> None:
    click.echo(f"❌ Error {action}: {error}", err=True)
    sys.exit(1)


def _scene_label(project, scene_index: int) -> str:
    return f"Scene {project.scenes.get(scene_index).number}"


@cli.group()
def project():
    """Project management commands"""
    pass


@cli.group()
def scenes():
    """Scene list commands"""
    pass


@cli.group()
def state():
    """Character state commands"""
    pass


@cli.group()
def event():
    """Continuity event commands"""
    pass


@cli.group()
def query():
    """Continuity queries"""
    pass


@cli.group()
def ai():
    """AI-powered commands"""
    pass


# Project Commands
@project.command('create')
@click.argument('project_file', type=click.Path())
@click.option('--title', prompt='Production title', help='Title of the production')
@click.option('--scenes', 'scenes_file', type=click.Path(exists=True), help='Scene list (JSON or YAML) to import')
@click.pass_context
def project_create(ctx, project_file, title, scenes_file):
    """Create a new continuity project"""
    try:
        settings = ctx.obj['settings']
        new_project = ContinuityProject(title=title, default_healing_days=settings.default_healing_days)
        if scenes_file:
            ctx.obj['project_loader'].import_scenes(new_project, scenes_file)
        ctx.obj['project_loader'].save_project(new_project, project_file)

        click.echo(f"✅ Created project '{title}' in {Path(project_file).resolve()}")
        click.echo(f"🎬 Scenes: {new_project.scenes.scene_count}")
    except Exception as e:
        _fail("creating project", e)


@project.command('info')
@click.argument('project_file', type=click.Path(exists=True))
@click.pass_context
def project_info(ctx, project_file):
    """Show project statistics"""
    try:
        loaded = ctx.obj['project_loader'].load_project(project_file)
        stats = loaded.get_statistics()
        click.echo(f"📖 {loaded.title or 'Untitled'}")
        click.echo("=" * 50)
        click.echo(f"🎬 Scenes: {stats['total_scenes']}")
        click.echo(f"👥 Characters: {stats['total_characters']}")
        click.echo(f"📝 Recorded states: {stats['recorded_states']}")
        click.echo(f"🩹 Events: {stats['total_events']} ({stats['ongoing_events']} ongoing)")
    except Exception as e:
        _fail("reading project", e)


# Scene Commands
@scenes.command('import')
@click.argument('project_file', type=click.Path(exists=True))
@click.argument('scenes_file', type=click.Path(exists=True))
@click.pass_context
def scenes_import(ctx, project_file, scenes_file):
    """Import the scene list produced by the script importer"""
    try:
        loaded = _open(ctx, project_file)
        count = ctx.obj['project_loader'].import_scenes(loaded, scenes_file)
        _finish(ctx, loaded, project_file)
        click.echo(f"✅ Imported {count} scenes")
    except Exception as e:
        _fail("importing scenes", e)


@scenes.command('list')
@click.argument('project_file', type=click.Path(exists=True))
@click.pass_context
def scenes_list(ctx, project_file):
    """List scenes with their cast"""
    try:
        loaded = ctx.obj['project_loader'].load_project(project_file)
        if not loaded.scenes.scene_count:
            click.echo("📭 No scenes imported")
            return
        for scene in loaded.scenes:
            day = f" [Day {scene.story_day}]" if scene.story_day else ""
            cast = ", ".join(scene.cast) if scene.cast else "-"
            click.echo(f"{scene.index:>3}  Scene {scene.number}{day}: {scene.heading}")
            click.echo(f"       Cast: {cast}")
    except Exception as e:
        _fail("listing scenes", e)


@scenes.command('set')
@click.argument('project_file', type=click.Path(exists=True))
@click.argument('scene_index', type=int)
@click.option('--number', help='Display scene number')
@click.option('--heading', help='Scene heading')
@click.option('--story-day', help='Story day')
@click.option('--time-of-day', help='Time of day')
@click.option('--flashback/--no-flashback', default=None, help='Flashback scene')
@click.option('--dream/--no-dream', default=None, help='Dream scene')
@click.pass_context
def scenes_set(ctx, project_file, scene_index, number, heading, story_day, time_of_day, flashback, dream):
    """Edit scene metadata"""
    try:
        loaded = _open(ctx, project_file)
        updates = {
            "number": number,
            "heading": heading,
            "story_day": story_day,
            "time_of_day": time_of_day,
            "is_flashback": flashback,
            "is_dream": dream,
        }
        updates = {name: value for name, value in updates.items() if value is not None}
        if not updates:
            click.echo("No changes specified.")
            return
        scene = loaded.set_scene_metadata(scene_index, **updates)
        _finish(ctx, loaded, project_file)
        click.echo(f"✅ Updated {scene}")
    except Exception as e:
        _fail("updating scene", e)


# State Commands
@state.command('show')
@click.argument('project_file', type=click.Path(exists=True))
@click.argument('character')
@click.argument('scene_index', type=int)
@click.pass_context
def state_show(ctx, project_file, character, scene_index):
    """Show a character's appearance in a scene"""
    try:
        loaded = ctx.obj['project_loader'].load_project(project_file)
        table = CharacterStateTable(loaded)
        record = table.get_state(character, scene_index)
        click.echo(f"👤 {character} - {_scene_label(loaded, scene_index)}")
        click.echo("=" * 50)
        if record is None:
            previous = table.find_previous_state(character, scene_index)
            if previous is None:
                click.echo("First appearance, nothing recorded")
            else:
                click.echo(f"Nothing recorded; last seen in {_scene_label(loaded, previous.scene_index)}")
            return
        click.echo(f"Status: {record.change_status.value}")
        for name in EDITABLE_FIELDS:
            value = getattr(record, name)
            if value:
                click.echo(f"  {name}: {value}")
    except Exception as e:
        _fail("showing state", e)


@state.command('set')
@click.argument('project_file', type=click.Path(exists=True))
@click.argument('character')
@click.argument('scene_index', type=int)
@click.argument('field', type=click.Choice(EDITABLE_FIELDS))
@click.argument('value')
@click.pass_context
def state_set(ctx, project_file, character, scene_index, field, value):
    """Set one appearance field"""
    try:
        loaded = _open(ctx, project_file)
        CharacterStateTable(loaded).update_field(character, scene_index, field, value)
        _finish(ctx, loaded, project_file)
        click.echo(f"✅ {character} {field} updated in {_scene_label(loaded, scene_index)}")
    except Exception as e:
        _fail("updating state", e)


@state.command('copy-forward')
@click.argument('project_file', type=click.Path(exists=True))
@click.argument('character')
@click.argument('scene_index', type=int)
@click.pass_context
def state_copy_forward(ctx, project_file, character, scene_index):
    """Copy the look from the character's previous scene"""
    try:
        loaded = _open(ctx, project_file)
        CharacterStateTable(loaded).copy_forward(character, scene_index)
        _finish(ctx, loaded, project_file)
        click.echo(f"✅ Copied {character}'s previous look into {_scene_label(loaded, scene_index)}")
    except Exception as e:
        _fail("copying state", e)


@state.command('no-change')
@click.argument('project_file', type=click.Path(exists=True))
@click.argument('character')
@click.argument('scene_index', type=int)
@click.pass_context
def state_no_change(ctx, project_file, character, scene_index):
    """Mark the scene as having no appearance changes"""
    try:
        loaded = _open(ctx, project_file)
        CharacterStateTable(loaded).set_no_change(character, scene_index)
        _finish(ctx, loaded, project_file)
        click.echo(f"✅ {character}: no change in {_scene_label(loaded, scene_index)}")
    except Exception as e:
        _fail("updating state", e)


@state.command('has-changes')
@click.argument('project_file', type=click.Path(exists=True))
@click.argument('character')
@click.argument('scene_index', type=int)
@click.pass_context
def state_has_changes(ctx, project_file, character, scene_index):
    """Mark the scene as having appearance changes"""
    try:
        loaded = _open(ctx, project_file)
        CharacterStateTable(loaded).mark_has_changes(character, scene_index)
        _finish(ctx, loaded, project_file)
        click.echo(f"✅ {character}: changes in {_scene_label(loaded, scene_index)}")
    except Exception as e:
        _fail("updating state", e)


# Event Commands
@event.command('create')
@click.argument('project_file', type=click.Path(exists=True))
@click.argument('character')
@click.option('--category', default='injury', help='injury, wardrobe_change, transformation, ...')
@click.option('--start', 'start_scene', type=int, required=True, help='Start scene index')
@click.option('--description', required=True, help='What it looks like in the start scene')
@click.option('--name', default='', help='Short event name')
@click.option('--healing-days', type=int, help='Scenes until fully healed')
@click.pass_context
def event_create(ctx, project_file, character, category, start_scene, description, name, healing_days):
    """Open a continuity event"""
    try:
        loaded = _open(ctx, project_file)
        created = ContinuityTracker(loaded).create_event(
            character, category, start_scene, description, name=name, healing_days=healing_days
        )
        _finish(ctx, loaded, project_file)
        click.echo(f"✅ Created event {created.id}")
        click.echo(f"🎬 Present in {len(created.actor_presence)} scenes from {_scene_label(loaded, start_scene)}")
    except Exception as e:
        _fail("creating event", e)


@event.command('list')
@click.argument('project_file', type=click.Path(exists=True))
@click.option('--character', help='Only this character')
@click.pass_context
def event_list(ctx, project_file, character):
    """List continuity events"""
    try:
        loaded = ctx.obj['project_loader'].load_project(project_file)
        tracker = ContinuityTracker(loaded)
        events = tracker.events_for_character(character) if character else tracker.list_events()
        if not events:
            click.echo("📭 No continuity events")
            return
        for item in events:
            click.echo(f"{item.id}  [{item.status.value}] {item}")
    except Exception as e:
        _fail("listing events", e)


@event.command('observe')
@click.argument('project_file', type=click.Path(exists=True))
@click.argument('event_id')
@click.argument('scene_index', type=int)
@click.argument('description')
@click.pass_context
def event_observe(ctx, project_file, event_id, scene_index, description):
    """Log what the event looks like in a scene (empty text removes it)"""
    try:
        loaded = _open(ctx, project_file)
        ContinuityTracker(loaded).record_observation(event_id, scene_index, description)
        _finish(ctx, loaded, project_file)
        click.echo(f"✅ Observation saved for {_scene_label(loaded, scene_index)}")
    except Exception as e:
        _fail("recording observation", e)


@event.command('end')
@click.argument('project_file', type=click.Path(exists=True))
@click.argument('event_id')
@click.argument('scene_index', type=int)
@click.option('--description', help='Final observation')
@click.pass_context
def event_end(ctx, project_file, event_id, scene_index, description):
    """Resolve an event in a later scene"""
    try:
        loaded = _open(ctx, project_file)
        ContinuityTracker(loaded).end_event(event_id, scene_index, description)
        _finish(ctx, loaded, project_file)
        click.echo(f"✅ Event {event_id} ends in {_scene_label(loaded, scene_index)}")
    except Exception as e:
        _fail("ending event", e)


@event.command('reopen')
@click.argument('project_file', type=click.Path(exists=True))
@click.argument('event_id')
@click.pass_context
def event_reopen(ctx, project_file, event_id):
    """Make a completed event ongoing again"""
    try:
        loaded = _open(ctx, project_file)
        ContinuityTracker(loaded).reopen_event(event_id)
        _finish(ctx, loaded, project_file)
        click.echo(f"✅ Event {event_id} reopened")
    except Exception as e:
        _fail("reopening event", e)


@event.command('hide')
@click.argument('project_file', type=click.Path(exists=True))
@click.argument('event_id')
@click.argument('scene_index', type=int)
@click.option('--coverage', help='What hides it (bandage, sleeve, makeup, ...)')
@click.option('--note', help='Extra note')
@click.pass_context
def event_hide(ctx, project_file, event_id, scene_index, coverage, note):
    """Mark an event as hidden in a scene"""
    try:
        loaded = _open(ctx, project_file)
        ContinuityTracker(loaded).set_visibility(event_id, scene_index, True, coverage, note)
        _finish(ctx, loaded, project_file)
        click.echo(f"✅ Event {event_id} hidden in {_scene_label(loaded, scene_index)}")
    except Exception as e:
        _fail("updating visibility", e)


@event.command('unhide')
@click.argument('project_file', type=click.Path(exists=True))
@click.argument('event_id')
@click.argument('scene_index', type=int)
@click.pass_context
def event_unhide(ctx, project_file, event_id, scene_index):
    """Mark an event as visible in a scene"""
    try:
        loaded = _open(ctx, project_file)
        ContinuityTracker(loaded).set_visibility(event_id, scene_index, False)
        _finish(ctx, loaded, project_file)
        click.echo(f"✅ Event {event_id} visible in {_scene_label(loaded, scene_index)}")
    except Exception as e:
        _fail("updating visibility", e)


@event.command('delete')
@click.argument('project_file', type=click.Path(exists=True))
@click.argument('event_id')
@click.confirmation_option(prompt='Are you sure you want to delete this event?')
@click.pass_context
def event_delete(ctx, project_file, event_id):
    """Delete a continuity event"""
    try:
        loaded = _open(ctx, project_file)
        ContinuityTracker(loaded).delete_event(event_id)
        _finish(ctx, loaded, project_file)
        click.echo(f"✅ Deleted event {event_id}")
    except Exception as e:
        _fail("deleting event", e)


# Query Commands
@query.command('active')
@click.argument('project_file', type=click.Path(exists=True))
@click.argument('scene_index', type=int)
@click.option('--character', help='Only this character')
@click.pass_context
def query_active(ctx, project_file, scene_index, character):
    """Events active in a scene"""
    try:
        loaded = ctx.obj['project_loader'].load_project(project_file)
        loaded.scenes.validate_index(scene_index)
        queries = ContinuityQuery(loaded)
        if character:
            events = queries.active_events_for_character(character, scene_index)
        else:
            events = queries.active_events_at(scene_index)

        click.echo(f"🎬 {_scene_label(loaded, scene_index)}")
        if not events:
            click.echo("📭 No active events")
            return
        for item in events:
            healing = healing_snapshot(item, scene_index)
            click.echo(f"  • {item} - healed {healing.percent:.0f}%")
    except Exception as e:
        _fail("querying events", e)


@query.command('snapshot')
@click.argument('project_file', type=click.Path(exists=True))
@click.argument('character')
@click.argument('scene_index', type=int)
@click.pass_context
def query_snapshot(ctx, project_file, character, scene_index):
    """Everything known about a character in a scene"""
    try:
        loaded = ctx.obj['project_loader'].load_project(project_file)
        snapshot = ContinuityQuery(loaded).character_snapshot(character, scene_index)

        click.echo(f"👤 {character} - {_scene_label(loaded, scene_index)}")
        click.echo("=" * 50)
        if snapshot.first_appearance:
            click.echo("First appearance")
        else:
            click.echo(f"Last seen: {_scene_label(loaded, snapshot.previous_state.scene_index)}")
        if snapshot.state:
            click.echo(f"Status: {snapshot.state.change_status.value}")
        for view in snapshot.active_events:
            shown = "hidden" if view.visibility.hidden else "visible"
            if view.visibility.coverage:
                shown += f" ({view.visibility.coverage})"
            click.echo(f"  • {view.event.name or view.event.category_label}: {view.stage}")
            click.echo(f"    healed {view.healing.percent:.0f}%, {shown}")
    except Exception as e:
        _fail("building snapshot", e)


# AI Commands
@ai.command('progression')
@click.argument('project_file', type=click.Path(exists=True))
@click.argument('event_id')
@click.option('--fallback/--no-fallback', default=False, help='Use basic stages if the AI reply is unusable')
@click.pass_context
def ai_progression(ctx, project_file, event_id, fallback):
    """Generate and apply progression stages for a completed event"""
    try:
        from ..ai.claude_client import ClaudeClient
        from ..ai.progression import ProgressionGenerator

        settings = ctx.obj['settings']
        loaded = _open(ctx, project_file)
        client = ClaudeClient(
            api_key=settings.anthropic_api_key,
            model=settings.model,
            max_tokens=settings.max_tokens,
        )
        generator = ProgressionGenerator(loaded, client, fallback_to_basic=fallback)

        click.echo("🤖 Generating progression stages...")
        stages = asyncio.run(generator.generate(event_id))
        _finish(ctx, loaded, project_file)

        start = loaded.events[event_id].start_scene
        for offset, stage in enumerate(stages):
            click.echo(f"  {_scene_label(loaded, start + offset)}: {stage}")
        click.echo(f"✅ Applied {len(stages)} stages")
    except Exception as e:
        _fail("generating progression", e)


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == '__main__':
    main()
