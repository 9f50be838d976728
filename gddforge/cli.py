"""CLI entry point for gddforge."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table
from rich.tree import Tree

from gddforge.catalog import get_section_navigation, load_sections
from gddforge.config import GDDForgeConfig, find_config_file, load_config
from gddforge.config.loader import DEFAULT_CONFIG_TEMPLATE, PROJECT_CONFIG
from gddforge.drafter import EnhancementService, GameContext, GenerationService
from gddforge.errors import GDDForgeError
from gddforge.llm.registry import ModelRegistry
from gddforge.output import EXPORT_FORMATS, SectionExporter
from gddforge.preferences import PreferencesService
from gddforge.session import SectionEditingSession
from gddforge.store import SQLiteSectionStore

app = typer.Typer(
    name="gddforge",
    help="AI-assisted drafting for game design documents.",
)

config_app = typer.Typer(help="Manage gddforge configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: GDDForgeConfig | None = None
_config_source: Path | None = None

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class JsonLogFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def configure_logging(cfg: GDDForgeConfig) -> None:
    if cfg.log_format == "json":
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JsonLogFormatter())
    else:
        handler = RichHandler(show_path=False, rich_tracebacks=False)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(_LOG_LEVELS[cfg.log_level])


def _get_config() -> GDDForgeConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to gddforge.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config, _config_source
    try:
        _config_source = find_config_file(config)
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    configure_logging(_config)


def _build_registry(cfg: GDDForgeConfig) -> ModelRegistry:
    return ModelRegistry(cfg.providers, default_model_id=cfg.llm.default_model)


def _open_session(
    cfg: GDDForgeConfig,
    store: SQLiteSectionStore,
    game_id: str,
    section: str,
    user: str,
    game_context: GameContext,
) -> SectionEditingSession:
    registry = _build_registry(cfg)
    service_args = dict(registry=registry, settings=cfg.llm, policy=cfg.generation)
    return SectionEditingSession(
        store=store,
        game_id=game_id,
        section_slug=section,
        user_id=user,
        game_context=game_context,
        generation=GenerationService(**service_args),
        enhancement=EnhancementService(**service_args),
        preferences=PreferencesService(store, registry),
        config=cfg.session,
    )


def _echo_stream() -> Callable[[str], None]:
    """on_chunk callback that prints only what has not been printed yet."""
    shown = 0

    def on_chunk(text: str) -> None:
        nonlocal shown
        typer.echo(text[shown:], nl=False)
        shown = len(text)

    return on_chunk


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address (default from config)"),
    port: int | None = typer.Option(None, "--port", help="Port (default from config)"),
) -> None:
    """Run the HTTP API."""
    import uvicorn

    from gddforge.api import create_app

    cfg = _get_config()
    bind_host = host or cfg.server.host
    bind_port = port or cfg.server.port
    rprint(f"[bold]Serving[/bold] on http://{bind_host}:{bind_port}")
    uvicorn.run(
        create_app(cfg),
        host=bind_host,
        port=bind_port,
        log_level="warning" if cfg.log_level == "warn" else cfg.log_level,
    )


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@app.command()
def models() -> None:
    """List selectable models and whether their provider is configured."""
    cfg = _get_config()
    registry = _build_registry(cfg)
    table = Table(title="Models")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Provider", style="green")
    table.add_column("Available", justify="center")
    table.add_column("Description", style="dim")
    for option in registry.list_models():
        marker = "[green]yes[/green]" if option.available else "[red]no[/red]"
        name = option.name
        if option.id == registry.default_model_id:
            name += " [yellow](default)[/yellow]"
        table.add_row(option.id, name, option.provider, marker, option.description)
    rprint(table)


@app.command()
def sections(
    slug: str | None = typer.Argument(None, help="Show one section's subsections"),
) -> None:
    """List GDD sections, or the subsections of one section."""
    if slug is None:
        table = Table(title="Sections")
        table.add_column("#", justify="right")
        table.add_column("Slug", style="cyan")
        table.add_column("Title")
        table.add_column("Subsections", justify="right")
        for section in load_sections():
            table.add_row(
                str(section.number), section.slug, section.title, str(len(section.subsections))
            )
        rprint(table)
        return

    try:
        nav = get_section_navigation(slug)
    except GDDForgeError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    section = nav.current
    tree = Tree(f"[bold]{section.number}. {section.title}[/bold] [dim]({section.slug})[/dim]")
    for sub in section.subsections:
        tree.add(f"[green]{sub.id}[/green] {sub.title}")
    rprint(tree)
    prev_slug = nav.prev.slug if nav.prev else "-"
    next_slug = nav.next.slug if nav.next else "-"
    rprint(f"[dim]prev:[/dim] {prev_slug}  [dim]next:[/dim] {next_slug}")


# ---------------------------------------------------------------------------
# AI drafting
# ---------------------------------------------------------------------------


def _game_context(
    name: str, concept: str, platforms: list[str] | None, timeline: str | None
) -> GameContext:
    return GameContext(
        name=name, concept=concept, platforms=tuple(platforms or ()), timeline=timeline
    )


@app.command()
def generate(
    game_id: str = typer.Argument(..., help="Game identifier"),
    section: str = typer.Argument(..., help="Section slug"),
    subsection: str = typer.Argument(..., help="Subsection id"),
    name: str = typer.Option("", "--name", help="Game name"),
    concept: str = typer.Option("", "--concept", help="Game concept"),
    platform: list[str] | None = typer.Option(None, "--platform", help="Target platform"),
    timeline: str | None = typer.Option(None, "--timeline", help="Development timeline"),
    model: str | None = typer.Option(None, "--model", "-m", help="Model id"),
    user: str = typer.Option("cli", "--user", help="Editor user id"),
    save: bool = typer.Option(False, "--save", help="Accept the draft into the section"),
) -> None:
    """Draft one subsection from the game's stored content."""
    cfg = _get_config()
    store = SQLiteSectionStore(cfg.storage.db_path)
    context = _game_context(name, concept, platform, timeline)

    async def run() -> None:
        session = _open_session(cfg, store, game_id, section, user, context)
        try:
            await session.load()
            text = await session.generate(subsection, model_id=model, on_chunk=_echo_stream())
            typer.echo()
            if save and text:
                await session.accept_generated(subsection, text)
                if session.has_unsaved_changes and not await session.save():
                    raise session.last_error
                rprint(f"[green]Saved[/green] {section}/{subsection} (v{session.version})")
        finally:
            await session.close()

    try:
        asyncio.run(run())
    except GDDForgeError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    finally:
        store.close()


@app.command()
def enhance(
    game_id: str = typer.Argument(..., help="Game identifier"),
    section: str = typer.Argument(..., help="Section slug"),
    action: str = typer.Option(
        "enhance", "--action", "-a", help="enhance, improve, expand or concise"
    ),
    name: str = typer.Option("", "--name", help="Game name"),
    concept: str = typer.Option("", "--concept", help="Game concept"),
    platform: list[str] | None = typer.Option(None, "--platform", help="Target platform"),
    timeline: str | None = typer.Option(None, "--timeline", help="Development timeline"),
    model: str | None = typer.Option(None, "--model", "-m", help="Model id"),
    user: str = typer.Option("cli", "--user", help="Editor user id"),
    apply: bool = typer.Option(False, "--apply", help="Write the rewrite back to the section"),
) -> None:
    """Rewrite a whole section with one of the enhancement actions."""
    if action not in ("enhance", "improve", "expand", "concise"):
        rprint(f"[red]Error:[/red] unknown action '{action}'")
        raise typer.Exit(1)

    cfg = _get_config()
    store = SQLiteSectionStore(cfg.storage.db_path)
    context = _game_context(name, concept, platform, timeline)

    async def run() -> None:
        session = _open_session(cfg, store, game_id, section, user, context)
        try:
            await session.load()
            await session.enhance(action, model_id=model, on_chunk=_echo_stream())
            typer.echo()
            if apply and session.has_unsaved_changes:
                if not await session.save():
                    raise session.last_error
                rprint(f"[green]Saved[/green] {section} (v{session.version})")
        finally:
            await session.close()

    try:
        asyncio.run(run())
    except GDDForgeError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    finally:
        store.close()


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


@app.command()
def export(
    game_id: str = typer.Argument(..., help="Game identifier"),
    fmt: str = typer.Option("md", "--format", "-f", help="txt, md, html or json"),
    section: list[str] | None = typer.Option(None, "--section", "-s", help="Section slug"),
    out: Path | None = typer.Option(None, "--out", "-o", help="Output file (default: stdout)"),
) -> None:
    """Export stored sections of a game."""
    if fmt not in EXPORT_FORMATS:
        rprint(f"[red]Error:[/red] format must be one of {', '.join(EXPORT_FORMATS)}")
        raise typer.Exit(1)

    cfg = _get_config()
    store = SQLiteSectionStore(cfg.storage.db_path)
    try:
        exporter = SectionExporter(store.get_all(game_id))
        if out is None:
            typer.echo(exporter.render(fmt, section))
        else:
            dest = exporter.write(out, fmt, section)
            rprint(f"[green]Wrote[/green] {dest}")
    except GDDForgeError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    finally:
        store.close()


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    source = str(_config_source) if _config_source else "built-in defaults"
    rprint(f"[dim]source:[/dim] {source}")
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default gddforge.yaml in current directory."""
    target = PROJECT_CONFIG
    if target.exists() and not force:
        rprint(f"[yellow]{target} already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")


if __name__ == "__main__":
    app()
