"""
Command line interface for the post-build transformer.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import ConfigError, PostbuildConfig, get_environment, load_config
from .errors import PrettydistError
from .passes import PipelineReport
from .passes.report import display_path
from .pipeline import DEFAULT_PASSES, find_dangling_references, run_pipeline

console = Console()
app = typer.Typer(help="Restructure and repair a built static site in place.")
logger = logging.getLogger(__name__)

LOG_LEVELS = ["critical", "error", "warning", "info", "debug"]


def _configure_logging(level_name: str) -> None:
    env_override = get_environment().log_level
    level_str = (env_override or level_name or "info").upper()
    if level_str not in {lvl.upper() for lvl in LOG_LEVELS}:
        level_str = "INFO"
    logging.basicConfig(
        level=getattr(logging, level_str, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.debug("Logging configured at %s", level_str)


def _resolve_config_path(value: Optional[Path]) -> Optional[Path]:
    """Ensure config path exists and return absolute path."""
    if value is None:
        return None
    resolved = value.expanduser().resolve()
    if not resolved.exists():
        raise typer.BadParameter(f"No config file found at {resolved}")
    if not resolved.is_file():
        raise typer.BadParameter(f"Config path must be a file, got directory: {resolved}")
    return resolved


def _load_config_or_exit(config_path: Optional[Path], root: Optional[Path]) -> PostbuildConfig:
    """
    Build the run configuration.

    The root comes from the command line, then PRETTYDIST_ROOT, then the config
    file, then the default.
    """
    try:
        config = load_config(config_path) if config_path else PostbuildConfig()
    except ConfigError as exc:
        console.print(f"[bold red]Configuration error:[/] {exc}")
        raise typer.Exit(code=1) from exc
    override = root or get_environment().root
    if override is not None:
        config = config.model_copy(update={"root": Path(override)})
    return config


def _print_run_report(report: PipelineReport) -> None:
    table = Table(title="Postbuild Summary")
    table.add_column("Key")
    table.add_column("Value", overflow="fold")
    for key, value in report.summary_rows():
        table.add_row(key, value)
    console.print(table)


@app.callback(invoke_without_command=True)
def _root_command(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show prettydist version and exit.",
        is_flag=True,
    ),
    log_level: str = typer.Option(
        "info",
        "--log-level",
        help="Logging level (critical, error, warning, info, debug).",
        show_default=True,
        case_sensitive=False,
    ),
) -> None:
    """
    Default command when no subcommand is selected.
    """
    _configure_logging(log_level)

    if version:
        console.print(f"[bold green]prettydist[/] {__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(
            "[bold yellow]prettydist[/] is ready. Run [cyan]prettydist run dist[/] after your build finishes.",
        )


@app.command()
def run(
    root: Optional[Path] = typer.Argument(
        None,
        help="Output directory (defaults to PRETTYDIST_ROOT, the config file, then ./dist).",
        show_default=False,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a TOML configuration file.",
        callback=_resolve_config_path,
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Log the planned moves, renames and rewrites without changing anything.",
    ),
    skip_unchanged: bool = typer.Option(
        False,
        "--skip-unchanged",
        help="Do not write back pages that contain no image reference to rewrite.",
    ),
    only: List[str] = typer.Option(
        None,
        "--only",
        help=f"Run only these passes, in the given order ({', '.join(DEFAULT_PASSES)}).",
    ),
    lock: bool = typer.Option(
        True,
        "--lock/--no-lock",
        help="Refuse to start while another run holds the same output directory.",
    ),
) -> None:
    """
    Prettify URLs, collapse webp double extensions and rewrite image references.
    """
    run_config = _load_config_or_exit(config, root)
    if skip_unchanged:
        run_config = run_config.model_copy(update={"skip_unchanged_writes": True})
    logger.info("Processing output directory %s", run_config.resolved_root)

    try:
        report = run_pipeline(run_config, dry_run=dry_run, passes=only or None, lock=lock)
    except PrettydistError as exc:
        raise typer.Exit(code=1) from exc

    _print_run_report(report)
    if dry_run:
        console.print("[bold blue]Dry run complete.[/] No filesystem changes made.")
    else:
        console.print("[bold green]Postbuild processing complete.[/]")


@app.command()
def audit(
    root: Optional[Path] = typer.Argument(
        None,
        help="Output directory (defaults to PRETTYDIST_ROOT, the config file, then ./dist).",
        show_default=False,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a TOML configuration file.",
        callback=_resolve_config_path,
    ),
) -> None:
    """
    List image references in pages that point at missing files.
    """
    audit_config = _load_config_or_exit(config, root)
    root_path = audit_config.resolved_root
    if not root_path.is_dir():
        console.print(f"[bold red]Output directory not found:[/] {root_path}")
        raise typer.Exit(code=1)
    try:
        dangling = find_dangling_references(audit_config)
    except (OSError, UnicodeDecodeError) as exc:
        console.print(f"[bold red]Audit failed:[/] {exc}")
        raise typer.Exit(code=1) from exc

    if not dangling:
        console.print("[bold green]No dangling image references.[/]")
        return

    table = Table(title="Dangling Image References")
    table.add_column("Page")
    table.add_column("Line", justify="right")
    table.add_column("Reference", overflow="fold")
    for item in dangling:
        table.add_row(display_path(item.page, root_path), str(item.line), item.reference)
    console.print(table)
    raise typer.Exit(code=1)


@app.command("show-config")
def show_config(
    root: Optional[Path] = typer.Argument(
        None,
        help="Output directory (defaults to PRETTYDIST_ROOT, the config file, then ./dist).",
        show_default=False,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a TOML configuration file.",
        callback=_resolve_config_path,
    ),
) -> None:
    """
    Print the settings a run would use.
    """
    resolved = _load_config_or_exit(config, root)
    table = Table(title="Postbuild Configuration")
    table.add_column("Key")
    table.add_column("Value", overflow="fold")
    table.add_row("Root", str(resolved.resolved_root))
    table.add_row("HTML extension", resolved.html_extension)
    table.add_row("Index file", resolved.index_filename)
    table.add_row("Image extensions", ", ".join(resolved.image_extensions))
    table.add_row("Webp extension", resolved.webp_extension)
    table.add_row("Asset prefix", resolved.asset_prefix)
    table.add_row("Skip unchanged writes", "yes" if resolved.skip_unchanged_writes else "no")
    console.print(table)


def main() -> None:
    """
    Entry-point used by the console script defined in pyproject.toml.
    """
    app()
