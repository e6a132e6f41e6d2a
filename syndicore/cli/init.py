"""Init command implementation."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from ..config import DEFAULT_CONFIG_PATH, ConfigModel, save_config

console = Console()


def init_command(
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help=f"Where to write the config file. Default: {DEFAULT_CONFIG_PATH}",
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing config file"),
) -> None:
    """Write a config file with default settings."""
    path = config_path or DEFAULT_CONFIG_PATH

    if path.exists() and not force:
        console.print(f"[yellow]Config already exists at {path}. Use --force to overwrite.[/yellow]")
        raise typer.Exit(1)

    save_config(ConfigModel(), path)

    console.print(
        Panel.fit(
            f"[green]✓ Config written to {path}[/green]\n\n"
            "Set SYNDICORE_REDIS_URL (or edit rate_limit.redis_url) to point at your Redis.",
            title="syndicore",
        )
    )
