"""Clean command implementation."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from ..config import Config
from ..content import clean_html

console = Console(stderr=True)


def clean_command(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="HTML file to clean"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the result here instead of stdout"
    ),
    keep_scripts: bool = typer.Option(False, "--keep-scripts", help="Keep <script> blocks"),
    keep_styles: bool = typer.Option(False, "--keep-styles", help="Keep <style> blocks"),
    keep_comments: bool = typer.Option(False, "--keep-comments", help="Keep HTML comments"),
) -> None:
    """Strip scripts, styles and comments from an HTML file."""
    sanitizer = Config().config.sanitizer
    html = path.read_text(encoding="utf-8")

    cleaned = clean_html(
        html,
        strip_scripts=sanitizer.strip_scripts and not keep_scripts,
        strip_styles=sanitizer.strip_styles and not keep_styles,
        strip_comments=sanitizer.strip_comments and not keep_comments,
    )

    if output is None:
        typer.echo(cleaned, nl=False)
        return

    output.write_text(cleaned, encoding="utf-8")
    console.print(
        f"[green]✓ Wrote {output} ({len(html) - len(cleaned)} characters removed)[/green]"
    )
