"""Parse and validate command implementations."""

import json
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional

import typer
from rich.console import Console
from rich.table import Table

from ..errors import FeedParseError, FeedValidationError, ValidationIssue, describe_error
from ..parsers import (
    check_opml,
    dump_opml,
    parse_json_feed,
    parse_opml,
    parse_rss,
    validate_json_feed,
    validate_opml,
)

console = Console()


class InputFormat(str, Enum):
    rss = "rss"
    json = "json"
    opml = "opml"


def _load_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except ValueError as e:
        console.print(f"[red]Invalid JSON in {path}: {e}[/red]")
        raise typer.Exit(1)


def print_issues(issues: List[ValidationIssue], title: str = "Validation issues") -> None:
    """Print validation issues as a table."""
    table = Table(title=title)
    table.add_column("Path", style="cyan")
    table.add_column("Message", style="red")

    for issue in issues:
        table.add_row(issue.path or "<root>", issue.message)

    console.print(table)


def _parse(path: Path, input_format: InputFormat, strict: bool) -> Optional[str]:
    if input_format is InputFormat.rss:
        return parse_rss(path.read_bytes()).model_dump_json(indent=2, exclude_none=True)

    if input_format is InputFormat.json:
        feed = parse_json_feed(_load_json(path), strict=strict)
        return feed.model_dump_json(indent=2, exclude_none=True)

    if strict:
        validated = validate_opml(path.read_bytes())
        return validated.model_dump_json(indent=2, exclude_none=True, by_alias=True)

    document = parse_opml(path.read_bytes())
    return dump_opml(document) if document is not None else None


def parse_command(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Feed file to parse"),
    input_format: InputFormat = typer.Option(
        InputFormat.rss, "--format", "-f", help="Format of the file"
    ),
    strict: bool = typer.Option(
        False, "--strict", help="Validate against the declared version (JSON Feed, OPML)"
    ),
) -> None:
    """Parse a feed file and print its canonical JSON."""
    try:
        output = _parse(path, input_format, strict)
    except FeedValidationError as e:
        print_issues(e.issues)
        raise typer.Exit(1)
    except FeedParseError as e:
        console.print(f"[red]{describe_error(e)}[/red]")
        raise typer.Exit(1)

    if output is None:
        console.print("[yellow]Empty document[/yellow]")
        return

    console.print_json(output)


def validate_command(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Feed file to validate"),
    input_format: InputFormat = typer.Option(
        InputFormat.json, "--format", "-f", help="Format of the file (json or opml)"
    ),
) -> None:
    """Strictly validate a JSON Feed or OPML file."""
    if input_format is InputFormat.rss:
        console.print("[red]RSS has no strict mode; use 'parse' instead.[/red]")
        raise typer.Exit(1)

    if input_format is InputFormat.json:
        result = validate_json_feed(_load_json(path))
    else:
        result = check_opml(path.read_bytes())

    if result.is_valid:
        console.print(f"[green]✓ {path.name} is valid[/green]")
        return

    print_issues(result.error.issues, title=f"{path.name} is invalid")
    raise typer.Exit(1)
