"""Main CLI application."""

import logging

import typer
from dotenv import load_dotenv
from rich.logging import RichHandler

# Load .env file if it exists
load_dotenv()

from .clean import clean_command
from .fetch import fetch_command
from .init import init_command
from .parse import parse_command, validate_command
from .ratelimit import ratelimit_app

app = typer.Typer(
    name="syndicore",
    help="Feed parsing, HTML sanitizing and rate-limit aware fetching",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )


# Register commands
app.command("init")(init_command)
app.command("parse")(parse_command)
app.command("validate")(validate_command)
app.command("clean")(clean_command)
app.command("fetch")(fetch_command)
app.add_typer(ratelimit_app, name="ratelimit", help="Inspect and set domain cool-downs")


if __name__ == "__main__":
    app()
