"""Rate limit inspection commands."""

import asyncio

import typer
from rich.console import Console

from ..config import Config
from ..resilience import RateLimiter, create_store
from ..resilience.rate_limits import domain_of

console = Console()
ratelimit_app = typer.Typer(help="Inspect and set domain cool-downs")


async def _status(config: Config, url: str) -> None:
    store = create_store(config.redis_url)
    try:
        limiter = RateLimiter.from_config(store, config.config.rate_limit)
        remaining = await limiter.remaining_seconds(url)
        delay_ms = await limiter.get_rate_limit_delay(url)
    finally:
        await store.aclose()

    domain = domain_of(url)
    if remaining:
        console.print(f"[yellow]{domain} is cooling down for {remaining}s[/yellow]")
    else:
        console.print(f"[green]{domain} is not rate limited[/green]")
    console.print(f"  Retry delay: {delay_ms} ms")


async def _mark(config: Config, url: str, seconds: int) -> int:
    store = create_store(config.redis_url)
    try:
        limiter = RateLimiter.from_config(store, config.config.rate_limit)
        seconds = min(seconds, limiter.max_delay_seconds)
        await limiter.mark_rate_limited(url, seconds)
    finally:
        await store.aclose()
    return seconds


@ratelimit_app.command("status")
def ratelimit_status(url: str = typer.Argument(..., help="Any URL on the domain")) -> None:
    """Show the cool-down of a URL's domain."""
    try:
        asyncio.run(_status(Config(), url))
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


@ratelimit_app.command("mark")
def ratelimit_mark(
    url: str = typer.Argument(..., help="Any URL on the domain"),
    seconds: int = typer.Option(..., "--seconds", "-s", help="Cool-down length", min=1),
) -> None:
    """Put a URL's domain into cool-down."""
    try:
        marked = asyncio.run(_mark(Config(), url, seconds))
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✓ {domain_of(url)} marked for {marked}s[/green]")
