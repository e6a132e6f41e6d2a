"""Fetch command implementation."""

import asyncio
from typing import List

import typer
from rich.console import Console
from rich.table import Table

from ..config import Config
from ..resilience import FeedFetcher, FetchResult, RateLimiter, create_store

console = Console()


async def fetch_all(config: Config, urls: List[str], max_concurrent: int) -> List[FetchResult]:
    """Fetch feeds with a Redis-backed rate limiter, closing the connection afterwards."""
    store = create_store(config.redis_url)
    try:
        limiter = RateLimiter.from_config(store, config.config.rate_limit)
        fetcher = FeedFetcher(limiter, config.config.fetch, max_concurrent=max_concurrent)
        return await fetcher.fetch_all_feeds(urls)
    finally:
        await store.aclose()


def print_fetch_summary(results: List[FetchResult]) -> None:
    """Print summary of feed fetch results."""
    table = Table(title="Fetch Results")
    table.add_column("URL", style="blue")
    table.add_column("Format", style="magenta")
    table.add_column("Items", style="green", justify="right")
    table.add_column("Status")

    for result in results:
        if result.success:
            status = "[green]✓[/green]"
            feed_format = result.document.format
        else:
            retry = ""
            if result.retryable:
                retry = " (retry"
                if result.retry_delay_ms:
                    retry += f" in {result.retry_delay_ms // 1000}s"
                retry += ")"
            status = f"[red]✗ {result.error}{retry}[/red]"
            feed_format = "-"
        table.add_row(result.url, feed_format, str(result.item_count), status)

    console.print(table)

    successful = sum(1 for r in results if r.success)
    console.print(f"  Successful: [green]{successful}[/green]")
    console.print(f"  Failed: [red]{len(results) - successful}[/red]")


def fetch_command(
    urls: List[str] = typer.Argument(..., help="Feed URLs to fetch"),
    max_concurrent: int = typer.Option(5, "--max-concurrent", help="Parallel fetches", min=1),
) -> None:
    """Fetch feeds through the rate-limit and guard pipeline."""
    results = asyncio.run(fetch_all(Config(), urls, max_concurrent))
    print_fetch_summary(results)

    if not all(result.success for result in results):
        raise typer.Exit(1)
