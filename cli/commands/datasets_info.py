"""datasets:info – fetch the configured reference tables and show their shape."""
from __future__ import annotations

import asyncio
from typing import Any, Sequence

from rich.console import Console

from app.config import settings
from app.infra.dataset_client import DatasetFetcher


def _fmt_num(n: int) -> str:
    """Format number with Vietnamese thousands separator (e.g. 28000 -> 28.000)."""
    return f"{n:,}".replace(",", ".")


async def _fetch_all(sources: dict[str, str]) -> dict[str, Any]:
    fetcher = DatasetFetcher(timeout=settings.dataset_timeout_seconds)
    results: dict[str, Any] = {}
    for name, url in sources.items():
        try:
            results[name] = await fetcher.fetch_rows(url)
        except Exception as exc:  # reported per source, the others still print
            results[name] = exc
    return results


def run_datasets_info(names: Sequence[str] | None = None) -> int:
    """Print row count and columns for each requested source; 1 if any failed."""
    console = Console()
    sources = settings.data_sources
    selected = list(names) if names else list(sources)
    unknown = [n for n in selected if n not in sources]
    if unknown:
        console.print(f"[red]Unknown source(s):[/] {', '.join(unknown)}")
        console.print(f"[dim]Known sources: {', '.join(sources)}[/]")
        return 1

    results = asyncio.run(_fetch_all({n: sources[n] for n in selected}))

    failed = False
    for name in selected:
        outcome = results[name]
        console.print(name, style="bold blue")
        console.print(f"[yellow]URL:[/] [white]{sources[name]}[/]")
        if isinstance(outcome, Exception):
            failed = True
            console.print(f"[red]Fetch error:[/] {outcome}")
            console.print()
            continue
        columns = list(outcome[0].keys()) if outcome else []
        console.print(f"[yellow]Rows:[/] [white]{_fmt_num(len(outcome))}[/]")
        console.print("[yellow]Columns:[/]")
        for col in columns:
            console.print(f"  [dim]{col}[/]")
        console.print()
    return 1 if failed else 0
