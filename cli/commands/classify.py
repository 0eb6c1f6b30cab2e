"""classify – show how a question would be routed and which rows it selects."""
from __future__ import annotations

import asyncio

from rich.console import Console

from app.config import settings
from app.infra.dataset_client import DatasetFetcher
from app.retrieval.full_list import is_list_request, wants_full_list
from app.retrieval.search import search, select_strategy
from app.retrieval.text import normalize
from app.retrieval.topics import classify, score_topics


def run_classify(question: str, *, offline: bool = False, show: int = 10) -> int:
    console = Console()
    text = normalize(question)
    topic = classify(question)

    console.print(f"[yellow]Normalized:[/] [white]{text}[/]")
    console.print(f"[yellow]Topic:[/] [white]{int(topic)} – {topic.label}[/]")
    scores = ", ".join(f"{t.name.lower()}={s}" for t, s in score_topics(text).items())
    console.print(f"[yellow]Scores:[/] [dim]{scores}[/]")
    console.print(f"[yellow]Strategy:[/] [white]{select_strategy(text).name}[/]")
    console.print(
        f"[yellow]List request:[/] [white]{is_list_request(question)}[/] "
        f"[dim](full list: {wants_full_list(question)})[/]"
    )

    if offline:
        return 0

    url = settings.data_sources[topic.source]
    fetcher = DatasetFetcher(timeout=settings.dataset_timeout_seconds)
    try:
        rows = asyncio.run(fetcher.fetch_rows(url))
    except Exception as exc:
        console.print(f"[red]Fetch error:[/] {exc}")
        console.print("[dim]Check network access and INTIMEX_HR_CSV_URL / INTIMEX_COMPANY_CSV_URL.[/]")
        return 1

    selected = search(question, rows)
    console.print(f"[yellow]Selected:[/] [white]{len(selected)}[/] [dim]of {len(rows)} rows[/]")
    for row in selected[:show]:
        console.print("  " + " | ".join(str(v) for v in row.values()))
    return 0
