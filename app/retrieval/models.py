"""Shared retrieval data models."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from app.retrieval.topics import Topic

Row = Dict[str, str]


@dataclass(frozen=True, slots=True)
class DatasetSnapshot:
    source: str
    rows: Sequence[Row]
    loaded_at: float
    stale: bool = False


@dataclass(slots=True)
class ChatResult:
    reply: str
    topic: Topic
    model: str
    download_url: Optional[str] = None
    device_id: Optional[str] = None
    rows_used: List[Row] = field(default_factory=list)
