"""Row selection for a question: leadership, department or keyword matching.

Strategies are tried in order and the first one whose predicate fires decides
which rows are kept. Whatever the strategy returns, ``search`` never hands back
an empty list for a non-empty dataset: it falls back to the first rows so the
model still sees the shape of the table.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional, Sequence, Tuple

from app.retrieval.models import Row
from app.retrieval.text import normalize

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 50
FALLBACK_ROWS = 20

# Header spellings seen in the exported sheets, including mojibake from
# UTF-8 bytes decoded as cp1252 on the way to the web host.
TITLE_COLUMNS: Tuple[str, ...] = ("Chức vụ", "Chuc vu", "Chá»©c vá»¥", "chuc_vu", "Title")
DEPARTMENT_COLUMNS: Tuple[str, ...] = (
    "Phòng ban",
    "Phong ban",
    "PhÃ²ng ban",
    "Bộ phận",
    "phong_ban",
    "Department",
)

LEADERSHIP_MARKERS: Tuple[str, ...] = (
    "truong phong",
    "pho phong",
    "lanh dao",
    "giam doc",
    "quan ly",
)
LEADERSHIP_TITLES: Tuple[str, ...] = (
    "truong phong",
    "pho phong",
    "truong ban",
    "giam doc",
    "pho giam doc",
)

_DEPARTMENT = re.compile(r"\b(?:phong|bo phan)\s+(\w+(?:\s+\w+)?)")
# Trailing words that end a department name rather than belong to it.
_DEPARTMENT_STOPWORDS = {"co", "la", "gom", "nao", "bao", "cua", "va", "thi", "hien"}


@dataclass(frozen=True)
class SearchStrategy:
    name: str
    matches: Callable[[str], bool]
    apply: Callable[[str, Sequence[Row]], List[Row]]


def probe_column(row: Mapping[str, str], candidates: Sequence[str]) -> Optional[str]:
    """Return the first candidate header present in ``row``."""

    for name in candidates:
        if name in row:
            return name
    return None


def row_text(row: Mapping[str, str]) -> str:
    return normalize(" ".join(str(value) for value in row.values()))


def _column_value(row: Mapping[str, str], candidates: Sequence[str]) -> str:
    column = probe_column(row, candidates)
    return normalize(row.get(column, "")) if column else ""


def _wants_leaders(text: str) -> bool:
    return any(marker in text for marker in LEADERSHIP_MARKERS)


def filter_leaders(text: str, rows: Sequence[Row]) -> List[Row]:
    """Rows whose title names a leadership position; may be empty."""

    return [
        row
        for row in rows
        if any(title in _column_value(row, TITLE_COLUMNS) for title in LEADERSHIP_TITLES)
    ]


def department_token(text: str) -> Optional[str]:
    """Extract the department name following "phong"/"bo phan", if any."""

    match = _DEPARTMENT.search(text)
    if not match:
        return None
    words = match.group(1).split()
    if len(words) > 1 and words[-1] in _DEPARTMENT_STOPWORDS:
        words = words[:-1]
    if words[0] in _DEPARTMENT_STOPWORDS:
        return None
    return " ".join(words)


def filter_department(text: str, rows: Sequence[Row]) -> List[Row]:
    token = department_token(text)
    if not token:
        return []
    return [row for row in rows if token in _column_value(row, DEPARTMENT_COLUMNS)]


def query_tokens(text: str) -> List[str]:
    return [token for token in text.split() if len(token) > 1]


def filter_keywords(text: str, rows: Sequence[Row]) -> List[Row]:
    """Rows containing ANY token of the question."""

    tokens = query_tokens(text)
    if not tokens:
        return []
    return [row for row in rows if any(token in row_text(row) for token in tokens)]


STRATEGIES: Sequence[SearchStrategy] = (
    SearchStrategy("title", _wants_leaders, filter_leaders),
    SearchStrategy("department", lambda text: department_token(text) is not None, filter_department),
    SearchStrategy("keywords", lambda text: True, filter_keywords),
)


def select_strategy(text: str) -> SearchStrategy:
    for strategy in STRATEGIES:
        if strategy.matches(text):
            return strategy
    return STRATEGIES[-1]


def search(question: str | None, rows: Sequence[Row], *, limit: int = SEARCH_LIMIT) -> List[Row]:
    """Select the rows relevant to ``question``, at most ``limit`` of them."""

    if not rows:
        return []
    text = normalize(question)
    if not text:
        return list(rows[:limit])

    strategy = select_strategy(text)
    results = strategy.apply(text, rows)[:limit]
    if not results:
        logger.debug("Strategy %s matched no rows, using first %s", strategy.name, FALLBACK_ROWS)
        return list(rows[: min(FALLBACK_ROWS, limit)])
    return results
