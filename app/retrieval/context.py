"""Render selected rows into a size-capped JSON block for the prompt."""
from __future__ import annotations

import json
from typing import List, Sequence

from app.retrieval.models import Row

MAX_CONTEXT_ROWS = 40
MAX_CONTEXT_CHARS = 8000
TRUNCATION_MARKER = "\n... (đã rút gọn bớt dòng dữ liệu)"

NO_MATCH_CONTEXT = "Không có dòng dữ liệu phù hợp trong bảng."
UNAVAILABLE_CONTEXT = (
    "KHÔNG TẢI ĐƯỢC DỮ LIỆU: bảng dữ liệu nội bộ hiện không truy cập được. "
    "Không được kết luận rằng thông tin không tồn tại; hãy báo người dùng thử lại sau."
)


def _render(parts: Sequence[str]) -> str:
    if not parts:
        return "[]"
    return "[\n" + ",\n".join(parts) + "\n]"


def _record(row: Row) -> str:
    text = json.dumps(row, ensure_ascii=False, indent=2)
    # Nest one level so the array reads like json.dumps(rows, indent=2).
    return "\n".join("  " + line for line in text.splitlines())


def build_context(
    rows: Sequence[Row],
    *,
    max_rows: int = MAX_CONTEXT_ROWS,
    max_chars: int = MAX_CONTEXT_CHARS,
) -> str:
    """Serialize up to ``max_rows`` rows, cutting at the last whole record.

    The result never exceeds ``max_chars`` plus the truncation marker.
    """

    if not rows:
        return NO_MATCH_CONTEXT

    limited = list(rows[:max_rows])
    parts: List[str] = []
    for row in limited:
        candidate = parts + [_record(row)]
        if len(_render(candidate)) > max_chars:
            break
        parts = candidate

    if not parts:
        # A single record larger than the budget; cut it by position.
        return _render([_record(limited[0])])[:max_chars] + TRUNCATION_MARKER
    if len(parts) < len(limited):
        return _render(parts) + TRUNCATION_MARKER
    return _render(parts)
