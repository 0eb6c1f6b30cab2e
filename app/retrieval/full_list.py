"""Detect questions asking for a list, and whether they want the whole table."""
from __future__ import annotations

import re
from typing import Tuple

from app.retrieval.text import normalize

FULL_LIST_TRIGGERS: Tuple[str, ...] = (
    "tat ca",
    "toan bo",
    "day du",
    "tong danh sach",
    "toan the",
)

LIST_ENTITIES: Tuple[str, ...] = ("nhan vien", "nhan su", "can bo", "cong nhan")

# Any of these turns "danh sach nhan vien ..." into a filtered request.
LIST_QUALIFIERS: Tuple[str, ...] = (
    "phong",
    "bo phan",
    "dang lam",
    "nghi viec",
    "da nghi",
    "chuc vu",
    "truong",
    "giam doc",
    "nam",
    "nu",
    "ten",
)

LIST_REQUEST_MARKERS: Tuple[str, ...] = (
    "danh sach",
    "liet ke",
    "xuat file",
    "file excel",
    "tai ve",
)

_BARE_LIST = re.compile(r"\bdanh sach\s+(?:cac\s+)?(%s)\b" % "|".join(LIST_ENTITIES))


def _has_word(text: str, phrase: str) -> bool:
    return re.search(r"\b%s\b" % re.escape(phrase), text) is not None


def wants_full_list(question: str | None) -> bool:
    text = normalize(question)
    if not text:
        return False
    if any(trigger in text for trigger in FULL_LIST_TRIGGERS):
        return True
    if not _BARE_LIST.search(text):
        return False
    return not any(_has_word(text, qualifier) for qualifier in LIST_QUALIFIERS)


def is_list_request(question: str | None) -> bool:
    """True when the user expects a downloadable table."""

    text = normalize(question)
    if not text:
        return False
    return wants_full_list(text) or any(marker in text for marker in LIST_REQUEST_MARKERS)
