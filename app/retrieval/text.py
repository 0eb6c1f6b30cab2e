"""Vietnamese tone folding used before every keyword comparison."""
from __future__ import annotations

import re
import unicodedata

_WHITESPACE = re.compile(r"\s+")


def fold_tones(text: str | None) -> str:
    """Strip diacritics and fold đ/Đ to d/D, preserving case.

    "Phòng Kế toán" -> "Phong Ke toan"
    """

    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", str(text))
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return unicodedata.normalize("NFC", stripped).replace("đ", "d").replace("Đ", "D")


def normalize(text: str | None) -> str:
    """Fold tones, lowercase and collapse whitespace."""

    return _WHITESPACE.sub(" ", fold_tones(text).lower()).strip()
