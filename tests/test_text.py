"""Tests for Vietnamese tone folding."""
from __future__ import annotations

import pytest

from app.retrieval.text import fold_tones, normalize


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Đắk Mil", "Dak Mil"),
        ("Nguyễn Văn Đức", "Nguyen Van Duc"),
        ("Phòng Kế toán", "Phong Ke toan"),
        ("TRƯỞNG PHÒNG", "TRUONG PHONG"),
        ("đường", "duong"),
        ("plain ascii", "plain ascii"),
    ],
)
def test_fold_tones_strips_marks_and_keeps_case(raw, expected):
    assert fold_tones(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ["", "Ấp Đông Hòa", "Hợp đồng lao động", "ỹ ự ẵ ộ", "Đ", "123 - abc", "Ðặc biệt"],
)
def test_fold_tones_is_idempotent(raw):
    once = fold_tones(raw)
    assert fold_tones(once) == once


def test_fold_tones_handles_missing_input():
    assert fold_tones(None) == ""
    assert fold_tones("") == ""


def test_fold_tones_leaves_no_combining_marks():
    folded = fold_tones("ÀÁẢÃẠĂẰẮẲẴẶÂẦẤẨẪẬÈÉẺẼẸÊỀẾỂỄỆÌÍỈĨỊÒÓỎÕỌÔỒỐỔỖỘƠỜỚỞỠỢÙÚỦŨỤƯỪỨỬỮỰỲÝỶỸỴĐ")
    assert folded.isascii()


def test_normalize_lowercases_and_collapses_whitespace():
    assert normalize("  Phòng   KINH doanh\n") == "phong kinh doanh"
