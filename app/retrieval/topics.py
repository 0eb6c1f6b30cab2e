"""Keyword router that assigns every question to one of four topics."""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Mapping, Optional, Sequence, Tuple

from app.retrieval.text import normalize


class Topic(IntEnum):
    OVERVIEW = 1
    PERSONNEL = 2
    PROCEDURES = 3
    METRICS = 4

    @property
    def label(self) -> str:
        return TOPIC_LABELS[self]

    @property
    def source(self) -> str:
        """Name of the dataset this topic is answered from."""

        return "personnel" if self is Topic.PERSONNEL else "company"


TOPIC_LABELS: Mapping[Topic, str] = {
    Topic.OVERVIEW: "Tổng quan công ty",
    Topic.PERSONNEL: "Nhân sự",
    Topic.PROCEDURES: "Quy trình nội bộ",
    Topic.METRICS: "Chỉ số kinh doanh",
}

DEFAULT_TOPIC = Topic.OVERVIEW

# Already tone-folded and lowercase; matched as substrings of the normalized question.
PERSONNEL_MARKERS: Tuple[str, ...] = ("nhan vien", "nhan su")

TOPIC_KEYWORDS: Mapping[Topic, Tuple[str, ...]] = {
    Topic.OVERVIEW: (
        "cong ty",
        "gioi thieu",
        "lich su",
        "thanh lap",
        "tru so",
        "dia chi",
        "linh vuc",
        "san pham",
        "tam nhin",
        "su menh",
        "intimex",
    ),
    Topic.PERSONNEL: (
        "truong phong",
        "pho phong",
        "giam doc",
        "chuc vu",
        "phong ban",
        "so dien thoai",
        "ma nv",
        "can bo",
        "nghi viec",
        "dang lam",
    ),
    Topic.PROCEDURES: (
        "quy trinh",
        "quy dinh",
        "thu tuc",
        "huong dan",
        "noi quy",
        "nghi phep",
        "cham cong",
        "bieu mau",
        "xin phep",
        "phe duyet",
    ),
    Topic.METRICS: (
        "doanh thu",
        "loi nhuan",
        "san luong",
        "chi tieu",
        "bao cao",
        "ke hoach",
        "kpi",
        "chi phi",
        "xuat khau",
        "ton kho",
        "gia ca phe",
    ),
}

_HONORIFIC_NAME = re.compile(r"\b(ong|ba|anh|chi|chu|bac)\s+([a-z]\w*)")

# Folded compounds that start with an honorific but are ordinary words.
NOT_A_NAME: Mapping[str, frozenset[str]] = {
    "ong": frozenset({"nuoc", "dan", "hut"}),
    "ba": frozenset(
        {"nguoi", "ngay", "thang", "nam", "lan", "tuan", "muoi", "tram", "trieu", "ty", "gio"}
    ),
    "anh": frozenset({"huong", "sang", "chup", "hinh"}),
    "chi": frozenset(
        {"phi", "tiet", "nhanh", "tieu", "so", "tra", "dinh", "dao", "muc", "co", "can", "la"}
    ),
    "chu": frozenset({"y", "ky", "nhat", "de", "so", "yeu", "dong", "truong", "nghia"}),
    "bac": frozenset({"luong", "tho"}),
}


@dataclass(frozen=True)
class ClassifierRule:
    """A named step of the classifier; ``decide`` returns None to defer."""

    name: str
    decide: Callable[[str], Optional[Topic]]


def score_topics(text: str) -> dict[Topic, int]:
    """Count keyword phrases of each topic found in normalized ``text``."""

    return {
        topic: sum(1 for phrase in phrases if phrase in text)
        for topic, phrases in TOPIC_KEYWORDS.items()
    }


def _personnel_marker(text: str) -> Optional[Topic]:
    if any(marker in text for marker in PERSONNEL_MARKERS):
        return Topic.PERSONNEL
    return None


def _keyword_score(text: str) -> Optional[Topic]:
    scores = score_topics(text)
    best = max(scores.values())
    if best == 0:
        return None
    return min(topic for topic, score in scores.items() if score == best)


def _honorific_name(text: str) -> Optional[Topic]:
    for match in _HONORIFIC_NAME.finditer(text):
        honorific, word = match.groups()
        if word not in NOT_A_NAME.get(honorific, ()):
            return Topic.PERSONNEL
    return None


RULES: Sequence[ClassifierRule] = (
    ClassifierRule("personnel-marker", _personnel_marker),
    ClassifierRule("keyword-score", _keyword_score),
    ClassifierRule("honorific-name", _honorific_name),
)


def classify(question: str | None) -> Topic:
    """Return the topic for ``question``; pure function of its folded form."""

    text = normalize(question)
    if not text:
        return DEFAULT_TOPIC
    for rule in RULES:
        topic = rule.decide(text)
        if topic is not None:
            return topic
    return DEFAULT_TOPIC
