"""Assistant tuning file (model, temperature, output budget, system prompt)."""
from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "Bạn là trợ lý ảo Intimex Đắk Mil, hỗ trợ các câu hỏi về công ty, nhân sự, "
    "quy trình nội bộ và chỉ số kinh doanh."
)


class AssistantProfile(BaseModel):
    model: str = "gpt-4.1-mini"
    temperature: float = Field(0.2, ge=0.0, le=2.0)
    max_output_tokens: int = Field(800, ge=1)
    system_prompt: str = DEFAULT_SYSTEM_PROMPT


def load_assistant_profile(path: str | Path) -> AssistantProfile:
    """Read the YAML profile; any failure falls back to the built-in default."""

    config_path = Path(path)
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
        if not isinstance(raw, dict):
            raise ValueError("assistant profile must be a mapping")
        profile = AssistantProfile(**{k: v for k, v in raw.items() if v is not None})
    except (OSError, yaml.YAMLError, ValueError, ValidationError) as exc:
        logger.warning(
            "Could not load assistant profile %s, using defaults: %s", config_path, exc
        )
        return AssistantProfile()

    logger.info("Assistant profile loaded: %s", config_path)
    return profile
