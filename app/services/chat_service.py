"""Classify a question, pull matching rows and ask the model for an answer."""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from app.core.assistant_profile import AssistantProfile
from app.infra.concurrency import CompletionGate
from app.retrieval.context import UNAVAILABLE_CONTEXT, build_context
from app.retrieval.dataset_cache import DatasetCache, DatasetUnavailableError
from app.retrieval.export import ExportWriter
from app.retrieval.full_list import is_list_request, wants_full_list
from app.retrieval.models import ChatResult, Row
from app.retrieval.prompts.intimex_assistant import build_chat_prompt
from app.retrieval.search import search
from app.retrieval.topics import classify

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "Xin lỗi, hiện tại em chưa tạo được câu trả lời phù hợp."


class ChatService:
    """Retrieval + generation pipeline behind ``POST /chat``."""

    def __init__(
        self,
        dataset_cache: DatasetCache,
        completion_gate: CompletionGate,
        export_writer: ExportWriter,
        profile: AssistantProfile,
    ) -> None:
        self.dataset_cache = dataset_cache
        self.completion_gate = completion_gate
        self.export_writer = export_writer
        self.profile = profile

    def _export(self, message: str, related: Sequence[Row], all_rows: Sequence[Row], source: str) -> Optional[str]:
        if not is_list_request(message):
            return None
        rows = all_rows if wants_full_list(message) else related
        try:
            return self.export_writer.write(rows, prefix=source)
        except Exception as exc:
            logger.exception("Export of %s rows from %s failed: %s", len(rows), source, exc)
            return None

    async def answer(self, message: str, *, device_id: Optional[str] = None) -> ChatResult:
        topic = classify(message)
        source = topic.source
        source_url = self.dataset_cache.sources.get(source, "")

        related: List[Row] = []
        download_url: Optional[str] = None
        stale = False
        try:
            snapshot = await self.dataset_cache.get_rows(source)
        except DatasetUnavailableError:
            context = UNAVAILABLE_CONTEXT
        else:
            stale = snapshot.stale
            related = search(message, snapshot.rows)
            context = build_context(related)
            download_url = self._export(message, related, snapshot.rows, source)
            logger.info(
                "Topic %s: selected %s of %s rows from %s%s",
                topic.name,
                len(related),
                len(snapshot.rows),
                source,
                " (stale)" if stale else "",
            )

        instructions, user_content = build_chat_prompt(
            base_prompt=self.profile.system_prompt,
            question=message,
            topic=topic,
            source_url=source_url,
            context=context,
            stale=stale,
            has_download=download_url is not None,
        )

        reply = await self.completion_gate.complete(
            instructions,
            user_content,
            model=self.profile.model,
            temperature=self.profile.temperature,
            max_tokens=self.profile.max_output_tokens,
        )

        return ChatResult(
            reply=reply or FALLBACK_REPLY,
            topic=topic,
            model=self.profile.model,
            download_url=download_url,
            device_id=device_id,
            rows_used=related,
        )
