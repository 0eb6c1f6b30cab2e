"""Centralized dependency providers for infra clients and the chat pipeline.

Construction lives in one place so the API, the CLI and the tests share the
same wiring and can swap pieces through FastAPI dependency overrides.
"""
from __future__ import annotations

from functools import lru_cache

from app.config import settings
from app.core.assistant_profile import AssistantProfile, load_assistant_profile
from app.infra.concurrency import CompletionGate
from app.infra.dataset_client import DatasetFetcher
from app.infra.llm_client import ChatCompletionClient
from app.retrieval.dataset_cache import DatasetCache
from app.retrieval.export import ExportWriter
from app.services.chat_service import ChatService


@lru_cache(maxsize=1)
def get_assistant_profile() -> AssistantProfile:
    return load_assistant_profile(settings.assistant_config_path)


@lru_cache(maxsize=1)
def get_dataset_fetcher() -> DatasetFetcher:
    return DatasetFetcher(timeout=settings.dataset_timeout_seconds)


@lru_cache(maxsize=1)
def get_dataset_cache() -> DatasetCache:
    return DatasetCache(
        get_dataset_fetcher().fetch_rows,
        settings.data_sources,
        ttl_seconds=settings.dataset_ttl_seconds,
        retry_seconds=settings.dataset_retry_seconds,
    )


@lru_cache(maxsize=1)
def get_chat_client() -> ChatCompletionClient:
    if not settings.openai_api_key:
        raise RuntimeError("OPENAI_API_KEY is required for chat completions")
    return ChatCompletionClient(
        settings.openai_api_key,
        model=get_assistant_profile().model,
        timeout=settings.llm_timeout_seconds,
        base_url=settings.llm_base_url,
    )


@lru_cache(maxsize=1)
def get_completion_gate() -> CompletionGate:
    return CompletionGate(
        get_chat_client(),
        max_concurrency=settings.llm_max_concurrency,
        max_attempts=settings.llm_max_attempts,
        base_delay=settings.llm_backoff_seconds,
    )


@lru_cache(maxsize=1)
def get_export_writer() -> ExportWriter:
    return ExportWriter(settings.downloads_dir)


@lru_cache(maxsize=1)
def get_chat_service() -> ChatService:
    return ChatService(
        dataset_cache=get_dataset_cache(),
        completion_gate=get_completion_gate(),
        export_writer=get_export_writer(),
        profile=get_assistant_profile(),
    )
