"""Admission control and backoff for outbound language model calls."""
from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional, Protocol, TypeVar

from app.infra.llm_client import RateLimitedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_async(
    func: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 8.0,
    jitter: float = 0.1,
    retry_on: Callable[[Exception], bool] | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    operation: str | None = None,
) -> T:
    """Call ``func`` up to ``max_attempts`` times, doubling the delay each time.

    Exceptions rejected by ``retry_on`` propagate immediately; the last
    exception propagates once the attempts are used up.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            return await func()
        except Exception as exc:
            should_retry = retry_on(exc) if retry_on else True
            if attempt >= max_attempts or not should_retry:
                raise

            delay = min(max_delay, base_delay * (2 ** (attempt - 1)))
            if jitter:
                delay = delay * (1.0 + random.uniform(-jitter, jitter))
            delay = max(0.0, delay)

            logger.warning(
                "Retrying %s after error (attempt %s/%s, delay=%.2fs): %s",
                operation or "operation",
                attempt,
                max_attempts,
                delay,
                exc,
            )
            await sleep(delay)


class CompletionBackend(Protocol):
    async def complete(
        self,
        instructions: str,
        user_content: str,
        *,
        model: Optional[str] = None,
        temperature: float = 0.2,
        max_tokens: int = 800,
    ) -> str: ...


class CompletionGate:
    """Bounds concurrent model calls and retries rate-limited ones.

    The semaphore is held for one attempt at a time, so a request sleeping
    through its backoff does not keep a slot busy.
    """

    def __init__(
        self,
        client: CompletionBackend,
        *,
        max_concurrency: int = 2,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.client = client
        self.max_concurrency = max(1, int(max_concurrency))
        self.max_attempts = max(1, int(max_attempts))
        self.base_delay = base_delay
        self.sleep = sleep
        self._semaphore = asyncio.Semaphore(self.max_concurrency)
        self._in_flight = 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    async def _attempt(self, instructions: str, user_content: str, **kwargs: object) -> str:
        async with self._semaphore:
            self._in_flight += 1
            try:
                return await self.client.complete(instructions, user_content, **kwargs)  # type: ignore[arg-type]
            finally:
                self._in_flight -= 1

    async def complete(
        self,
        instructions: str,
        user_content: str,
        *,
        model: Optional[str] = None,
        temperature: float = 0.2,
        max_tokens: int = 800,
    ) -> str:
        return await retry_async(
            lambda: self._attempt(
                instructions,
                user_content,
                model=model,
                temperature=temperature,
                max_tokens=max_tokens,
            ),
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            retry_on=lambda exc: isinstance(exc, RateLimitedError),
            sleep=self.sleep,
            operation="chat completion",
        )
