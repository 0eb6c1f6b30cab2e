"""Minimal OpenAI-compatible chat completion client."""
from __future__ import annotations

from typing import List, Mapping, Optional

import httpx


class CompletionError(RuntimeError):
    """The language model call failed."""


class RateLimitedError(CompletionError):
    """The language model API answered 429 Too Many Requests."""


class ChatCompletionClient:
    """Thin wrapper around ``POST /chat/completions``."""

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "gpt-4.1-mini",
        timeout: float = 60.0,
        base_url: str = "https://api.openai.com/v1",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not api_key:
            raise ValueError("OpenAI API key is required")
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.base_url = str(base_url).rstrip("/")
        self.transport = transport

    async def complete(
        self,
        instructions: str,
        user_content: str,
        *,
        model: Optional[str] = None,
        temperature: float = 0.2,
        max_tokens: int = 800,
    ) -> str:
        """Send one system + user exchange and return the generated text."""

        payload: dict[str, object] = {
            "model": model or self.model,
            "messages": [
                {"role": "system", "content": instructions},
                {"role": "user", "content": user_content},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

        timeout_obj = httpx.Timeout(self.timeout, connect=10.0)
        async with httpx.AsyncClient(timeout=timeout_obj, transport=self.transport) as client:
            try:
                response = await client.post(
                    f"{self.base_url}/chat/completions", json=payload, headers=headers
                )
            except httpx.HTTPError as exc:
                raise CompletionError(f"chat completion request failed: {exc}") from exc

        if response.status_code == 429:
            raise RateLimitedError("chat completion rate limited (HTTP 429)")
        if response.is_error:
            raise CompletionError(
                f"chat completion failed with HTTP {response.status_code}: {response.text[:200]}"
            )

        data = response.json()
        choices: Optional[List[Mapping[str, object]]] = data.get("choices")  # type: ignore[arg-type]
        if not choices:
            raise CompletionError("chat completion returned no choices")
        message = choices[0].get("message", {})
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            return ""
        return content.strip()
