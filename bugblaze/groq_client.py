"""Async client for the Groq chat-completions API.

Wraps the OpenAI-compatible ``/chat/completions`` endpoint with timeout
handling and structured responses. Failures never raise: they come back as
a ``CompletionResponse`` with ``success=False`` and an ``error_kind`` the
commands use to pick the right hint.

Typical usage::

    client = GroqClient(api_key=config.require_apikey())
    resp = await client.complete(
        [{"role": "system", "content": "..."}, {"role": "user", "content": "..."}]
    )
    print(resp.text)
"""

from __future__ import annotations

import httpx
from pydantic import BaseModel, Field

from bugblaze.config import GroqConfig


class CompletionResponse(BaseModel):
    """Structured response from one chat-completion call."""

    text: str = Field(default="", description="Generated text")
    model: str = Field(default="", description="Model that produced the response")
    success: bool = Field(default=True, description="Whether the request succeeded")
    error: str | None = Field(default=None, description="Error message on failure")
    error_kind: str | None = Field(
        default=None, description="auth, network, http or unexpected"
    )


class GroqClient:
    """Async client for the Groq REST API.

    Every call opens a fresh ``httpx.AsyncClient`` with the configured base
    URL, bearer token and timeout.
    """

    def __init__(self, api_key: str, settings: GroqConfig | None = None) -> None:
        self.api_key = api_key
        self.settings = settings or GroqConfig()
        self.base_url = self.settings.url.rstrip("/")
        self.timeout = self.settings.timeout

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
        )

    @staticmethod
    def _extract_text(data: dict) -> str:
        """Pull the assistant message out of a chat-completions response."""
        choices = data.get("choices") or []
        if not choices:
            return ""
        message = choices[0].get("message") or {}
        return message.get("content") or ""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def complete(
        self,
        messages: list[dict[str, str]],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> CompletionResponse:
        """Send role-tagged messages and return the single completion.

        Args:
            messages: Ordered ``{"role", "content"}`` dicts.
            model: Model name; defaults to the configured model.
            temperature: Sampling temperature; defaults to the configured one.
            max_tokens: Completion budget; defaults to the configured one.

        Returns:
            A ``CompletionResponse`` with the generated text or an error.
        """
        model = model or self.settings.model
        payload: dict = {
            "model": model,
            "messages": messages,
            "temperature": self.settings.temperature if temperature is None else temperature,
            "max_tokens": max_tokens or self.settings.max_tokens,
        }

        try:
            async with self._client() as client:
                response = await client.post("/chat/completions", json=payload)
                response.raise_for_status()
                data = response.json()
                return CompletionResponse(
                    text=self._extract_text(data),
                    model=data.get("model", model),
                    success=True,
                )
        except httpx.ConnectError:
            return CompletionResponse(
                model=model,
                success=False,
                error=f"Cannot connect to {self.base_url}. Check your network connection.",
                error_kind="network",
            )
        except httpx.TimeoutException:
            return CompletionResponse(
                model=model,
                success=False,
                error=f"Request timed out after {self.timeout}s.",
                error_kind="network",
            )
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            return CompletionResponse(
                model=model,
                success=False,
                error=f"Groq returned HTTP {status}: {exc.response.text[:500]}",
                error_kind="auth" if status in (401, 403) else "http",
            )
        except Exception as exc:  # noqa: BLE001
            return CompletionResponse(
                model=model,
                success=False,
                error=f"Unexpected error during completion: {exc}",
                error_kind="unexpected",
            )
