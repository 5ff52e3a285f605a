"""Unit tests for GroqClient (bugblaze.groq_client).

Tests cover:
- CompletionResponse defaults
- GroqClient.__init__
- GroqClient._extract_text
- GroqClient.complete (success, payload, connect error, timeout, auth and
  other HTTP errors, unexpected error)
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from bugblaze.config import GroqConfig
from bugblaze.groq_client import CompletionResponse, GroqClient


def _mock_client(post: AsyncMock) -> AsyncMock:
    mock_client = AsyncMock()
    mock_client.post = post
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    return mock_client


def _status_error(status: int, text: str = "error body") -> httpx.HTTPStatusError:
    mock_resp = MagicMock()
    mock_resp.status_code = status
    mock_resp.text = text
    return httpx.HTTPStatusError("HTTP error", request=MagicMock(), response=mock_resp)


MESSAGES = [
    {"role": "system", "content": "You are helpful."},
    {"role": "user", "content": "Explain this error"},
]


# ---------------------------------------------------------------------------
# CompletionResponse
# ---------------------------------------------------------------------------


class TestCompletionResponse:
    @pytest.mark.unit
    def test_defaults(self):
        resp = CompletionResponse()
        assert resp.text == ""
        assert resp.success is True
        assert resp.error is None
        assert resp.error_kind is None


# ---------------------------------------------------------------------------
# GroqClient.__init__ / helpers
# ---------------------------------------------------------------------------


class TestGroqClientInit:
    @pytest.mark.unit
    def test_defaults(self):
        client = GroqClient("gsk_key")
        assert client.base_url == "https://api.groq.com/openai/v1"
        assert client.timeout == 120

    @pytest.mark.unit
    def test_custom_settings(self):
        client = GroqClient("gsk_key", GroqConfig(url="http://localhost:8080/v1/", timeout=30))
        assert client.base_url == "http://localhost:8080/v1"
        assert client.timeout == 30


class TestExtractText:
    @pytest.mark.unit
    def test_extract_text(self):
        data = {"choices": [{"message": {"role": "assistant", "content": "Hello"}}]}
        assert GroqClient._extract_text(data) == "Hello"

    @pytest.mark.unit
    def test_extract_text_missing(self):
        assert GroqClient._extract_text({}) == ""
        assert GroqClient._extract_text({"choices": []}) == ""
        assert GroqClient._extract_text({"choices": [{"message": {"content": None}}]}) == ""


# ---------------------------------------------------------------------------
# GroqClient.complete
# ---------------------------------------------------------------------------


class TestComplete:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_success(self):
        mock_response = MagicMock()
        mock_response.json.return_value = {
            "model": "llama3-8b-8192",
            "choices": [{"message": {"role": "assistant", "content": "Missing semicolon."}}],
        }
        mock_response.raise_for_status = MagicMock()
        mock_client = _mock_client(AsyncMock(return_value=mock_response))

        with patch("httpx.AsyncClient", return_value=mock_client):
            result = await GroqClient("gsk_key").complete(MESSAGES)

        assert result.success is True
        assert result.text == "Missing semicolon."
        assert result.model == "llama3-8b-8192"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_payload(self):
        mock_response = MagicMock()
        mock_response.json.return_value = {"choices": []}
        mock_response.raise_for_status = MagicMock()
        mock_client = _mock_client(AsyncMock(return_value=mock_response))

        with patch("httpx.AsyncClient", return_value=mock_client) as client_cls:
            await GroqClient("gsk_key").complete(MESSAGES, max_tokens=4096)

        call_args = mock_client.post.call_args
        assert call_args[0][0] == "/chat/completions"
        payload = call_args[1]["json"]
        assert payload["model"] == "llama3-8b-8192"
        assert payload["messages"] == MESSAGES
        assert payload["temperature"] == 0.3
        assert payload["max_tokens"] == 4096
        headers = client_cls.call_args[1]["headers"]
        assert headers["Authorization"] == "Bearer gsk_key"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_connect_error(self):
        mock_client = _mock_client(AsyncMock(side_effect=httpx.ConnectError("Connection refused")))
        with patch("httpx.AsyncClient", return_value=mock_client):
            result = await GroqClient("gsk_key").complete(MESSAGES)

        assert result.success is False
        assert result.error_kind == "network"
        assert "Cannot connect" in result.error

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_timeout(self):
        mock_client = _mock_client(AsyncMock(side_effect=httpx.TimeoutException("timed out")))
        with patch("httpx.AsyncClient", return_value=mock_client):
            result = await GroqClient("gsk_key").complete(MESSAGES)

        assert result.success is False
        assert result.error_kind == "network"
        assert "timed out" in result.error

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_auth_error(self, status: int):
        mock_client = _mock_client(AsyncMock(side_effect=_status_error(status, "Invalid API Key")))
        with patch("httpx.AsyncClient", return_value=mock_client):
            result = await GroqClient("bad").complete(MESSAGES)

        assert result.success is False
        assert result.error_kind == "auth"
        assert str(status) in result.error

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_http_error(self):
        mock_client = _mock_client(AsyncMock(side_effect=_status_error(500, "Internal Server Error")))
        with patch("httpx.AsyncClient", return_value=mock_client):
            result = await GroqClient("gsk_key").complete(MESSAGES)

        assert result.success is False
        assert result.error_kind == "http"
        assert "500" in result.error

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unexpected_error(self):
        mock_client = _mock_client(AsyncMock(side_effect=RuntimeError("boom")))
        with patch("httpx.AsyncClient", return_value=mock_client):
            result = await GroqClient("gsk_key").complete(MESSAGES)

        assert result.success is False
        assert result.error_kind == "unexpected"
        assert "boom" in result.error
