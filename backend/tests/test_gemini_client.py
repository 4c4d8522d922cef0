import base64
import json

import httpx
import pytest

from pte_practice.exceptions import OracleUnavailable
from pte_practice.gemini_client import GeminiClient, inline_part, text_part
from pte_practice.settings import settings


def gemini_ok(text: str) -> httpx.Response:
    return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})


@pytest.fixture(autouse=True)
def ai_studio(monkeypatch):
    monkeypatch.setattr(settings, "gemini_provider", "ai_studio")
    monkeypatch.setattr(settings, "gemini_api_key", None)
    monkeypatch.setattr(settings, "openrouter_api_key", None)


class TestGenerate:
    @pytest.mark.asyncio
    async def test_returns_candidate_text(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return gemini_ok('{"overallScore": 70}')

        client = GeminiClient("test-key", model="gemini-test", transport=httpx.MockTransport(handler))
        try:
            assert await client.generate("Score this") == '{"overallScore": 70}'
        finally:
            await client.aclose()
        request = seen[0]
        assert request.url.params["key"] == "test-key"
        assert request.url.path.endswith("/models/gemini-test:generateContent")
        assert json.loads(request.content) == {"contents": [{"parts": [{"text": "Score this"}]}]}

    @pytest.mark.asyncio
    async def test_http_error(self):
        client = GeminiClient("test-key", transport=httpx.MockTransport(lambda r: httpx.Response(500, text="boom")))
        with pytest.raises(OracleUnavailable):
            await client.generate("Score this")
        await client.aclose()

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = GeminiClient("test-key", transport=httpx.MockTransport(handler))
        with pytest.raises(OracleUnavailable) as info:
            await client.generate("Score this")
        assert info.value.public_message == "Language model is unavailable"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_unexpected_payload(self):
        client = GeminiClient("test-key", transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"candidates": []})))
        with pytest.raises(OracleUnavailable):
            await client.generate("Score this")
        await client.aclose()

    @pytest.mark.asyncio
    async def test_missing_key_fails_on_call(self):
        calls = []
        client = GeminiClient(transport=httpx.MockTransport(lambda r: calls.append(r) or gemini_ok("x")))
        with pytest.raises(OracleUnavailable, match="GEMINI_API_KEY"):
            await client.generate("Score this")
        assert calls == []
        await client.aclose()


class TestOpenRouterFallback:
    @pytest.fixture(autouse=True)
    def openrouter(self, monkeypatch):
        monkeypatch.setattr(settings, "openrouter_api_key", "or-key")

    @staticmethod
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "openrouter.ai":
            assert request.headers["Authorization"] == "Bearer or-key"
            body = json.loads(request.content)
            assert body["messages"][0]["content"] == "Score this"
            return httpx.Response(200, json={"choices": [{"message": {"content": "from openrouter"}}]})
        return httpx.Response(503, text="overloaded")

    @pytest.mark.asyncio
    async def test_text_prompt_falls_back(self):
        client = GeminiClient("test-key", transport=httpx.MockTransport(self.handler))
        try:
            assert await client.generate("Score this") == "from openrouter"
        finally:
            await client.aclose()

    @pytest.mark.asyncio
    async def test_multimodal_does_not_fall_back(self):
        client = GeminiClient("test-key", transport=httpx.MockTransport(self.handler))
        with pytest.raises(OracleUnavailable):
            await client.generate_multimodal([text_part("Transcribe"), inline_part(b"abc", "audio/webm")])
        await client.aclose()

    @pytest.mark.asyncio
    async def test_both_providers_down(self):
        client = GeminiClient("test-key", transport=httpx.MockTransport(lambda r: httpx.Response(502)))
        with pytest.raises(OracleUnavailable, match="OpenRouter"):
            await client.generate("Score this")
        await client.aclose()


def test_inline_part_encodes_base64():
    part = inline_part(b"\x00\x01audio", "audio/wav")
    assert part["inline_data"]["mime_type"] == "audio/wav"
    assert base64.b64decode(part["inline_data"]["data"]) == b"\x00\x01audio"
