"""Tests for the LLM layer: message conversion, Gemini REST calls, factory."""

import httpx
import pytest

import habitpal.llm as llm_module
from habitpal.llm import (
    AnthropicProvider,
    GeminiProvider,
    LLMError,
    _make_client,
    _split_system,
)


class TestSplitSystem:
    def test_system_messages_joined(self):
        msgs = [
            {"role": "system", "content": "A"},
            {"role": "user", "content": "hi"},
            {"role": "system", "content": "B"},
        ]
        system, rest = _split_system(msgs)
        assert system == "A\n\nB"
        assert rest == [{"role": "user", "content": "hi"}]

    def test_no_system(self):
        system, rest = _split_system([{"role": "user", "content": "hi"}])
        assert system == ""
        assert len(rest) == 1


class TestAnthropicMerge:
    def test_alternating_unchanged(self):
        msgs = [
            {"role": "user", "content": "Hello"},
            {"role": "assistant", "content": "Hi!"},
        ]
        assert AnthropicProvider._merge_consecutive(msgs) == msgs

    def test_same_role_neighbours_joined(self):
        msgs = [
            {"role": "user", "content": "one"},
            {"role": "user", "content": "two"},
            {"role": "assistant", "content": "ok"},
        ]
        result = AnthropicProvider._merge_consecutive(msgs)
        assert result == [
            {"role": "user", "content": "one\n\ntwo"},
            {"role": "assistant", "content": "ok"},
        ]
        # Input left untouched
        assert msgs[0]["content"] == "one"


# ═══════════════════════════════════════════════════════════════════════════
# Gemini
# ═══════════════════════════════════════════════════════════════════════════

class TestGeminiContents:
    def test_roles_mapped(self):
        system, contents = GeminiProvider._to_contents([
            {"role": "system", "content": "Be kind"},
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
        ])
        assert system == {"parts": [{"text": "Be kind"}]}
        assert [c["role"] for c in contents] == ["user", "model"]
        assert contents[1]["parts"] == [{"text": "hello"}]

    def test_no_system_instruction(self):
        system, _ = GeminiProvider._to_contents([{"role": "user", "content": "hi"}])
        assert system is None


class TestGeminiChat:
    def test_successful_call(self, monkeypatch):
        calls = {}

        def fake_post(url, params=None, json=None, timeout=None):
            calls.update(url=url, params=params, json=json)
            return httpx.Response(
                200,
                json={
                    "candidates": [{
                        "content": {"parts": [{"text": "Keep "}, {"text": "going!"}]},
                        "finishReason": "STOP",
                    }],
                    "usageMetadata": {
                        "promptTokenCount": 10,
                        "candidatesTokenCount": 3,
                        "totalTokenCount": 13,
                    },
                },
                request=httpx.Request("POST", url),
            )

        monkeypatch.setattr(llm_module.httpx, "post", fake_post)
        provider = GeminiProvider(api_key="k", model="gemini-1.5-flash-latest")
        resp = provider.chat([
            {"role": "system", "content": "Coach"},
            {"role": "user", "content": "hi"},
        ], temperature=0.5, max_tokens=100)

        assert resp.content == "Keep going!"
        assert resp.total_tokens == 13
        assert resp.finish_reason == "STOP"
        assert calls["url"].endswith("/models/gemini-1.5-flash-latest:generateContent")
        assert calls["params"] == {"key": "k"}
        assert calls["json"]["systemInstruction"] == {"parts": [{"text": "Coach"}]}
        assert calls["json"]["generationConfig"] == {"temperature": 0.5, "maxOutputTokens": 100}

    def test_http_error_becomes_llm_error(self, monkeypatch):
        def fake_post(url, **kwargs):
            return httpx.Response(403, text="API key invalid", request=httpx.Request("POST", url))

        monkeypatch.setattr(llm_module.httpx, "post", fake_post)
        with pytest.raises(LLMError, match="403"):
            GeminiProvider(api_key="bad", model="gemini-pro").chat([{"role": "user", "content": "hi"}])

    def test_missing_key(self):
        with pytest.raises(LLMError):
            GeminiProvider(api_key="", model="gemini-pro").chat([{"role": "user", "content": "hi"}])

    def test_model_prefix_not_doubled(self):
        assert GeminiProvider(api_key="k", model="models/gemini-pro")._model == "models/gemini-pro"


class TestFactory:
    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown provider"):
            _make_client("nope", "k", "m", "")

    def test_model_required(self):
        with pytest.raises(ValueError, match="CHAT_MODEL"):
            _make_client("gemini", "k", "", "")

    def test_gemini_client(self):
        client = _make_client("gemini", "k", "gemini-pro", "")
        assert client.provider_name() == "gemini"
