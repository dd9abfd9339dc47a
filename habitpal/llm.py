"""LLM provider abstraction for the coach.

Supports any OpenAI-compatible API, Anthropic, and Google's Gemini REST
API. Messages are always OpenAI-style dicts: {"role": ..., "content": ...}
with roles "system" | "user" | "assistant".

Usage:
    from habitpal.llm import get_client
    response = get_client().chat(messages)
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

import httpx

from habitpal.config import (
    CHAT_PROVIDER, CHAT_API_KEY, CHAT_MODEL, CHAT_BASE_URL, CHAT_TIMEOUT_SECONDS,
)

log = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Unified response from any LLM provider."""
    content: str = ""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    model: str = ""
    finish_reason: str = ""


class LLMError(RuntimeError):
    """The provider answered with an error or an unusable payload."""


class LLMProvider(ABC):

    @abstractmethod
    def chat(self, messages: list[dict], temperature: float = 0.7,
             max_tokens: int = 1024) -> LLMResponse:
        """Send a chat completion request."""
        ...

    @abstractmethod
    def provider_name(self) -> str:
        ...


def _split_system(messages: list[dict]) -> tuple[str, list[dict]]:
    """Pull system messages out into one string; return (system, rest)."""
    system_parts = []
    conversation = []
    for m in messages:
        if m["role"] == "system":
            system_parts.append(m["content"])
        else:
            conversation.append(m)
    return "\n\n".join(system_parts), conversation


class OpenAIProvider(LLMProvider):
    """OpenAI-compatible API provider (works with OpenAI, DeepSeek, Ollama, Groq, etc.)."""

    def __init__(self, api_key: str, model: str, base_url: str = ""):
        from openai import OpenAI
        self._model = model
        kwargs: dict = {"api_key": api_key, "timeout": CHAT_TIMEOUT_SECONDS}
        if base_url:
            kwargs["base_url"] = base_url
        self._client = OpenAI(**kwargs)

    def provider_name(self) -> str:
        return "openai"

    def chat(self, messages: list[dict], temperature: float = 0.7,
             max_tokens: int = 1024) -> LLMResponse:
        resp = self._client.chat.completions.create(
            model=self._model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        choice = resp.choices[0]
        return LLMResponse(
            content=choice.message.content or "",
            prompt_tokens=resp.usage.prompt_tokens if resp.usage else 0,
            completion_tokens=resp.usage.completion_tokens if resp.usage else 0,
            total_tokens=resp.usage.total_tokens if resp.usage else 0,
            model=self._model,
            finish_reason=choice.finish_reason or "",
        )


class AnthropicProvider(LLMProvider):
    """Anthropic Claude API provider."""

    def __init__(self, api_key: str, model: str):
        import anthropic
        self._model = model
        self._client = anthropic.Anthropic(api_key=api_key, timeout=CHAT_TIMEOUT_SECONDS)

    def provider_name(self) -> str:
        return "anthropic"

    def chat(self, messages: list[dict], temperature: float = 0.7,
             max_tokens: int = 1024) -> LLMResponse:
        system_msg, conversation = _split_system(messages)
        kwargs = dict(
            model=self._model,
            messages=self._merge_consecutive(conversation),
            max_tokens=max_tokens,
            temperature=temperature,
        )
        if system_msg:
            kwargs["system"] = system_msg

        resp = self._client.messages.create(**kwargs)
        content = "".join(block.text for block in resp.content if block.type == "text")
        return LLMResponse(
            content=content,
            prompt_tokens=resp.usage.input_tokens if resp.usage else 0,
            completion_tokens=resp.usage.output_tokens if resp.usage else 0,
            total_tokens=(resp.usage.input_tokens + resp.usage.output_tokens) if resp.usage else 0,
            model=self._model,
            finish_reason=resp.stop_reason or "",
        )

    @staticmethod
    def _merge_consecutive(messages: list[dict]) -> list[dict]:
        """Anthropic requires alternating roles; join same-role neighbours."""
        merged: list[dict] = []
        for m in messages:
            if merged and merged[-1]["role"] == m["role"]:
                merged[-1] = {"role": m["role"],
                              "content": merged[-1]["content"] + "\n\n" + m["content"]}
            else:
                merged.append({"role": m["role"], "content": m["content"]})
        return merged


class GeminiProvider(LLMProvider):
    """Google Generative Language API (generateContent) over plain HTTP."""

    API_BASE = "https://generativelanguage.googleapis.com/v1beta"

    def __init__(self, api_key: str, model: str, base_url: str = ""):
        self._api_key = api_key
        self._model = model if model.startswith("models/") else f"models/{model}"
        self._base_url = (base_url or self.API_BASE).rstrip("/")

    def provider_name(self) -> str:
        return "gemini"

    @staticmethod
    def _to_contents(messages: list[dict]) -> tuple[dict | None, list[dict]]:
        system_msg, conversation = _split_system(messages)
        contents = [
            {
                "role": "model" if m["role"] == "assistant" else "user",
                "parts": [{"text": m["content"]}],
            }
            for m in conversation
        ]
        system = {"parts": [{"text": system_msg}]} if system_msg else None
        return system, contents

    def chat(self, messages: list[dict], temperature: float = 0.7,
             max_tokens: int = 1024) -> LLMResponse:
        if not self._api_key:
            raise LLMError("Gemini API key missing. Set CHAT_API_KEY in your .env file.")

        system, contents = self._to_contents(messages)
        body: dict = {
            "contents": contents,
            "generationConfig": {"temperature": temperature, "maxOutputTokens": max_tokens},
        }
        if system:
            body["systemInstruction"] = system

        url = f"{self._base_url}/{self._model}:generateContent"
        try:
            resp = httpx.post(
                url,
                params={"key": self._api_key},
                json=body,
                timeout=CHAT_TIMEOUT_SECONDS,
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise LLMError(
                f"Gemini error {e.response.status_code}: {e.response.text[:200]}"
            ) from e

        data = resp.json()
        candidates = data.get("candidates") or [{}]
        parts = (candidates[0].get("content") or {}).get("parts") or []
        usage = data.get("usageMetadata") or {}
        return LLMResponse(
            content="".join(p.get("text", "") for p in parts),
            prompt_tokens=usage.get("promptTokenCount", 0),
            completion_tokens=usage.get("candidatesTokenCount", 0),
            total_tokens=usage.get("totalTokenCount", 0),
            model=self._model,
            finish_reason=candidates[0].get("finishReason", ""),
        )


# ═══════════════════════════════════════════════════════════════════════════
# Factory
# ═══════════════════════════════════════════════════════════════════════════

_cached_clients: dict[str, LLMProvider] = {}  # keyed by purpose


def _make_client(provider: str, api_key: str, model: str, base_url: str) -> LLMProvider:
    """Instantiate a fresh LLM provider."""
    if not model:
        raise ValueError("CHAT_MODEL is required but not set. Please set it in your .env file.")
    if provider == "openai":
        return OpenAIProvider(api_key=api_key, model=model, base_url=base_url)
    elif provider == "anthropic":
        return AnthropicProvider(api_key=api_key, model=model)
    elif provider == "gemini":
        return GeminiProvider(api_key=api_key, model=model, base_url=base_url)
    else:
        raise ValueError(
            f"Unknown provider: {provider!r}. "
            "Supported: openai (+ any compatible API), anthropic, gemini"
        )


def get_client(purpose: str = "coach") -> LLMProvider:
    """Get (or create) the LLM client for a given purpose."""
    if purpose in _cached_clients:
        return _cached_clients[purpose]

    client = _make_client(CHAT_PROVIDER, CHAT_API_KEY, CHAT_MODEL, CHAT_BASE_URL)
    log.info("LLM [%s]: provider=%s model=%s", purpose, CHAT_PROVIDER, CHAT_MODEL)
    _cached_clients[purpose] = client
    return client
