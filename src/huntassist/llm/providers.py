from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from openai import OpenAI

from huntassist.config import Settings
from huntassist.errors import ConfigurationError
from huntassist.types import ModelResponse

logger = logging.getLogger(__name__)

ChatMessage = dict[str, str]


@dataclass(slots=True)
class ProviderConfig:
    name: str
    base_url: str
    api_key: str
    model: str
    timeout_sec: int


class LLMProvider:
    def __init__(self, config: ProviderConfig):
        self.config = config
        self.client = OpenAI(
            base_url=config.base_url,
            api_key=config.api_key,
            timeout=float(config.timeout_sec),
            max_retries=0,
        )

    def complete_chat(self, *, messages: list[ChatMessage], model: str | None = None) -> ModelResponse:
        response = self.client.chat.completions.create(
            model=model or self.config.model,
            messages=messages,
        )

        text = self._extract_chat_text(response)
        raw = response.model_dump() if hasattr(response, "model_dump") else {}
        if not isinstance(raw, dict):
            raw = {"raw": raw}
        raw["provider"] = self.config.name
        return ModelResponse(content=text, raw=raw)

    @staticmethod
    def _extract_chat_text(response: Any) -> str:
        choices = getattr(response, "choices", None) or []
        if not choices:
            return ""

        message = getattr(choices[0], "message", None)
        if message is None:
            return ""

        content = getattr(message, "content", "")
        if isinstance(content, str):
            return content
        if content is None:
            return ""
        return str(content)


def openai_config(settings: Settings) -> ProviderConfig:
    return ProviderConfig(
        name="openai",
        base_url=settings.openai_base_url,
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        timeout_sec=settings.openai_timeout_sec,
    )


def groq_config(settings: Settings) -> ProviderConfig:
    return ProviderConfig(
        name="groq",
        base_url=settings.groq_base_url,
        api_key=settings.groq_api_key,
        model=settings.groq_model,
        timeout_sec=settings.groq_timeout_sec,
    )


def build_provider(config: ProviderConfig) -> LLMProvider:
    if not config.api_key:
        raise ConfigurationError(f"{config.name.upper()}_API_KEY is not set in environment variables.")
    return LLMProvider(config)
