from __future__ import annotations

import logging
from typing import Protocol

from huntassist.config import Settings, get_settings
from huntassist.errors import GenerationError
from huntassist.llm.prompts import (
    COVER_LETTER_SYSTEM_PROMPT,
    INSIGHTS_SYSTEM_PROMPT,
    build_messages,
)
from huntassist.llm.providers import LLMProvider, build_provider, groq_config, openai_config

logger = logging.getLogger(__name__)


class ContentGenerator(Protocol):
    def generate_insights(self, resume_text: str, job_description: str) -> str: ...

    def generate_cover_letter(self, resume_text: str, job_description: str) -> str: ...


class ChatContentGenerator:
    """Generates insights and cover letters through one chat-completion provider."""

    def __init__(self, provider: LLMProvider):
        self.provider = provider

    @property
    def name(self) -> str:
        return self.provider.config.name

    def generate_insights(self, resume_text: str, job_description: str) -> str:
        return self._generate(
            operation="insights",
            system_prompt=INSIGHTS_SYSTEM_PROMPT,
            resume_text=resume_text,
            job_description=job_description,
        )

    def generate_cover_letter(self, resume_text: str, job_description: str) -> str:
        return self._generate(
            operation="cover_letter",
            system_prompt=COVER_LETTER_SYSTEM_PROMPT,
            resume_text=resume_text,
            job_description=job_description,
        )

    def _generate(self, *, operation: str, system_prompt: str, resume_text: str, job_description: str) -> str:
        messages = build_messages(system_prompt, resume_text=resume_text, job_description=job_description)
        logger.info("Generating %s provider=%s", operation, self.name)
        try:
            response = self.provider.complete_chat(messages=messages)
        except Exception as exc:
            logger.error("LLM call failed operation=%s provider=%s error=%s", operation, self.name, exc)
            raise GenerationError(operation, provider=self.name) from exc

        logger.info("Generated %s provider=%s chars=%d", operation, self.name, len(response.content))
        return response.content


class OpenAIContentGenerator(ChatContentGenerator):
    def __init__(self, settings: Settings):
        super().__init__(build_provider(openai_config(settings)))


class GroqContentGenerator(ChatContentGenerator):
    def __init__(self, settings: Settings):
        super().__init__(build_provider(groq_config(settings)))


BACKENDS: dict[str, type[ChatContentGenerator]] = {
    "primary": OpenAIContentGenerator,
    "secondary": GroqContentGenerator,
}


def build_content_generator(settings: Settings | None = None) -> ChatContentGenerator:
    settings = settings or get_settings()
    backend = BACKENDS[settings.ai_provider]
    generator = backend(settings)
    logger.info("Using %s AI backend (%s)", settings.ai_provider, generator.name)
    return generator
