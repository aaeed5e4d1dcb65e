# app/services/generation_provider.py
"""
Text-completion providers behind one small interface.

Exactly one provider is chosen at startup by build_generation_provider():
  - OpenAIGenerationProvider   when OPENAI_API_KEY is set and well-formed
  - DisabledGenerationProvider otherwise (always raises ProviderError)
Callers never check for a missing client; the content generator reads
`enabled` to skip the network call entirely.

Retries are delegated to the OpenAI client's own policy (max_retries);
every failure it gives up on is reported as ProviderError.
"""

from abc import ABC, abstractmethod

import httpx
import openai
from openai import AsyncOpenAI

from app.config import Settings, settings as default_settings
from app.exceptions import ProviderError
from app.utils.logger import get_logger
from app.utils.sanitizer import is_valid_api_key

logger = get_logger(__name__)


class GenerationProvider(ABC):
    name = "base"
    enabled = True

    @abstractmethod
    async def complete(self, system_prompt: str, user_prompt: str, *, model: str) -> str:
        """Return the provider's text for the prompt, or raise ProviderError."""


class DisabledGenerationProvider(GenerationProvider):
    name = "disabled"
    enabled = False

    def __init__(self, reason: str = "no API key configured"):
        self.reason = reason

    async def complete(self, system_prompt: str, user_prompt: str, *, model: str) -> str:
        raise ProviderError(f"Generation provider disabled: {self.reason}")


class OpenAIGenerationProvider(GenerationProvider):
    name = "openai"

    def __init__(self, api_key: str, timeout: float = 30.0, max_retries: int = 3,
                 max_tokens: int = 300, temperature: float = 0.7):
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._client = AsyncOpenAI(
            api_key=api_key,
            timeout=httpx.Timeout(timeout, connect=5.0),
            max_retries=max_retries,
        )

    async def complete(self, system_prompt: str, user_prompt: str, *, model: str) -> str:
        try:
            completion = await self._client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except openai.APITimeoutError as e:
            raise ProviderError("OpenAI request timed out") from e
        except openai.RateLimitError as e:
            # Covers both request-rate limits and "exceeded your current quota"
            raise ProviderError(f"OpenAI rate limit or quota exceeded: {e}") from e
        except openai.AuthenticationError as e:
            raise ProviderError("OpenAI rejected the API key") from e
        except openai.APIError as e:
            raise ProviderError(f"OpenAI API error: {e}") from e

        if not completion.choices:
            return ""
        return completion.choices[0].message.content or ""


def build_generation_provider(config: Settings = default_settings) -> GenerationProvider:
    key = config.OPENAI_API_KEY
    if not key:
        logger.info("OPENAI_API_KEY not set; content generation runs in fallback-only mode")
        return DisabledGenerationProvider()
    if not is_valid_api_key(key):
        logger.warning("OPENAI_API_KEY has an invalid format; content generation runs in fallback-only mode")
        return DisabledGenerationProvider("API key failed the format check")
    return OpenAIGenerationProvider(
        api_key=key,
        timeout=config.GENERATION_TIMEOUT_SECONDS,
        max_retries=config.GENERATION_MAX_RETRIES,
        max_tokens=config.OPENAI_MAX_TOKENS,
        temperature=config.OPENAI_TEMPERATURE,
    )
