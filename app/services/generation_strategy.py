# app/services/generation_strategy.py
"""
Primary/fallback content generation.

ContentGenerator asks the configured provider for text under a hard deadline
and falls back to deterministic text on any disqualifying outcome:
  - provider disabled (missing or malformed key)  → provider is not called
  - deadline expired                               → call cancelled, not retried
  - ProviderError (quota, auth, API failure) or any other provider exception
  - reply shorter than GENERATION_MIN_LENGTH
The only error that escapes is ValidationError, raised before any call when
the input looks like an injection attempt.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Optional

from app.config import settings
from app.exceptions import ProviderError
from app.services.fallback_generator import fallback_description, format_brl, format_km
from app.services.generation_provider import GenerationProvider
from app.utils.logger import get_logger
from app.utils.sanitizer import sanitize_text

logger = get_logger(__name__)

OUTCOME_SUCCESS = "success"
OUTCOME_DISABLED = "disabled"
OUTCOME_TIMEOUT = "timeout"
OUTCOME_PROVIDER_ERROR = "provider_error"
OUTCOME_TOO_SHORT = "too_short"

DESCRIPTION_SYSTEM_PROMPT = (
    "Você é um especialista em redação para vendas de veículos. "
    "Crie descrições atrativas e profissionais que ajudem na venda de carros."
)

DESCRIPTION_PROMPT = """Gere uma descrição atrativa e profissional para um veículo com as seguintes características:

Marca: {make}
Modelo: {model}
Ano de Fabricação: {fabricate_year}
Ano do Modelo: {model_year}
Cor: {color}
Quilometragem: {km} km
Preço: R$ {price}

A descrição deve:
- Ser escrita em português brasileiro
- Ter entre 100 e 200 palavras
- Destacar as principais características e vantagens do veículo
- Ser persuasiva, mas honesta
- Mencionar economia, conforto e segurança quando relevante
- Ser adequada para um site de venda de veículos

Não inclua informações que não foram fornecidas."""


@dataclass(frozen=True)
class GenerationOutcome:
    text: str
    used_fallback: bool
    outcome: str
    latency_ms: float
    provider: str
    model: Optional[str] = None

    def audit_details(self) -> dict:
        return {
            "outcome": self.outcome,
            "used_fallback": self.used_fallback,
            "latency_ms": self.latency_ms,
            "provider": self.provider,
            "model": self.model,
        }


@dataclass(frozen=True)
class SanitizedRequest:
    make: str
    model: str
    fabricate_year: int
    model_year: int
    color: str
    km: int
    price: str


def sanitize_request(request) -> SanitizedRequest:
    return SanitizedRequest(
        make=sanitize_text(request.make, "make"),
        model=sanitize_text(request.model, "model"),
        fabricate_year=request.fabricate_year,
        model_year=request.model_year,
        color=sanitize_text(request.color, "color"),
        km=request.km,
        price=request.price,
    )


class ContentGenerator:
    def __init__(self, provider: GenerationProvider, *,
                 timeout: float = None, min_length: int = None,
                 description_model: str = None, comparison_model: str = None):
        self.provider = provider
        self.timeout = settings.GENERATION_TIMEOUT_SECONDS if timeout is None else timeout
        self.min_length = settings.GENERATION_MIN_LENGTH if min_length is None else min_length
        self.description_model = description_model or settings.OPENAI_DESCRIPTION_MODEL
        self.comparison_model = comparison_model or settings.OPENAI_COMPARISON_MODEL

    async def generate(self, operation: str, system_prompt: str, user_prompt: str, model: str,
                       fallback: Callable[[], str]) -> GenerationOutcome:
        """Run one provider attempt under the deadline; return fallback text on any failure."""
        start = time.perf_counter()

        if not self.provider.enabled:
            return self._fallback(operation, fallback, OUTCOME_DISABLED, start, model)

        try:
            text = await asyncio.wait_for(
                self.provider.complete(system_prompt, user_prompt, model=model),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"[GEN] {operation}: provider exceeded {self.timeout}s deadline")
            return self._fallback(operation, fallback, OUTCOME_TIMEOUT, start, model)
        except ProviderError as e:
            logger.warning(f"[GEN] {operation}: {str(e)[:200]}")
            return self._fallback(operation, fallback, OUTCOME_PROVIDER_ERROR, start, model)
        except Exception as e:
            logger.error(f"[GEN] {operation}: unexpected {type(e).__name__} from {self.provider.name}: {e}",
                         exc_info=True)
            return self._fallback(operation, fallback, OUTCOME_PROVIDER_ERROR, start, model)

        text = (text or "").strip()
        if len(text) < self.min_length:
            logger.warning(f"[GEN] {operation}: provider reply too short ({len(text)} chars)")
            return self._fallback(operation, fallback, OUTCOME_TOO_SHORT, start, model)

        latency = _elapsed_ms(start)
        logger.info(f"[GEN] {operation}: provider={self.provider.name} model={model} "
                    f"outcome={OUTCOME_SUCCESS} latency={latency}ms fallback=False")
        return GenerationOutcome(text=text, used_fallback=False, outcome=OUTCOME_SUCCESS,
                                 latency_ms=latency, provider=self.provider.name, model=model)

    def _fallback(self, operation, fallback, outcome, start, model) -> GenerationOutcome:
        text = fallback()
        latency = _elapsed_ms(start)
        logger.info(f"[GEN] {operation}: provider={self.provider.name} model={model} "
                    f"outcome={outcome} latency={latency}ms fallback=True")
        return GenerationOutcome(text=text, used_fallback=True, outcome=outcome,
                                 latency_ms=latency, provider=self.provider.name, model=model)

    async def generate_description(self, request, current_year: Optional[int] = None) -> GenerationOutcome:
        """Always returns non-empty text. Raises ValidationError on injection-looking input."""
        clean = sanitize_request(request)
        prompt = DESCRIPTION_PROMPT.format(
            make=clean.make,
            model=clean.model,
            fabricate_year=clean.fabricate_year,
            model_year=clean.model_year,
            color=clean.color,
            km=format_km(clean.km),
            price=format_brl(clean.price),
        )
        return await self.generate(
            "description",
            DESCRIPTION_SYSTEM_PROMPT,
            prompt,
            self.description_model,
            lambda: fallback_description(clean, current_year),
        )


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)
