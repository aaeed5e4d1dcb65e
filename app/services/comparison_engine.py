# app/services/comparison_engine.py
"""
Side-by-side comparison of two or more vehicles.

The narrative comes from the content generator; when it falls back, the text
is built from a simple ranking instead of a template:
  best value     → lowest price
  lowest mileage → lowest km
  newest         → highest model year
Python's sort is stable, so ties go to the vehicle listed first.
"""

from dataclasses import dataclass
from decimal import Decimal

from app.exceptions import ValidationError
from app.services.fallback_generator import format_brl, format_km
from app.services.generation_strategy import ContentGenerator, GenerationOutcome
from app.utils.sanitizer import clean_text

COMPARISON_SYSTEM_PROMPT = (
    "Você é um consultor especialista em veículos que ajuda compradores "
    "a escolherem o melhor carro para suas necessidades."
)

COMPARISON_PROMPT = """Compare os seguintes veículos e forneça um resumo das principais diferenças e vantagens de cada um:

{vehicles}

Forneça uma análise comparativa focando em:
- Custo-benefício
- Quilometragem
- Idade do veículo
- Recomendações para diferentes perfis de compradores

Responda em português brasileiro em até 200 palavras."""


@dataclass(frozen=True)
class ComparisonHighlights:
    best_value: object
    lowest_mileage: object
    newest: object


@dataclass(frozen=True)
class ComparisonResult:
    vehicles: list
    summary: str
    highlights: ComparisonHighlights
    generation: GenerationOutcome

    @property
    def used_fallback(self) -> bool:
        return self.generation.used_fallback


def rank_vehicles(vehicles: list) -> ComparisonHighlights:
    by_price = sorted(vehicles, key=lambda v: Decimal(str(v.price)))
    by_km = sorted(vehicles, key=lambda v: v.km)
    by_year = sorted(vehicles, key=lambda v: -v.model_year)
    return ComparisonHighlights(best_value=by_price[0], lowest_mileage=by_km[0], newest=by_year[0])


def _label(vehicle) -> str:
    return f"{clean_text(vehicle.make)} {clean_text(vehicle.model)} {vehicle.model_year}"


def _short_name(vehicle) -> str:
    return f"{clean_text(vehicle.make)} {clean_text(vehicle.model)}"


def fallback_comparison(vehicles: list) -> str:
    h = rank_vehicles(vehicles)
    return "\n".join([
        "Comparação dos veículos selecionados:",
        "",
        f"**Melhor custo-benefício**: {_label(h.best_value)} - R$ {format_brl(h.best_value.price)}",
        f"**Menor quilometragem**: {_label(h.lowest_mileage)} - {format_km(h.lowest_mileage.km)} km",
        f"**Mais novo**: {_label(h.newest)}",
        "",
        f"Para economia inicial, o {_short_name(h.best_value)} é a melhor escolha. "
        f"Para menor desgaste, o {_short_name(h.lowest_mileage)} é o ideal. "
        f"Para tecnologia mais recente, a melhor opção é o {_short_name(h.newest)}.",
    ])


def _prompt_lines(vehicles: list) -> str:
    return "\n".join(
        f"- {_label(v)} - R$ {format_brl(v.price)} - {format_km(v.km)} km" for v in vehicles
    )


async def compare(vehicles: list, generator: ContentGenerator) -> ComparisonResult:
    """Compare vehicles in the order given. Fewer than two is a ValidationError."""
    if len(vehicles) < 2:
        raise ValidationError("At least two vehicles are required for a comparison")

    outcome = await generator.generate(
        "comparison",
        COMPARISON_SYSTEM_PROMPT,
        COMPARISON_PROMPT.format(vehicles=_prompt_lines(vehicles)),
        generator.comparison_model,
        lambda: fallback_comparison(vehicles),
    )
    return ComparisonResult(
        vehicles=list(vehicles),
        summary=outcome.text,
        highlights=rank_vehicles(vehicles),
        generation=outcome,
    )
