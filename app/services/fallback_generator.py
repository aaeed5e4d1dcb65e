# app/services/fallback_generator.py
"""
Deterministic description writer used whenever the generation provider is
unavailable, fails, or answers with something too short to publish.

No network, no randomness: the same request and reference year always give
the same text, byte for byte. Listing copy is Brazilian Portuguese, matching
what the provider is asked to write.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from app.config import settings

LOW_MILEAGE = "baixa quilometragem"
AVERAGE_MILEAGE = "quilometragem dentro da média"
RECENT_MODEL = "modelo recente"
ESTABLISHED_MODEL = "modelo consolidado"


def format_km(km: int) -> str:
    """45000 → '45.000'"""
    return f"{km:,}".replace(",", ".")


def format_brl(price) -> str:
    """'85900' → '85.900,00'"""
    value = Decimal(str(price)).quantize(Decimal("0.01"))
    return f"{value:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")


def classify_mileage(km: int, threshold: int = None) -> str:
    threshold = settings.LOW_MILEAGE_THRESHOLD_KM if threshold is None else threshold
    return LOW_MILEAGE if km < threshold else AVERAGE_MILEAGE


def classify_age(model_year: int, current_year: int, max_age: int = None) -> str:
    max_age = settings.RECENT_MODEL_MAX_AGE_YEARS if max_age is None else max_age
    return RECENT_MODEL if current_year - model_year <= max_age else ESTABLISHED_MODEL


def fallback_description(request, current_year: Optional[int] = None) -> str:
    """Template description from make/model/year/color/km/price."""
    current_year = current_year or date.today().year
    name = f"{request.make} {request.model}"
    mileage = classify_mileage(request.km)
    age = classify_age(request.model_year, current_year)

    return "\n".join([
        f"{name} {request.model_year} na cor {request.color.lower()}.",
        f"Este veículo oferece excelente custo-benefício, sendo um {age} com {mileage}: "
        f"apenas {format_km(request.km)} km rodados.",
        f"O {name} é conhecido pela confiabilidade e pela economia de combustível.",
        "Veículo em bom estado de conservação, ideal para quem busca qualidade e segurança.",
        f"Preço: R$ {format_brl(request.price)}.",
        "Entre em contato conosco para mais informações ou para agendar uma visita.",
    ])
