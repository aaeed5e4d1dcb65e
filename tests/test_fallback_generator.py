"""Unit tests for the deterministic description template."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from app.schemas.vehicle import GenerationRequest
from app.services.fallback_generator import (
    AVERAGE_MILEAGE,
    ESTABLISHED_MODEL,
    LOW_MILEAGE,
    RECENT_MODEL,
    classify_age,
    classify_mileage,
    fallback_description,
    format_brl,
    format_km,
)


def make_request(**overrides):
    fields = dict(make="Toyota", model="Corolla", fabricate_year=2020, model_year=2021,
                  color="Prata", km=45000, price="85900")
    fields.update(overrides)
    return GenerationRequest(**fields)


class TestFormatting:
    @pytest.mark.parametrize("km, expected", [(0, "0"), (999, "999"), (45000, "45.000"), (1000000, "1.000.000")])
    def test_format_km(self, km, expected):
        assert format_km(km) == expected

    @pytest.mark.parametrize("price, expected", [
        ("85900", "85.900,00"),
        ("1234567.5", "1.234.567,50"),
        ("999.99", "999,99"),
    ])
    def test_format_brl(self, price, expected):
        assert format_brl(price) == expected


class TestClassification:
    def test_mileage_threshold(self):
        assert classify_mileage(49999, threshold=50000) == LOW_MILEAGE
        assert classify_mileage(50000, threshold=50000) == AVERAGE_MILEAGE

    def test_age_threshold(self):
        assert classify_age(2021, 2026, max_age=5) == RECENT_MODEL
        assert classify_age(2020, 2026, max_age=5) == ESTABLISHED_MODEL


class TestFallbackDescription:
    def test_template_is_exact(self):
        text = fallback_description(make_request(), current_year=2024)
        assert text == "\n".join([
            "Toyota Corolla 2021 na cor prata.",
            "Este veículo oferece excelente custo-benefício, sendo um modelo recente com "
            "baixa quilometragem: apenas 45.000 km rodados.",
            "O Toyota Corolla é conhecido pela confiabilidade e pela economia de combustível.",
            "Veículo em bom estado de conservação, ideal para quem busca qualidade e segurança.",
            "Preço: R$ 85.900,00.",
            "Entre em contato conosco para mais informações ou para agendar uma visita.",
        ])

    def test_older_high_mileage(self):
        text = fallback_description(make_request(model_year=2012, fabricate_year=2011, km=120000),
                                    current_year=2024)
        assert ESTABLISHED_MODEL in text
        assert AVERAGE_MILEAGE in text
        assert "120.000 km" in text

    def test_is_reproducible(self):
        request = make_request()
        assert fallback_description(request, 2024) == fallback_description(request, 2024)
