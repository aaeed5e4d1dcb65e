"""Unit tests for prompt input hygiene and key format checks."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from app.exceptions import ValidationError
from app.utils.sanitizer import (
    MAX_TEXT_LENGTH,
    clean_text,
    contains_markup_injection,
    contains_sql_injection,
    is_valid_api_key,
    sanitize_text,
)


class TestInjectionDetection:
    @pytest.mark.parametrize("value", [
        "Corolla' OR 1=1",
        "x; DROP TABLE vehicles",
        "a -- comment",
        "UNION SELECT password",
        "name and id like 1",
    ])
    def test_sql_patterns(self, value):
        assert contains_sql_injection(value)

    @pytest.mark.parametrize("value", [
        "<script>alert(1)</script>",
        "<iframe src=x></iframe>",
        "javascript:alert(1)",
        "<img src=x onerror=alert(1)>",
    ])
    def test_markup_patterns(self, value):
        assert contains_markup_injection(value)

    @pytest.mark.parametrize("value", ["Toyota", "Corolla XEi 2.0", "Mercedes-Benz", "Azul Marinho", "Citroën"])
    def test_normal_values_pass(self, value):
        assert not contains_sql_injection(value)
        assert not contains_markup_injection(value)
        assert sanitize_text(value) == value

    def test_sanitize_rejects(self):
        with pytest.raises(ValidationError):
            sanitize_text("Gol'; DELETE FROM vehicles", "model")

    def test_sanitize_rejects_non_strings(self):
        with pytest.raises(ValidationError):
            sanitize_text(123, "make")


class TestCleanText:
    def test_strips_markup_quotes_and_control_characters(self):
        assert clean_text('  <b>"Prata"</b>\x00\x07 ') == "bPrata/b"

    def test_caps_length(self):
        assert len(clean_text("a" * (MAX_TEXT_LENGTH + 50))) == MAX_TEXT_LENGTH


class TestApiKeyFormat:
    @pytest.mark.parametrize("key, valid", [
        ("sk-" + "A1b2_-" * 8, True),
        ("sk-" + "a" * 47, False),
        ("sk-" + "a" * 40 + " bad", False),
        ("x" * 20, True),
        ("x" * 19, False),
        ("", False),
        (None, False),
    ])
    def test_key_format(self, key, valid):
        assert is_valid_api_key(key) is valid
