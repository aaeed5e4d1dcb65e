"""Unit tests for raw query parameter → FilterSpec normalisation."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from decimal import Decimal
from app.config import settings
from app.exceptions import ValidationError
from app.models.vehicle import ApprovalStatus, VehicleStatus
from app.schemas.vehicle import Visibility
from app.services.filter_normalizer import normalize_filters


class TestNormalizeFilters:
    def test_empty_query_gives_defaults(self):
        spec = normalize_filters({})
        assert spec.make is None
        assert spec.approval_status is None
        assert spec.visibility == Visibility.APPROVED_ONLY
        assert spec.page == 1
        assert spec.page_size == settings.DEFAULT_PAGE_SIZE

    def test_blank_values_are_absent(self):
        spec = normalize_filters({"make": "", "color": "   ", "min_price": "", "status": ""})
        assert spec.make is None
        assert spec.color is None
        assert spec.min_price is None
        assert spec.status is None

    def test_values_are_parsed(self):
        spec = normalize_filters({
            "make": " Toyota ",
            "min_year": "2018",
            "max_km": "90000",
            "min_price": "50000",
            "max_price": "75000.50",
            "status": "Available",
            "approval_status": "PENDING",
        })
        assert spec.make == "Toyota"
        assert spec.min_year == 2018
        assert spec.max_km == 90000
        assert spec.min_price == Decimal("50000")
        assert spec.max_price == Decimal("75000.50")
        assert spec.status == VehicleStatus.AVAILABLE
        assert spec.approval_status == ApprovalStatus.PENDING

    @pytest.mark.parametrize("raw", [
        {"min_year": "twenty"},
        {"max_km": "-1"},
        {"min_price": "abc"},
        {"max_price": "-10"},
        {"max_price": "NaN"},
        {"status": "stolen"},
        {"approval_status": "maybe"},
        {"page": "first"},
        {"page_size": "0"},
        {"limit": "ten"},
    ])
    def test_malformed_values_raise(self, raw):
        with pytest.raises(ValidationError):
            normalize_filters(raw)

    def test_page_size_is_clamped(self):
        spec = normalize_filters({"page_size": str(settings.MAX_PAGE_SIZE + 500)})
        assert spec.page_size == settings.MAX_PAGE_SIZE

    def test_limit_alias(self):
        assert normalize_filters({"limit": "5"}).page_size == 5

    def test_inverted_range_is_accepted(self):
        spec = normalize_filters({"min_price": "90000", "max_price": "10000"})
        assert spec.min_price > spec.max_price

    def test_request_cannot_widen_visibility(self):
        spec = normalize_filters({"visibility": "all", "created_by": "someone"})
        assert spec.visibility == Visibility.APPROVED_ONLY
        assert spec.created_by is None

    def test_caller_scope_override(self):
        spec = normalize_filters({}, created_by="seller-1", visibility=Visibility.ALL)
        assert spec.created_by == "seller-1"
        assert spec.visibility == Visibility.ALL
