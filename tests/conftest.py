"""Shared fixtures: in-memory SQLite sessions, vehicle factory, fake providers."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Must be set before app.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["OPENAI_API_KEY"] = ""

import asyncio
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base
from app.exceptions import ProviderError
from app.models.vehicle import ApprovalStatus, Vehicle
from app.models.audit_log import AuditLog  # noqa: F401
from app.services import vehicle_service
from app.services.generation_provider import DisabledGenerationProvider, GenerationProvider
from app.services.generation_strategy import ContentGenerator

LONG_REPLY = (
    "Toyota Corolla impecável, revisado na concessionária, com baixa quilometragem "
    "e excelente economia de combustível. Agende seu test drive."
)


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def make_vehicle(db):
    """Insert a vehicle through the store and force its approval status."""
    def _make(approval_status=ApprovalStatus.PENDING, created_by="seller-1", **overrides):
        fields = {
            "make": "Toyota",
            "model": "Corolla",
            "fabricate_year": 2020,
            "model_year": 2021,
            "color": "Prata",
            "km": 40000,
            "price": Decimal("60000.00"),
        }
        fields.update(overrides)
        vehicle = vehicle_service.add_vehicle(db, fields, created_by=created_by)
        vehicle.approval_status = approval_status
        db.commit()
        db.refresh(vehicle)
        return vehicle
    return _make


class StaticProvider(GenerationProvider):
    """Returns a fixed reply and counts calls."""
    name = "static"

    def __init__(self, reply=LONG_REPLY):
        self.reply = reply
        self.calls = []

    async def complete(self, system_prompt, user_prompt, *, model):
        self.calls.append((system_prompt, user_prompt, model))
        return self.reply


class FailingProvider(GenerationProvider):
    name = "failing"

    def __init__(self):
        self.calls = 0

    async def complete(self, system_prompt, user_prompt, *, model):
        self.calls += 1
        raise ProviderError("quota exceeded")


class BrokenProvider(GenerationProvider):
    """Fails with something other than ProviderError."""
    name = "broken"

    async def complete(self, system_prompt, user_prompt, *, model):
        raise RuntimeError("unexpected payload shape")


class HangingProvider(GenerationProvider):
    name = "hanging"

    def __init__(self):
        self.cancelled = False

    async def complete(self, system_prompt, user_prompt, *, model):
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return LONG_REPLY


@pytest.fixture
def fallback_generator():
    return ContentGenerator(DisabledGenerationProvider(), timeout=1.0, min_length=50,
                            description_model="test-desc", comparison_model="test-compare")


@pytest.fixture
def static_provider():
    return StaticProvider()


@pytest.fixture
def provider_generator(static_provider):
    return ContentGenerator(static_provider, timeout=1.0, min_length=50,
                            description_model="test-desc", comparison_model="test-compare")
