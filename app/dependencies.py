# app/dependencies.py
"""
FastAPI dependencies shared by the routers: the calling actor, the content
generator (one per process) and the preview rate limit.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, Request

from app.config import settings
from app.exceptions import AuthenticationRequiredError, ValidationError
from app.models.vehicle import ACTOR_ID_LENGTH
from app.schemas.actor import Actor, ActorRole
from app.services.generation_provider import build_generation_provider
from app.services.generation_strategy import ContentGenerator
from app.utils.rate_limiter import RateLimiter


def get_current_actor(
    x_actor_id: Optional[str] = Header(default=None),
    x_actor_role: Optional[str] = Header(default=None),
) -> Actor:
    """
    The presentation layer authenticates users and forwards who they are in
    X-Actor-Id / X-Actor-Role. A missing role means a common user.
    """
    actor_id = (x_actor_id or "").strip()
    if not actor_id:
        raise AuthenticationRequiredError("X-Actor-Id header is required")
    if len(actor_id) > ACTOR_ID_LENGTH:
        raise ValidationError(f"X-Actor-Id must be at most {ACTOR_ID_LENGTH} characters")

    role = (x_actor_role or ActorRole.COMMON.value).strip().lower()
    try:
        return Actor(id=actor_id, role=ActorRole(role))
    except ValueError:
        raise ValidationError(f"Unknown actor role '{x_actor_role}'")


@lru_cache
def get_content_generator() -> ContentGenerator:
    return ContentGenerator(build_generation_provider(settings))


@lru_cache
def get_preview_rate_limiter() -> RateLimiter:
    return RateLimiter(settings.PREVIEW_RATE_LIMIT_REQUESTS, settings.PREVIEW_RATE_LIMIT_WINDOW_SECONDS)


def enforce_preview_rate_limit(
    request: Request,
    actor: Actor = Depends(get_current_actor),
    limiter: RateLimiter = Depends(get_preview_rate_limiter),
) -> Actor:
    client = request.client.host if request.client else "unknown"
    limiter.hit(f"{actor.id}@{client}")
    return actor
