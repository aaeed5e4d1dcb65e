# app/schemas/actor.py
from enum import Enum
from pydantic import BaseModel


class ActorRole(str, Enum):
    ADMIN = "admin"
    COMMON = "common"


class Actor(BaseModel):
    """The authenticated caller, as forwarded by the presentation layer."""
    id: str
    role: ActorRole = ActorRole.COMMON

    @property
    def is_admin(self) -> bool:
        return self.role == ActorRole.ADMIN

    class Config:
        frozen = True
