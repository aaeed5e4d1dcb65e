# app/schemas/audit_log.py
from pydantic import BaseModel
from datetime import datetime
from typing import Any, Optional


class AuditLogOut(BaseModel):
    id: int
    action: str
    resource_type: str
    resource_id: Optional[str]
    actor_id: Optional[str]
    details: Optional[dict[str, Any]]
    created_at: datetime

    class Config:
        from_attributes = True
