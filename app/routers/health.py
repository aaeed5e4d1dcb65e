# app/routers/health.py
"""
System health check endpoint.
Returns status of backend + DB + which generation provider is active.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from app.database import get_db
from app.dependencies import get_content_generator
from app.services.generation_strategy import ContentGenerator
from datetime import datetime

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db),
                 generator: ContentGenerator = Depends(get_content_generator)):
    """
    Returns:
    - Backend status
    - Database connectivity
    - Generation provider (fallback-only when disabled; that is not a degraded state)
    """
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "backend": "ok",
        "database": "unknown",
        "generation": {
            "provider": generator.provider.name,
            "enabled": generator.provider.enabled,
        },
    }

    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
    except Exception as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    return result
