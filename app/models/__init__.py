# Vehicle Inventory — Database Models
# Import all models here for SQLAlchemy discovery

from app.models.vehicle import Vehicle        # noqa
from app.models.audit_log import AuditLog     # noqa
