"""Database models package."""
from database.models.ambassador import Ambassador, AmbassadorStatus
from database.models.ambassador_order import AmbassadorOrder

__all__ = [
    "Ambassador",
    "AmbassadorStatus",
    "AmbassadorOrder",
]
