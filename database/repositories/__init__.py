"""Database repositories package."""
from database.repositories.ambassador import AmbassadorRepository
from database.repositories.ambassador_order import AmbassadorOrderRepository

__all__ = [
    "AmbassadorRepository",
    "AmbassadorOrderRepository",
]
