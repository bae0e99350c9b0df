"""Database package: engine lifecycle, models and repositories."""
from database.base import Base, Database

__all__ = ["Base", "Database"]
