"""
Base repository with common operations.

Provides a generic base class for repositories to reduce code duplication.
"""
from typing import TypeVar, Generic, Optional, Type
from abc import ABC

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database.base import Base

# Type variable for model classes
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(ABC, Generic[ModelType]):
    """
    Abstract base repository.
    
    Provides:
    - get_by_id: Get single entity by ID
    - update: Flush pending changes of an attached entity
    
    Usage:
        class AmbassadorRepository(BaseRepository[Ambassador]):
            model_class = Ambassador
            
            async def get_by_email(self, email: str):
                ...
    """
    
    model_class: Type[ModelType]
    
    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session
    
    async def get_by_id(self, entity_id: int, *, fresh: bool = False) -> Optional[ModelType]:
        """
        Get entity by its primary key ID.
        
        Args:
            entity_id: Primary key ID
            fresh: Overwrite any copy already held by the session with the
                row as currently stored (needed after bulk UPDATE statements)
            
        Returns:
            Entity or None if not found
        """
        query = select(self.model_class).where(self.model_class.id == entity_id)
        if fresh:
            query = query.execution_options(populate_existing=True)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()
    
    async def update(self, entity: ModelType) -> ModelType:
        """
        Update entity in database.
        
        Note: The entity must already be attached to the session.
        Changes are flushed but not committed.
        """
        await self.session.flush()
        return entity
