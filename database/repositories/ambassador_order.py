"""Repository for order entries embedded in an ambassador's ledger."""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import select, update, func, and_
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import AmbassadorOrder


class AmbassadorOrderRepository:
    """Repository for AmbassadorOrder operations, always scoped to one ambassador."""
    
    def __init__(self, session: AsyncSession):
        self.session = session
    
    async def exists(self, ambassador_id: int, order_id: str) -> bool:
        """Check whether the order was already attributed to the ambassador."""
        result = await self.session.execute(
            select(func.count(AmbassadorOrder.id)).where(
                and_(
                    AmbassadorOrder.ambassador_id == ambassador_id,
                    AmbassadorOrder.order_id == order_id,
                )
            )
        )
        return (result.scalar() or 0) > 0
    
    async def add(
        self,
        ambassador_id: int,
        order_id: str,
        amount: Decimal,
        commission: Decimal,
    ) -> AmbassadorOrder:
        """
        Append an unpaid order entry.
        
        The (ambassador_id, order_id) unique constraint makes the flush fail
        with IntegrityError if a concurrent transaction inserted it first.
        """
        order = AmbassadorOrder(
            ambassador_id=ambassador_id,
            order_id=order_id,
            order_date=datetime.now(timezone.utc),
            amount=amount,
            commission=commission,
            is_paid=False,
        )
        self.session.add(order)
        await self.session.flush()
        return order
    
    async def set_paid_if_changed(
        self,
        ambassador_id: int,
        order_id: str,
        is_paid: bool,
    ) -> Optional[Decimal]:
        """
        Flip the paid flag only when it differs from the requested value.
        
        Returns:
            The order's commission when the flag changed, None otherwise
        """
        result = await self.session.execute(
            update(AmbassadorOrder)
            .where(
                and_(
                    AmbassadorOrder.ambassador_id == ambassador_id,
                    AmbassadorOrder.order_id == order_id,
                    AmbassadorOrder.is_paid != is_paid,
                )
            )
            .values(is_paid=is_paid)
            .returning(AmbassadorOrder.commission)
            .execution_options(synchronize_session=False)
        )
        return result.scalar_one_or_none()
    
    async def set_all_paid(self, ambassador_id: int, is_paid: bool) -> int:
        """Set the paid flag on every order of the ambassador. Returns rows touched."""
        result = await self.session.execute(
            update(AmbassadorOrder)
            .where(AmbassadorOrder.ambassador_id == ambassador_id)
            .values(is_paid=is_paid)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0
    
    async def sum_commission(self, ambassador_id: int) -> Decimal:
        """Sum of commission across all orders of the ambassador."""
        result = await self.session.execute(
            select(func.coalesce(func.sum(AmbassadorOrder.commission), 0)).where(
                AmbassadorOrder.ambassador_id == ambassador_id
            )
        )
        return Decimal(str(result.scalar() or 0)).quantize(Decimal("0.01"))
