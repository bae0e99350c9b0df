"""Payment status transitions for ambassador commissions."""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from core.dto import LedgerBalance, PaymentStatus
from core.exceptions import AmbassadorNotFoundError, OrderNotFoundError
from database.models import Ambassador
from database.repositories import AmbassadorRepository, AmbassadorOrderRepository

logger = logging.getLogger(__name__)


class PaymentStatusService:
    """Marks ambassador commissions as paid or pending."""
    
    def __init__(self, session: AsyncSession):
        self.session = session
        self.ambassador_repo = AmbassadorRepository(session)
        self.order_repo = AmbassadorOrderRepository(session)
    
    async def set_order_paid(self, ambassador_id: int, order_id: str, is_paid: bool) -> Ambassador:
        """
        Set one order's paid flag.
        
        The flag and the totals only change when the requested state differs
        from the stored one; repeating a request is a no-op.
        
        Raises:
            AmbassadorNotFoundError: unknown ambassador
            OrderNotFoundError: the order is not on this ambassador's ledger
        """
        if not await self.ambassador_repo.get_for_update(ambassador_id):
            raise AmbassadorNotFoundError(ambassador_id)
        
        commission = await self.order_repo.set_paid_if_changed(ambassador_id, order_id, is_paid)
        if commission is None:
            if not await self.order_repo.exists(ambassador_id, order_id):
                raise OrderNotFoundError(ambassador_id, order_id)
            logger.info(
                f"Order {order_id} of ambassador {ambassador_id} already "
                f"{'paid' if is_paid else 'pending'}, nothing to do",
                extra={"ambassador_id": ambassador_id, "order_id": order_id}
            )
        else:
            await self.ambassador_repo.move_commission(ambassador_id, commission, to_paid=is_paid)
            logger.info(
                f"[PAYMENT UPDATE] Order {order_id} payment status updated to "
                f"{'paid' if is_paid else 'pending'} for ambassador {ambassador_id}",
                extra={"ambassador_id": ambassador_id, "order_id": order_id}
            )
        
        return await self.ambassador_repo.get_by_id(ambassador_id, fresh=True)
    
    async def set_all_orders_status(self, ambassador_id: int, status: PaymentStatus) -> Ambassador:
        """
        Apply a bulk payment status to every order of an ambassador.
        
        paid: flags every order paid and moves the current pending total
        into paid in one UPDATE on the aggregate columns.
        waiting / pending: flags every order unpaid and leaves the totals
        as they are. Money already counted as paid is not moved back.
        
        Raises:
            AmbassadorNotFoundError: unknown ambassador
        """
        status = PaymentStatus(status)
        if not await self.ambassador_repo.get_for_update(ambassador_id):
            raise AmbassadorNotFoundError(ambassador_id)
        
        if status == PaymentStatus.PAID:
            touched = await self.order_repo.set_all_paid(ambassador_id, True)
            await self.ambassador_repo.settle_pending(ambassador_id)
        else:
            touched = await self.order_repo.set_all_paid(ambassador_id, False)
        
        logger.info(
            f"[PAYMENT UPDATE] Bulk payment status updated for ambassador {ambassador_id} "
            f"to {status.value} ({touched} orders)",
            extra={"ambassador_id": ambassador_id}
        )
        return await self.ambassador_repo.get_by_id(ambassador_id, fresh=True)
    
    async def get_balance(self, ambassador_id: int) -> LedgerBalance:
        """Compare the aggregate payment totals with the per-order commissions."""
        ambassador = await self.ambassador_repo.get_by_id(ambassador_id, fresh=True)
        if not ambassador:
            raise AmbassadorNotFoundError(ambassador_id)
        
        balance = LedgerBalance(
            ambassador_id=ambassador_id,
            payments_pending=ambassador.payments_pending,
            payments_paid=ambassador.payments_paid,
            order_commission_total=await self.order_repo.sum_commission(ambassador_id),
        )
        if not balance.is_balanced:
            logger.warning(
                f"Ledger drift for ambassador {ambassador_id}: "
                f"pending+paid={balance.payments_pending + balance.payments_paid}, "
                f"orders={balance.order_commission_total}",
                extra={"ambassador_id": ambassador_id}
            )
        return balance
