"""Commission accrual: turn a code redemption into a ledger entry."""
import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.dto import CommissionRecord, MAX_ORDER_AMOUNT
from core.exceptions import AlreadyRedeemedError, AmbassadorNotFoundError, ValidationError
from database.repositories import AmbassadorRepository, AmbassadorOrderRepository
from services.code_resolver import CodeResolver

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class CommissionService:
    """Accrues commission for redeemed orders."""
    
    def __init__(self, session: AsyncSession):
        self.session = session
        self.ambassador_repo = AmbassadorRepository(session)
        self.order_repo = AmbassadorOrderRepository(session)
        self.resolver = CodeResolver(session)
    
    @staticmethod
    def calculate_commission(order_amount: Decimal, commission_rate: Decimal) -> Decimal:
        """
        Calculate commission amount, rounded half-up to cents.
        
        Example:
            100.00 × 0.10 = 10.00
        """
        return (Decimal(order_amount) * Decimal(commission_rate)).quantize(CENT, rounding=ROUND_HALF_UP)
    
    async def redeem(self, ambassador_id: int, order_id: str, order_amount: Decimal) -> CommissionRecord:
        """
        Attribute an order to an ambassador and accrue its commission.
        
        Runs inside the caller's transaction: the ambassador row is locked,
        the order entry is inserted and the aggregates are incremented by one
        UPDATE. Any failure rolls all of it back.
        
        Raises:
            ValidationError: amount not positive or too large, or blank order ID
            AmbassadorNotFoundError: unknown ambassador
            AlreadyRedeemedError: the order is already on this ambassador's ledger
        """
        order_id = (order_id or "").strip()
        if not order_id:
            raise ValidationError("orderId", "is required")
        try:
            order_amount = Decimal(str(order_amount))
        except InvalidOperation:
            raise ValidationError("orderAmount", "must be a number")
        if not order_amount.is_finite() or order_amount > MAX_ORDER_AMOUNT:
            raise ValidationError("orderAmount", f"must not exceed {MAX_ORDER_AMOUNT}")
        if order_amount > 0:
            order_amount = order_amount.quantize(CENT, rounding=ROUND_HALF_UP)
        if order_amount <= 0:
            raise ValidationError("orderAmount", "must be positive")
        
        ambassador = await self.ambassador_repo.get_for_update(ambassador_id)
        if not ambassador:
            raise AmbassadorNotFoundError(ambassador_id)
        
        if await self.order_repo.exists(ambassador_id, order_id):
            logger.warning(
                f"Order {order_id} already redeemed for ambassador {ambassador_id}",
                extra={"ambassador_id": ambassador_id, "order_id": order_id}
            )
            raise AlreadyRedeemedError(ambassador_id, order_id)
        
        # Rate as stored right now; later rate changes never touch this entry
        commission_rate = Decimal(str(ambassador.commission_rate))
        commission = self.calculate_commission(order_amount, commission_rate)
        
        try:
            order = await self.order_repo.add(ambassador_id, order_id, order_amount, commission)
        except IntegrityError as e:
            raise AlreadyRedeemedError(ambassador_id, order_id) from e
        
        await self.ambassador_repo.accrue(ambassador_id, order_amount, commission)
        
        logger.info(
            f"Redeemed order {order_id} for ambassador {ambassador_id}: "
            f"amount={order_amount}, commission={commission}",
            extra={"ambassador_id": ambassador_id, "order_id": order_id}
        )
        
        return CommissionRecord(
            ambassador_id=ambassador_id,
            order_id=order_id,
            order_date=order.order_date,
            order_amount=order_amount,
            commission=commission,
            commission_rate=commission_rate,
            is_paid=False,
        )
    
    async def redeem_code(self, code: str, order_id: str, order_amount: Decimal) -> CommissionRecord:
        """Resolve a code to its approved ambassador and redeem the order."""
        ambassador = await self.resolver.resolve(code)
        return await self.redeem(ambassador.id, order_id, order_amount)
