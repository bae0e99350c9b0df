"""Ambassador repository: the record store for ambassadors and their aggregates."""
import logging
import secrets
import re
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, List

from sqlalchemy import select, update, func, or_
from sqlalchemy.exc import IntegrityError

from core.exceptions import DuplicateKeyError, ValidationError
from database.models import Ambassador, AmbassadorStatus
from database.repositories.base import BaseRepository
from panel.config import settings

logger = logging.getLogger(__name__)

CODE_PREFIX_LENGTH = 3
CODE_GENERATION_ATTEMPTS = 20


class AmbassadorRepository(BaseRepository[Ambassador]):
    """Repository for Ambassador model operations."""
    
    model_class = Ambassador
    
    # ========== Reads ==========
    
    async def get_by_email(self, email: str) -> Optional[Ambassador]:
        """Get ambassador by email (case-insensitive)."""
        result = await self.session.execute(
            select(Ambassador).where(func.lower(Ambassador.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()
    
    async def get_by_code(
        self,
        code: str,
        status: Optional[AmbassadorStatus] = None,
        active_only: bool = False,
    ) -> Optional[Ambassador]:
        """
        Get ambassador by coupon or referral code (case-insensitive).
        
        When several ambassadors share a code the lowest id wins.
        """
        normalized = code.strip().upper()
        query = select(Ambassador).where(
            or_(
                func.upper(Ambassador.coupon_code) == normalized,
                func.upper(Ambassador.referral_code) == normalized,
            )
        )
        if status:
            query = query.where(Ambassador.status == status.value)
        if active_only:
            query = query.where(Ambassador.is_active.is_(True))
        query = query.order_by(Ambassador.id).limit(1)
        
        result = await self.session.execute(query)
        return result.scalar_one_or_none()
    
    async def get_for_update(self, ambassador_id: int) -> Optional[Ambassador]:
        """Get ambassador and lock its row until the transaction ends."""
        result = await self.session.execute(
            select(Ambassador)
            .where(Ambassador.id == ambassador_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()
    
    async def get_all_by_status(self, status: Optional[AmbassadorStatus] = None) -> List[Ambassador]:
        """Get ambassadors, newest first, optionally filtered by status."""
        query = select(Ambassador)
        if status:
            query = query.where(Ambassador.status == status.value)
        query = query.order_by(Ambassador.created_at.desc(), Ambassador.id.desc())
        
        result = await self.session.execute(query)
        return list(result.scalars().all())
    
    async def code_taken(self, code: str, exclude_id: Optional[int] = None) -> bool:
        """Check whether another ambassador already holds the code."""
        normalized = code.strip().upper()
        query = select(func.count(Ambassador.id)).where(
            or_(
                func.upper(Ambassador.coupon_code) == normalized,
                func.upper(Ambassador.referral_code) == normalized,
            )
        )
        if exclude_id is not None:
            query = query.where(Ambassador.id != exclude_id)
        result = await self.session.execute(query)
        return (result.scalar() or 0) > 0
    
    # ========== Writes ==========
    
    async def create(
        self,
        name: str,
        email: str,
        status: AmbassadorStatus = AmbassadorStatus.PENDING,
        user_id: Optional[str] = None,
        coupon_code: Optional[str] = None,
        discount_percent: Optional[int] = None,
        commission_rate: Optional[Decimal] = None,
        reason: Optional[str] = None,
        application: Optional[dict] = None,
        application_ref: Optional[str] = None,
    ) -> Ambassador:
        """
        Create new ambassador.
        
        Raises:
            ValidationError: name or email missing
            DuplicateKeyError: email (or requested coupon code) already used
        """
        name = (name or "").strip()
        email = (email or "").strip()
        if not name:
            raise ValidationError("name", "is required")
        if not email:
            raise ValidationError("email", "is required")
        
        if await self.get_by_email(email):
            raise DuplicateKeyError("email", email)
        if coupon_code:
            coupon_code = await self._check_coupon_code(coupon_code)
        
        ambassador = Ambassador(
            name=name,
            email=email,
            user_id=user_id,
            status=AmbassadorStatus.NONE.value,
            coupon_code=coupon_code,
            discount_percent=(
                settings.default_discount_percent if discount_percent is None else discount_percent
            ),
            commission_rate=(
                settings.default_commission_rate if commission_rate is None else commission_rate
            ),
            reason=reason,
            application=application,
            application_ref=application_ref,
            application_date=datetime.now(timezone.utc) if application is not None else None,
            sales=Decimal("0"),
            earnings=Decimal("0"),
            orders=0,
            payments_pending=Decimal("0"),
            payments_paid=Decimal("0"),
            recent_orders=[],
        )
        self.session.add(ambassador)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise DuplicateKeyError("email", email) from e
        
        await self.set_status(ambassador, status)
        logger.info(
            f"Created ambassador {ambassador.id} ({email}) with status {ambassador.status}",
            extra={"ambassador_id": ambassador.id}
        )
        return ambassador
    
    async def set_status(
        self,
        ambassador: Ambassador,
        status: AmbassadorStatus,
        coupon_code: Optional[str] = None,
        discount_percent: Optional[int] = None,
    ) -> Ambassador:
        """
        Change lifecycle status.
        
        Approval applies the optional coupon code and discount first, then
        assigns a referral code when the ambassador has none. The coupon code
        falls back to the referral code only when it is empty too.
        """
        ambassador.status = status.value
        
        if status == AmbassadorStatus.APPROVED:
            if coupon_code:
                ambassador.coupon_code = await self._check_coupon_code(coupon_code, ambassador.id)
            if discount_percent is not None:
                ambassador.discount_percent = discount_percent
            
            if not ambassador.referral_code:
                ambassador.referral_code = await self.generate_referral_code(ambassador.name)
                ambassador.referral_link = f"{settings.storefront_url}?ref={ambassador.referral_code}"
                if not ambassador.coupon_code:
                    ambassador.coupon_code = ambassador.referral_code
                logger.info(
                    f"Assigned referral code {ambassador.referral_code} to ambassador {ambassador.id}",
                    extra={"ambassador_id": ambassador.id, "code": ambassador.referral_code}
                )
        
        await self.session.flush()
        return ambassador
    
    async def set_coupon_code(self, ambassador: Ambassador, coupon_code: str) -> Ambassador:
        """Set admin-chosen coupon code, enforcing uniqueness across all codes."""
        ambassador.coupon_code = await self._check_coupon_code(coupon_code, ambassador.id)
        await self.session.flush()
        return ambassador
    
    async def generate_referral_code(self, name: str) -> str:
        """Build `<first three letters of name><4 digits>`, re-rolling on collision."""
        prefix = self._code_prefix(name)
        for _ in range(CODE_GENERATION_ATTEMPTS):
            code = f"{prefix}{secrets.randbelow(9000) + 1000}"
            if not await self.code_taken(code):
                return code
        raise DuplicateKeyError("referral code", prefix, "Could not generate a unique referral code")
    
    @staticmethod
    def _code_prefix(name: str) -> str:
        letters = re.sub(r"[^A-Za-z]", "", name or "")
        return (letters[:CODE_PREFIX_LENGTH] or "AMB").upper()
    
    async def _check_coupon_code(self, code: str, ambassador_id: Optional[int] = None) -> str:
        code = code.strip().upper()
        if not code:
            raise ValidationError("couponCode", "must not be empty")
        if await self.code_taken(code, exclude_id=ambassador_id):
            raise DuplicateKeyError("coupon code", code)
        return code
    
    # ========== Ledger aggregates ==========
    # All aggregate changes are single UPDATE statements evaluated by the
    # database, so concurrent transactions never lose increments.
    
    async def accrue(self, ambassador_id: int, amount: Decimal, commission: Decimal) -> None:
        """Add one redeemed order to the running totals."""
        await self.session.execute(
            update(Ambassador)
            .where(Ambassador.id == ambassador_id)
            .values(
                sales=Ambassador.sales + amount,
                earnings=Ambassador.earnings + commission,
                orders=Ambassador.orders + 1,
                payments_pending=Ambassador.payments_pending + commission,
            )
            .execution_options(synchronize_session=False)
        )
    
    async def move_commission(self, ambassador_id: int, commission: Decimal, to_paid: bool) -> None:
        """Move one order's commission between the pending and paid buckets."""
        delta = commission if to_paid else -commission
        await self.session.execute(
            update(Ambassador)
            .where(Ambassador.id == ambassador_id)
            .values(
                payments_pending=Ambassador.payments_pending - delta,
                payments_paid=Ambassador.payments_paid + delta,
            )
            .execution_options(synchronize_session=False)
        )
    
    async def settle_pending(self, ambassador_id: int) -> None:
        """Move the whole pending total into paid."""
        # Both right-hand sides read the pre-update row
        await self.session.execute(
            update(Ambassador)
            .where(Ambassador.id == ambassador_id)
            .values(
                payments_paid=Ambassador.payments_paid + Ambassador.payments_pending,
                payments_pending=0,
            )
            .execution_options(synchronize_session=False)
        )
