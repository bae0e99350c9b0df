"""Resolve coupon/referral codes to approved ambassadors."""
import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from core.dto import ActiveCode
from core.exceptions import CodeNotFoundError, ValidationError
from database.models import Ambassador, AmbassadorStatus
from database.repositories import AmbassadorRepository

logger = logging.getLogger(__name__)


class CodeResolver:
    """Maps inbound code strings to approved ambassadors."""
    
    def __init__(self, session: AsyncSession):
        self.session = session
        self.ambassador_repo = AmbassadorRepository(session)
    
    async def resolve(self, code: str, active_only: bool = False) -> Ambassador:
        """
        Find the approved ambassador owning a code.
        
        Matching is case-insensitive against both the coupon and the
        referral code. Pending, rejected and unreviewed ambassadors never
        match. If several approved ambassadors share the code, the one
        created first (lowest id) is returned.
        
        With active_only, ambassadors switched off by an admin are skipped
        as well. Redemption does not pass it: an order placed with a code
        that was valid at checkout is still credited.
        
        Raises:
            ValidationError: code is blank
            CodeNotFoundError: no approved ambassador holds the code
        """
        if not code or not code.strip():
            raise ValidationError("code", "is required")
        
        ambassador = await self.ambassador_repo.get_by_code(
            code, status=AmbassadorStatus.APPROVED, active_only=active_only
        )
        if not ambassador:
            logger.info(f"Invalid code attempted: {code.strip().upper()}", extra={"code": code})
            raise CodeNotFoundError(code.strip().upper())
        return ambassador
    
    async def validate(self, code: str) -> dict:
        """Storefront check: whether a code is redeemable and what it discounts."""
        try:
            ambassador = await self.resolve(code, active_only=True)
        except CodeNotFoundError:
            return {"valid": False, "message": "Invalid or expired coupon code"}
        
        logger.info(
            f"Valid code used: {code.strip().upper()}, ambassador: {ambassador.name}",
            extra={"ambassador_id": ambassador.id, "code": code}
        )
        return {
            "valid": True,
            "discount": {
                "type": "percentage",
                "value": ambassador.discount_percent,
                "ambassadorId": ambassador.id,
            },
            "message": f"Coupon code applied: {ambassador.discount_percent}% discount",
        }
    
    async def list_active_codes(self) -> List[ActiveCode]:
        """Every code of every approved ambassador, coupon code first."""
        ambassadors = await self.ambassador_repo.get_all_by_status(AmbassadorStatus.APPROVED)
        
        codes: List[ActiveCode] = []
        for ambassador in ambassadors:
            if ambassador.coupon_code:
                codes.append(ActiveCode(
                    code=ambassador.coupon_code,
                    type="coupon",
                    discount_percent=ambassador.discount_percent,
                    ambassador_name=ambassador.name,
                    ambassador_id=ambassador.id,
                ))
            if ambassador.referral_code:
                codes.append(ActiveCode(
                    code=ambassador.referral_code,
                    type="referral",
                    discount_percent=ambassador.discount_percent,
                    ambassador_name=ambassador.name,
                    ambassador_id=ambassador.id,
                ))
        return codes
