"""Ambassador lifecycle: applications, admin creation, review and edits."""
import logging
import time
from datetime import datetime, timezone
from typing import Optional, List

from sqlalchemy.ext.asyncio import AsyncSession

from core.dto import ApplicationDTO, CreateAmbassadorDTO, UpdateStatusDTO, UpdateAmbassadorDTO
from core.exceptions import AmbassadorNotFoundError, DuplicateKeyError
from database.models import Ambassador, AmbassadorStatus
from database.repositories import AmbassadorRepository
from services.notifications import AdminNotification, AdminNotifier

logger = logging.getLogger(__name__)

BASE36_DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def to_base36(number: int) -> str:
    """Encode a non-negative integer in upper-case base 36."""
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(BASE36_DIGITS[rem])
    return "".join(reversed(digits))


def generate_application_ref() -> str:
    """Reference shown to the applicant, e.g. APP-LZ3K9Q1A."""
    return f"APP-{to_base36(time.time_ns() // 1_000_000)}"


class AmbassadorService:
    """Service for ambassador program operations outside the ledger."""
    
    def __init__(self, session: AsyncSession, notifier: Optional[AdminNotifier] = None):
        self.session = session
        self.notifier = notifier
        self.ambassador_repo = AmbassadorRepository(session)
    
    async def get(self, ambassador_id: int) -> Ambassador:
        """Get ambassador or raise AmbassadorNotFoundError."""
        ambassador = await self.ambassador_repo.get_by_id(ambassador_id, fresh=True)
        if not ambassador:
            raise AmbassadorNotFoundError(ambassador_id)
        return ambassador
    
    async def list_ambassadors(self, status: Optional[str] = None) -> List[Ambassador]:
        """List ambassadors, newest first."""
        return await self.ambassador_repo.get_all_by_status(
            AmbassadorStatus(status) if status else None
        )
    
    async def apply(self, form: ApplicationDTO) -> Ambassador:
        """
        Record an application from the storefront.
        
        A rejected applicant may apply again and is moved back to pending;
        any other existing email is a duplicate.
        
        The admin notification is queued only after the application is
        committed by the caller (see notify_application).
        """
        application_ref = generate_application_ref()
        existing = await self.ambassador_repo.get_by_email(form.email)
        
        if existing:
            if existing.status != AmbassadorStatus.REJECTED.value:
                raise DuplicateKeyError(
                    "email",
                    form.email,
                    "An application with this email already exists",
                )
            existing.name = form.full_name
            existing.application = form.form_data()
            existing.application_ref = application_ref
            existing.application_date = datetime.now(timezone.utc)
            existing.reason = form.motivation or existing.reason
            await self.ambassador_repo.set_status(existing, AmbassadorStatus.PENDING)
            logger.info(
                f"Reopened application {application_ref} for {form.email}",
                extra={"ambassador_id": existing.id}
            )
            return existing
        
        ambassador = await self.ambassador_repo.create(
            name=form.full_name,
            email=form.email,
            status=AmbassadorStatus.PENDING,
            reason=form.motivation or "Application via form",
            application=form.form_data(),
            application_ref=application_ref,
        )
        logger.info(
            f"New application {application_ref} from {form.email}",
            extra={"ambassador_id": ambassador.id}
        )
        return ambassador
    
    def notify_application(self, ambassador: Ambassador) -> None:
        """Tell admins about a new application. Best effort, never raises."""
        if self.notifier is None:
            return
        try:
            self.notifier.dispatch(AdminNotification(
                type="ambassador_application",
                title="New Ambassador Application",
                message=f"New application from {ambassador.name} ({ambassador.email})",
                data={
                    "email": ambassador.email,
                    "name": ambassador.name,
                    "applicationRef": ambassador.application_ref,
                },
            ))
        except Exception as e:
            logger.error(f"Failed to send admin notification: {e}", exc_info=True)
    
    async def create(self, data: CreateAmbassadorDTO) -> Ambassador:
        """Create an ambassador directly (admin). Defaults to approved."""
        ambassador = await self.ambassador_repo.create(
            name=data.name,
            email=data.email,
            status=AmbassadorStatus(data.status),
            user_id=data.user_id,
            coupon_code=data.coupon_code,
            discount_percent=data.discount_percent,
            commission_rate=data.commission_rate,
            reason=data.reason,
        )
        return await self.get(ambassador.id)
    
    async def update_status(self, ambassador_id: int, data: UpdateStatusDTO) -> Ambassador:
        """Apply an admin review decision."""
        ambassador = await self.get(ambassador_id)
        previous = ambassador.status
        
        await self.ambassador_repo.set_status(
            ambassador,
            AmbassadorStatus(data.status),
            coupon_code=data.coupon_code,
            discount_percent=data.discount_percent,
        )
        ambassador.review_date = datetime.now(timezone.utc)
        if data.reviewed_by is not None:
            ambassador.reviewed_by = data.reviewed_by
        if data.review_notes is not None:
            ambassador.review_notes = data.review_notes
        await self.ambassador_repo.update(ambassador)
        
        logger.info(
            f"Ambassador {ambassador_id} status {previous} -> {ambassador.status}",
            extra={"ambassador_id": ambassador_id}
        )
        return await self.get(ambassador_id)
    
    async def update_details(self, ambassador_id: int, data: UpdateAmbassadorDTO) -> Ambassador:
        """Edit name, economics, coupon code, the active switch and notes."""
        ambassador = await self.get(ambassador_id)
        changes = data.model_dump(exclude_unset=True)
        
        coupon_code = changes.pop("coupon_code", None)
        if coupon_code:
            await self.ambassador_repo.set_coupon_code(ambassador, coupon_code)
        
        for field_name, value in changes.items():
            if value is None and field_name in ("name", "discount_percent", "commission_rate", "is_active"):
                continue
            setattr(ambassador, field_name, value)
        await self.ambassador_repo.update(ambassador)
        
        logger.info(
            f"Updated ambassador {ambassador_id}: {', '.join(sorted(data.model_fields_set)) or 'no fields'}",
            extra={"ambassador_id": ambassador_id}
        )
        return await self.get(ambassador_id)
