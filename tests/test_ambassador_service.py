"""Tests for applications, admin creation, review and edits."""
import re
from decimal import Decimal
from unittest.mock import Mock

import pytest

from core.dto import ApplicationDTO, CreateAmbassadorDTO, UpdateAmbassadorDTO, UpdateStatusDTO
from core.exceptions import AmbassadorNotFoundError, DuplicateKeyError
from database.models import AmbassadorStatus
from services.ambassadors import AmbassadorService, generate_application_ref, to_base36
from services.commission import CommissionService


def application(email="nina@example.com", **extra) -> ApplicationDTO:
    return ApplicationDTO.model_validate({
        "email": email,
        "fullName": "Nina Simone",
        "motivation": "I love the products",
        **extra,
    })


def test_to_base36():
    assert to_base36(0) == "0"
    assert to_base36(35) == "Z"
    assert to_base36(36) == "10"
    assert to_base36(1700000000000) == "LOYW3V28"


def test_application_ref_format():
    assert re.fullmatch(r"APP-[0-9A-Z]+", generate_application_ref())


@pytest.mark.asyncio
async def test_apply_creates_pending_application(db_session):
    service = AmbassadorService(db_session)
    
    ambassador = await service.apply(application(instagram="@nina"))
    
    assert ambassador.status == AmbassadorStatus.PENDING.value
    assert ambassador.name == "Nina Simone"
    assert ambassador.reason == "I love the products"
    assert ambassador.application_ref.startswith("APP-")
    assert ambassador.application["instagram"] == "@nina"
    assert ambassador.application_date is not None
    assert ambassador.referral_code is None


@pytest.mark.asyncio
async def test_apply_without_motivation_uses_default_reason(db_session):
    form = ApplicationDTO.model_validate({"email": "a@example.com", "fullName": "Ann"})
    
    ambassador = await AmbassadorService(db_session).apply(form)
    
    assert ambassador.reason == "Application via form"


@pytest.mark.asyncio
async def test_apply_twice_is_duplicate(db_session):
    service = AmbassadorService(db_session)
    await service.apply(application())
    
    with pytest.raises(DuplicateKeyError):
        await service.apply(application(email="NINA@example.com"))


@pytest.mark.asyncio
async def test_rejected_applicant_can_reapply(db_session):
    service = AmbassadorService(db_session)
    first = await service.apply(application())
    await service.update_status(first.id, UpdateStatusDTO(status="rejected"))
    
    again = await service.apply(application(motivation="Second try", fullName="Nina Waymon"))
    
    assert again.id == first.id
    assert again.status == AmbassadorStatus.PENDING.value
    assert again.reason == "Second try"
    assert again.name == "Nina Waymon"
    assert again.application["fullName"] == "Nina Waymon"


@pytest.mark.asyncio
async def test_notification_failure_does_not_fail_application(db_session):
    notifier = Mock()
    notifier.dispatch.side_effect = RuntimeError("telegram down")
    service = AmbassadorService(db_session, notifier=notifier)
    
    ambassador = await service.apply(application())
    service.notify_application(ambassador)
    
    notifier.dispatch.assert_called_once()
    notification = notifier.dispatch.call_args.args[0]
    assert notification.type == "ambassador_application"
    assert notification.data["applicationRef"] == ambassador.application_ref


@pytest.mark.asyncio
async def test_admin_create_defaults_to_approved(db_session):
    data = CreateAmbassadorDTO.model_validate({
        "name": "Oscar Wilde",
        "email": "oscar@example.com",
        "commissionRate": 15,
        "discountPercent": 20,
    })
    
    ambassador = await AmbassadorService(db_session).create(data)
    
    assert ambassador.status == AmbassadorStatus.APPROVED.value
    assert ambassador.commission_rate == Decimal("0.15")
    assert ambassador.discount_percent == 20
    assert re.fullmatch(r"OSC\d{4}", ambassador.referral_code)
    assert ambassador.coupon_code == ambassador.referral_code


@pytest.mark.asyncio
async def test_approve_with_custom_coupon(db_session):
    service = AmbassadorService(db_session)
    applicant = await service.apply(application())
    
    approved = await service.update_status(applicant.id, UpdateStatusDTO.model_validate({
        "status": "approved",
        "couponCode": "nina25",
        "discountPercent": 25,
        "reviewedBy": "admin@example.com",
        "reviewNotes": "Great fit",
    }))
    
    assert approved.status == AmbassadorStatus.APPROVED.value
    assert approved.coupon_code == "NINA25"
    assert re.fullmatch(r"NIN\d{4}", approved.referral_code)
    assert approved.discount_percent == 25
    assert approved.reviewed_by == "admin@example.com"
    assert approved.review_notes == "Great fit"
    assert approved.review_date is not None


@pytest.mark.asyncio
async def test_update_status_unknown_ambassador(db_session):
    with pytest.raises(AmbassadorNotFoundError):
        await AmbassadorService(db_session).update_status(404, UpdateStatusDTO(status="approved"))


@pytest.mark.asyncio
async def test_update_details_ignores_identity_and_totals(db, make_ambassador):
    ambassador = await make_ambassador()
    async with db.session() as session:
        await CommissionService(session).redeem(ambassador.id, "A-1", Decimal("100"))
    
    data = UpdateAmbassadorDTO.model_validate({
        "name": "Diana Trevor",
        "commissionRate": "0.2",
        "couponCode": "wonder",
        "email": "hacker@example.com",
        "paymentsPaid": 1000,
        "referralCode": "HACK0001",
    })
    async with db.session() as session:
        updated = await AmbassadorService(session).update_details(ambassador.id, data)
    
    assert updated.name == "Diana Trevor"
    assert updated.commission_rate == Decimal("0.2")
    assert updated.coupon_code == "WONDER"
    assert updated.email == "diana@example.com"
    assert updated.referral_code == ambassador.referral_code
    assert updated.payments_paid == 0
    assert updated.payments_pending == Decimal("10.00")


@pytest.mark.asyncio
async def test_list_filters_by_status(db_session):
    service = AmbassadorService(db_session)
    await service.apply(application())
    await service.create(CreateAmbassadorDTO(name="Oscar Wilde", email="oscar@example.com"))
    
    pending = await service.list_ambassadors("pending")
    everyone = await service.list_ambassadors()
    
    assert [a.email for a in pending] == ["nina@example.com"]
    assert len(everyone) == 2
