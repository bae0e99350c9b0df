"""Admin endpoints for ambassadors and their commission payments."""
import logging

from aiohttp import web

from core.dto import (
    AmbassadorSnapshot,
    ApplicationDTO,
    BulkPaymentDTO,
    CreateAmbassadorDTO,
    OrderPaymentDTO,
    UpdateAmbassadorDTO,
    UpdateStatusDTO,
)
from core.exceptions import ValidationError
from database.models import AmbassadorStatus
from panel.app_keys import NOTIFIER_KEY
from panel.utils.handler_helpers import path_int, read_dto, service_context
from services.ambassadors import AmbassadorService
from services.payments import PaymentStatusService

logger = logging.getLogger(__name__)

routes = web.RouteTableDef()

STATUS_VALUES = {s.value for s in AmbassadorStatus}


def snapshot(ambassador) -> dict:
    return AmbassadorSnapshot.model_validate(ambassador).to_dict()


# ========== Applications ==========

@routes.post('/api/ambassadors/apply')
async def apply(request: web.Request):
    """Ambassador application from the storefront form."""
    form = await read_dto(request, ApplicationDTO)
    notifier = request.app.get(NOTIFIER_KEY)
    
    async with service_context(request, AmbassadorService, notifier=notifier) as service:
        ambassador = await service.apply(form)
    
    # Committed; tell admins without waiting for delivery
    service.notify_application(ambassador)
    
    return web.json_response({
        "success": True,
        "message": "Application submitted successfully",
        "reference": ambassador.application_ref,
    }, status=201)


# ========== Ambassadors ==========

@routes.get('/api/ambassadors')
async def list_ambassadors(request: web.Request):
    """List ambassadors, optionally filtered with ?status=."""
    status = request.query.get("status")
    if status and status not in STATUS_VALUES:
        raise ValidationError("status", f"must be one of {', '.join(sorted(STATUS_VALUES))}")
    
    async with service_context(request, AmbassadorService) as service:
        ambassadors = await service.list_ambassadors(status)
        items = [snapshot(a) for a in ambassadors]
    
    return web.json_response({"ambassadors": items})


@routes.post('/api/ambassadors')
async def create_ambassador(request: web.Request):
    """Create an ambassador directly from the admin panel."""
    data = await read_dto(request, CreateAmbassadorDTO)
    
    async with service_context(request, AmbassadorService) as service:
        ambassador = await service.create(data)
        body = snapshot(ambassador)
    
    return web.json_response({"success": True, "ambassador": body}, status=201)


@routes.get('/api/ambassadors/{id}')
async def get_ambassador(request: web.Request):
    ambassador_id = path_int(request, "id")
    
    async with service_context(request, AmbassadorService) as service:
        ambassador = await service.get(ambassador_id)
        body = snapshot(ambassador)
    
    return web.json_response({"ambassador": body})


@routes.patch('/api/ambassadors/{id}')
async def update_ambassador(request: web.Request):
    """Edit ambassador details. Email, id, codes and totals are ignored."""
    ambassador_id = path_int(request, "id")
    data = await read_dto(request, UpdateAmbassadorDTO)
    
    async with service_context(request, AmbassadorService) as service:
        ambassador = await service.update_details(ambassador_id, data)
        body = snapshot(ambassador)
    
    return web.json_response({"ambassador": body})


@routes.patch('/api/ambassadors/{id}/status')
async def update_ambassador_status(request: web.Request):
    """Approve, reject or reset an ambassador."""
    ambassador_id = path_int(request, "id")
    data = await read_dto(request, UpdateStatusDTO)
    
    async with service_context(request, AmbassadorService) as service:
        ambassador = await service.update_status(ambassador_id, data)
        body = snapshot(ambassador)
    
    return web.json_response({"ambassador": body})


# ========== Payments ==========

@routes.patch('/api/ambassadors/{id}/payments')
async def update_all_payments(request: web.Request):
    """Bulk payment status: paid, waiting or pending."""
    ambassador_id = path_int(request, "id")
    data = await read_dto(request, BulkPaymentDTO)
    
    async with service_context(request, PaymentStatusService) as service:
        ambassador = await service.set_all_orders_status(ambassador_id, data.status)
        body = snapshot(ambassador)
    
    return web.json_response({
        "success": True,
        "message": f"All payments marked as {data.status.value}",
        "ambassador": body,
    })


@routes.patch('/api/ambassadors/{id}/payments/{order_id}')
async def update_order_payment(request: web.Request):
    """Mark one order's commission as paid or pending."""
    ambassador_id = path_int(request, "id")
    order_id = request.match_info["order_id"]
    data = await read_dto(request, OrderPaymentDTO)
    
    async with service_context(request, PaymentStatusService) as service:
        ambassador = await service.set_order_paid(ambassador_id, order_id, data.is_paid)
        body = snapshot(ambassador)
    
    return web.json_response({
        "success": True,
        "message": f"Order payment status updated to {'paid' if data.is_paid else 'pending'}",
        "ambassador": body,
    })


@routes.get('/api/ambassadors/{id}/ledger')
async def get_ledger_balance(request: web.Request):
    """Aggregate totals next to the sum of per-order commissions."""
    ambassador_id = path_int(request, "id")
    
    async with service_context(request, PaymentStatusService) as service:
        balance = await service.get_balance(ambassador_id)
    
    return web.json_response(balance.to_dict())
