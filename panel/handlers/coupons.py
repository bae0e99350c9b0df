"""Storefront-facing coupon endpoints: redeem, validate, list."""
import logging

from aiohttp import web

from core.dto import RedeemCodeDTO, ValidateCodeDTO
from panel.utils.handler_helpers import read_dto, service_context
from services.code_resolver import CodeResolver
from services.commission import CommissionService

logger = logging.getLogger(__name__)

routes = web.RouteTableDef()


@routes.post('/api/coupon/redeem')
async def redeem_coupon(request: web.Request):
    """Record a purchase made with an ambassador code and accrue commission."""
    data = await read_dto(request, RedeemCodeDTO)
    
    async with service_context(request, CommissionService) as service:
        record = await service.redeem_code(data.code, data.order_id, data.order_amount)
    
    return web.json_response({
        "success": True,
        "message": "Coupon redemption recorded successfully",
        **record.to_dict(),
    })


@routes.post('/api/coupon/validate')
async def validate_coupon(request: web.Request):
    """Check whether a code is redeemable and which discount it gives."""
    data = await read_dto(request, ValidateCodeDTO)
    
    async with service_context(request, CodeResolver) as resolver:
        result = await resolver.validate(data.code)
    
    return web.json_response(result)


@routes.get('/api/coupon/list')
async def list_coupons(request: web.Request):
    """All active codes, one entry per coupon or referral code."""
    async with service_context(request, CodeResolver) as resolver:
        codes = await resolver.list_active_codes()
    
    coupons = [c.model_dump(mode="json", by_alias=True) for c in codes]
    return web.json_response({
        "status": "success",
        "count": len(coupons),
        "coupons": coupons,
    })
