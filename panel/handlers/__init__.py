"""API route tables."""
from aiohttp import web

from panel.handlers.ambassadors import routes as ambassador_routes
from panel.handlers.coupons import routes as coupon_routes
from panel.handlers.health import routes as health_routes


def setup_routes(app: web.Application):
    """Register all API routes."""
    app.add_routes(health_routes)
    app.add_routes(coupon_routes)
    app.add_routes(ambassador_routes)


__all__ = ['setup_routes']
