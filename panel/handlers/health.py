"""Health check endpoint."""
from datetime import datetime, timezone

from aiohttp import web

routes = web.RouteTableDef()


@routes.get('/health')
async def health_check(request: web.Request):
    """Health check endpoint."""
    return web.json_response({
        "status": "ok",
        "time": datetime.now(timezone.utc).isoformat()
    })
