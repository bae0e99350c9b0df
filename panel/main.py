"""Ambassador panel entrypoint: aiohttp API server.

Note: Run database migrations (alembic upgrade head) before the first start.
"""
import asyncio
import logging
from typing import Optional

from aiohttp import web

from database import Database
from panel.app_keys import DB_KEY, NOTIFIER_KEY
from panel.config import settings
from panel.handlers import setup_routes
from panel.logging_config import setup_logging
from panel.middlewares import get_middlewares
from services.notifications import AdminNotifier, create_admin_notifier

logger = logging.getLogger(__name__)


async def on_cleanup(app: web.Application):
    """Flush pending notifications and release the connection pool."""
    notifier = app.get(NOTIFIER_KEY)
    if notifier is not None:
        await notifier.close()
    await app[DB_KEY].close()


def build_app(
    db: Optional[Database] = None,
    notifier: Optional[AdminNotifier] = None,
) -> web.Application:
    """Create the aiohttp application with routes, middlewares and shared resources."""
    app = web.Application(middlewares=get_middlewares())
    app[DB_KEY] = db or Database()
    if notifier is None:
        notifier = create_admin_notifier(settings.bot_token, settings.admin_telegram_ids)
    if notifier is not None:
        app[NOTIFIER_KEY] = notifier
    app.on_cleanup.append(on_cleanup)
    setup_routes(app)
    return app


async def main():
    setup_logging()
    app = build_app()
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, settings.host, settings.port)
    await site.start()
    logger.info(f"Ambassador panel API listening on {settings.host}:{settings.port}")
    
    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()


if __name__ == "__main__":
    asyncio.run(main())
