"""Fire-and-forget admin notifications sent through Telegram."""
from __future__ import annotations

import asyncio
import html
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from aiogram import Bot

logger = logging.getLogger(__name__)


@dataclass
class AdminNotification:
    """Something administrators should know about."""
    
    type: str
    title: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)
    
    def render(self) -> str:
        """HTML message body for Telegram."""
        lines = [f"🔔 <b>{html.escape(self.title)}</b>", "", html.escape(self.message)]
        for key, value in self.data.items():
            lines.append(f"• {html.escape(str(key))}: <code>{html.escape(str(value))}</code>")
        return "\n".join(lines)


class AdminNotifier:
    """
    Dispatches notifications to admin Telegram chats.
    
    dispatch() never raises and never blocks the caller: each notification
    is sent at most once from a background task, and delivery failures are
    only logged.
    """
    
    def __init__(self, bot: Optional[Bot], admin_ids: List[int]):
        self.bot = bot
        self.admin_ids = list(admin_ids)
        self._tasks: Set[asyncio.Task] = set()
    
    @property
    def enabled(self) -> bool:
        return self.bot is not None and bool(self.admin_ids)
    
    def dispatch(self, notification: AdminNotification) -> Optional[asyncio.Task]:
        """Schedule delivery and return immediately."""
        if not self.enabled:
            logger.info(f"Admin notifications disabled, dropping '{notification.type}'")
            return None
        
        try:
            task = asyncio.get_running_loop().create_task(self._send(notification))
        except RuntimeError as e:
            logger.error(f"Failed to schedule admin notification: {e}")
            return None
        
        # Keep a reference until the task finishes
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task
    
    async def _send(self, notification: AdminNotification) -> int:
        """Send to every admin; returns how many deliveries succeeded."""
        text = notification.render()
        sent = 0
        for admin_id in self.admin_ids:
            try:
                await self.bot.send_message(admin_id, text, parse_mode="HTML")
                sent += 1
            except Exception as e:
                logger.error(
                    f"Failed to notify admin {admin_id} about {notification.type}: {e}",
                    exc_info=True
                )
        logger.info(f"Admin notification '{notification.type}' delivered to {sent}/{len(self.admin_ids)} admins")
        return sent
    
    async def drain(self) -> None:
        """Wait for in-flight notifications (used on shutdown)."""
        if self._tasks:
            await asyncio.wait(set(self._tasks))
    
    async def close(self) -> None:
        """Flush pending sends and close the bot HTTP session."""
        await self.drain()
        if self.bot is not None:
            await self.bot.session.close()


def create_admin_notifier(bot_token: Optional[str], admin_ids: List[int]) -> AdminNotifier:
    """Build the notifier from settings; without a token it only logs."""
    bot = Bot(token=bot_token) if bot_token else None
    return AdminNotifier(bot, admin_ids)
