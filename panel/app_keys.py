"""Typed keys for objects stored on the aiohttp application."""
from aiohttp import web

from database import Database
from services.notifications import AdminNotifier

DB_KEY = web.AppKey("db", Database)
NOTIFIER_KEY = web.AppKey("notifier", AdminNotifier)
