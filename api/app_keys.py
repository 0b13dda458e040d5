"""
Typed keys for objects stored on the aiohttp application.
"""

from aiohttp import web
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


SESSION_MAKER = web.AppKey("session_maker", async_sessionmaker[AsyncSession])
SERVICE_API_KEY = web.AppKey("service_api_key", str)
