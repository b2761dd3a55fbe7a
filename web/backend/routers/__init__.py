"""API route handlers."""

from .quality import router as quality_router
from .quality import admin_router as quality_admin_router
from .cron import router as cron_router
