"""API route handlers."""

from .quality import router as quality_router
from .cron import router as cron_router
from .qa import router as qa_router
