"""Business logic services."""

from .quality_debug_service import QualityDebugService
