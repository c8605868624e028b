#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.
"""

from functools import lru_cache, partial

from fastapi import Depends

from core.quality import AnswerQualityService, QAService
from database.database import make_engine, make_session_factory
from database.uow import qa_uow
from .config import get_config
from .services.quality_debug_service import QualityDebugService


class DatabaseManager:
    """Manages database connections and sessions."""

    def __init__(self):
        config = get_config()
        self.engine = make_engine(config.database.url, pool_size=10, max_overflow=20)
        self.SessionLocal = make_session_factory(self.engine)


@lru_cache()
def get_db_manager() -> DatabaseManager:
    """Engine and session factory, created on first use."""
    return DatabaseManager()


@lru_cache()
def get_quality_service() -> AnswerQualityService:
    """
    Process-wide AnswerQualityService.

    A single instance so that its per-answer lock registry is shared by
    every request handled in this process.
    """
    uow_factory = partial(qa_uow, get_db_manager().SessionLocal)
    return AnswerQualityService(uow_factory=uow_factory, config=get_config().quality)


def get_qa_service(
    quality: AnswerQualityService = Depends(get_quality_service)
) -> QAService:
    return QAService(quality, uow_factory=quality.uow_factory)


def get_debug_service(
    quality: AnswerQualityService = Depends(get_quality_service)
) -> QualityDebugService:
    return QualityDebugService(quality)
