from database.repositories.base import BaseRepository
from database.repositories.answer import AnswerRepository
from database.repositories.expertise import ExpertiseRepository
from database.repositories.quality import QualityMetricsRepository

__all__ = [
    'BaseRepository',
    'AnswerRepository',
    'ExpertiseRepository',
    'QualityMetricsRepository',
]
