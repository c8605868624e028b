from .base import Base, JSONType, utcnow
from .qa import Question, Answer, AnswerReaction, AnswerFlag, AnswerComment
from .expertise import AuthorExpertiseProfile
from .quality import AnswerQualityMetrics

__all__ = [
    'Base',
    'JSONType',
    'utcnow',
    'Question',
    'Answer',
    'AnswerReaction',
    'AnswerFlag',
    'AnswerComment',
    'AuthorExpertiseProfile',
    'AnswerQualityMetrics',
]
