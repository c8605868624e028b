#!/usr/bin/env python3
"""
Answer Quality Module - Answer Quality Score (AQS) engine.

Public API:
- AnswerQualityService: Recompute orchestrator (the only side-effecting part)
- QAService: Answer mutations that trigger recomputes
- compute_aqs: Pure combiner + classifier over raw signals
- QualityLabel / RecomputeTrigger: Label and trigger enums

Layout:

- keywords.py: Career-domain vocabularies per question category
- signals.py: Content, behavior, expert and trust extractors
- scoring.py: Sub-score rules and the weighted, multiplied composite
- labels.py: AQS -> STAR / PRO / USEFUL / NORMAL
- locks.py: Per-answer in-process serialization
- service.py: AnswerQualityService orchestrator
- qa_service.py: QAService triggering handlers
"""

from core.quality.exceptions import (
    QualityError,
    AnswerNotFoundError,
    QuestionNotFoundError,
    QualityPersistenceError,
    QAPermissionError,
    QAValidationError,
)
from core.quality.labels import QualityLabel, classify
from core.quality.models import RecomputeTrigger, RecomputeResult, AQSResult, RawSignals
from core.quality.scoring import compute_aqs
from core.quality.service import AnswerQualityService, ComputeState
from core.quality.qa_service import QAService

__all__ = [
    'AnswerQualityService',
    'ComputeState',
    'QAService',
    'compute_aqs',
    'classify',
    'QualityLabel',
    'RecomputeTrigger',
    'RecomputeResult',
    'AQSResult',
    'RawSignals',
    'QualityError',
    'AnswerNotFoundError',
    'QuestionNotFoundError',
    'QualityPersistenceError',
    'QAPermissionError',
    'QAValidationError',
]
