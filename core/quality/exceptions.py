#!/usr/bin/env python3
"""
Quality Engine Exceptions.

Missing inputs inside extractors are never errors; only the conditions
below reach callers.
"""


class QualityError(Exception):
    """Base exception for the Q&A quality engine."""
    pass


class AnswerNotFoundError(QualityError):
    """Raised when the target answer does not exist."""

    def __init__(self, answer_id):
        self.answer_id = answer_id
        super().__init__(f"Answer not found: {answer_id}")


class QuestionNotFoundError(QualityError):
    """Raised when the target question does not exist."""

    def __init__(self, question_id):
        self.question_id = question_id
        super().__init__(f"Question not found: {question_id}")


class QualityPersistenceError(QualityError):
    """Raised when the metrics upsert fails; the previous row is left untouched."""

    def __init__(self, answer_id, cause: Exception):
        self.answer_id = answer_id
        self.cause = cause
        super().__init__(f"Failed to persist quality metrics for answer {answer_id}: {cause}")


class QAPermissionError(QualityError):
    """Raised when the acting user may not perform a Q&A mutation."""
    pass


class QAValidationError(QualityError):
    """Raised when a Q&A mutation carries invalid input."""
    pass
