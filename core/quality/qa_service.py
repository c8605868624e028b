#!/usr/bin/env python3
"""
Q&A Service - Primary mutations on answers and the recomputes they trigger.

Every mutation commits in its own unit of work first; the AQS recompute
runs afterwards in a separate one. A failing recompute therefore never
rolls back the user's action, and its error propagates to the caller.
"""

import logging
from typing import Any, Callable, ContextManager, List, Optional

from core.utils import to_uuid
from core.quality.exceptions import (
    AnswerNotFoundError,
    QuestionNotFoundError,
    QAPermissionError,
    QAValidationError,
)
from core.quality.models import RecomputeTrigger, RecomputeResult
from core.quality.service import AnswerQualityService
from core.quality.signals import HELPFUL, NOT_HELPFUL
from database.models import utcnow
from database.repository import QARepository
from database.uow import qa_uow

logger = logging.getLogger(__name__)

REACTION_TYPES = (HELPFUL, NOT_HELPFUL)
FLAG_REASONS = ('SPAM', 'ABUSE', 'MISLEADING', 'LOW_QUALITY', 'OTHER')

MAX_BODY_CHARS = 20000


def _require_user(user_id: Any):
    user_uuid = to_uuid(user_id)
    if user_uuid is None:
        raise QAPermissionError("A valid acting user is required")
    return user_uuid


def _clean_body(body: Optional[str], field: str = 'body') -> str:
    text = (body or '').strip()
    if not text:
        raise QAValidationError(f"{field} must not be empty")
    if len(text) > MAX_BODY_CHARS:
        raise QAValidationError(f"{field} exceeds {MAX_BODY_CHARS} characters")
    return text


class QAService:
    """
    Answer-side Q&A operations.

    The acting user id is taken as already authenticated; permission checks
    here are about roles within the thread (asker, answer author).
    """

    def __init__(
        self,
        quality_service: AnswerQualityService,
        uow_factory: Callable[[], ContextManager[QARepository]] = qa_uow
    ):
        self.quality = quality_service
        self.uow_factory = uow_factory

    def _load_answer(self, repo: QARepository, answer_id: Any, for_update: bool = False):
        answer_uuid = to_uuid(answer_id)
        answer = repo.answers.get_answer(answer_uuid, for_update=for_update) if answer_uuid else None
        if answer is None:
            raise AnswerNotFoundError(answer_id)
        return answer

    # ============= Questions =============

    def ask_question(self, user_id: Any, title: str, body: str = '', category: Optional[str] = None):
        """Create a question; returns its id."""
        author = _require_user(user_id)
        title = _clean_body(title, 'title')
        with self.uow_factory() as repo:
            question = repo.answers.create_question(
                author_id=author,
                title=title,
                body=(body or '').strip(),
                category=category.strip().lower() if category else None,
            )
            question_id = question.id
        logger.info(f"Question {question_id} created by {author}")
        return question_id

    # ============= Answers =============

    def submit_answer(self, question_id: Any, user_id: Any, body: str) -> RecomputeResult:
        author = _require_user(user_id)
        text = _clean_body(body)

        with self.uow_factory() as repo:
            question_uuid = to_uuid(question_id)
            question = repo.answers.get_question(question_uuid) if question_uuid else None
            if question is None:
                raise QuestionNotFoundError(question_id)
            answer = repo.answers.create_answer(question.id, author, text)
            answer_id = answer.id

        logger.info(f"Answer {answer_id} submitted to question {question_id} by {author}")
        return self.quality.recompute(answer_id, RecomputeTrigger.SUBMIT)

    def edit_answer(self, answer_id: Any, user_id: Any, body: str) -> RecomputeResult:
        editor = _require_user(user_id)
        text = _clean_body(body)

        with self.uow_factory() as repo:
            answer = self._load_answer(repo, answer_id, for_update=True)
            if answer.author_id != editor:
                raise QAPermissionError("Only the author can edit an answer")
            answer.body = text
            answer.edit_count = (answer.edit_count or 0) + 1
            answer.updated_at = utcnow()
            answer_uuid = answer.id

        return self.quality.recompute(answer_uuid, RecomputeTrigger.EDIT)

    # ============= Reactions =============

    def record_reaction(self, answer_id: Any, user_id: Any, reaction_type: str) -> RecomputeResult:
        """
        Add or replace the user's reaction on an answer.

        Authors cannot react to their own answers. Only the asker's reaction
        feeds the score; others are still recorded and recomputed so the
        stored reaction totals stay current.
        """
        reactor = _require_user(user_id)
        if reaction_type not in REACTION_TYPES:
            raise QAValidationError(f"Invalid reaction type: {reaction_type}")

        with self.uow_factory() as repo:
            answer = self._load_answer(repo, answer_id)
            if answer.author_id == reactor:
                raise QAPermissionError("Cannot react to your own answer")
            repo.answers.upsert_reaction(answer.id, reactor, reaction_type)
            answer_uuid = answer.id

        return self.quality.recompute(answer_uuid, RecomputeTrigger.REACTION)

    def remove_reaction(self, answer_id: Any, user_id: Any) -> RecomputeResult:
        reactor = _require_user(user_id)

        with self.uow_factory() as repo:
            answer = self._load_answer(repo, answer_id)
            removed = repo.answers.delete_reaction(answer.id, reactor)
            answer_uuid = answer.id

        if not removed:
            logger.debug(f"No reaction from {reactor} on answer {answer_uuid} to remove")
        return self.quality.recompute(answer_uuid, RecomputeTrigger.REACTION)

    # ============= Acceptance =============

    def toggle_accept(self, answer_id: Any, user_id: Any) -> List[RecomputeResult]:
        """
        Accept an answer, or un-accept it if it already is.

        Only the question's author may do this, never on their own answer.
        At most one answer per question is accepted: accepting a new one
        clears the previous one, which is recomputed as well.

        Returns:
            Recompute results, the toggled answer first
        """
        actor = _require_user(user_id)

        with self.uow_factory() as repo:
            answer = self._load_answer(repo, answer_id, for_update=True)
            question = repo.answers.get_question(answer.question_id)
            if question is None:
                raise QuestionNotFoundError(answer.question_id)
            if question.author_id != actor:
                raise QAPermissionError("Only the question author can accept an answer")
            if answer.author_id == actor:
                raise QAPermissionError("Cannot accept your own answer")

            affected = [answer.id]
            if answer.is_accepted:
                answer.is_accepted = False
                answer.accepted_at = None
                logger.info(f"Answer {answer.id} un-accepted by {actor}")
            else:
                for previous in repo.answers.get_accepted_answers(question.id):
                    if previous.id != answer.id:
                        previous.is_accepted = False
                        previous.accepted_at = None
                        affected.append(previous.id)
                answer.is_accepted = True
                answer.accepted_at = utcnow()
                logger.info(f"Answer {answer.id} accepted by {actor}")

        return [self.quality.recompute(aid, RecomputeTrigger.ACCEPT) for aid in affected]

    # ============= Flags =============

    def flag_answer(self, answer_id: Any, user_id: Any, reason: str, note: Optional[str] = None) -> RecomputeResult:
        flagger = _require_user(user_id)
        reason = (reason or '').strip().upper()
        if reason not in FLAG_REASONS:
            raise QAValidationError(f"Invalid flag reason: {reason or None}")

        with self.uow_factory() as repo:
            answer = self._load_answer(repo, answer_id)
            if answer.author_id == flagger:
                raise QAPermissionError("Cannot flag your own answer")
            repo.answers.upsert_flag(answer.id, flagger, reason, note=(note or None))
            answer_uuid = answer.id

        logger.info(f"Answer {answer_uuid} flagged as {reason} by {flagger}")
        return self.quality.recompute(answer_uuid, RecomputeTrigger.FLAG)

    # ============= Follow-ups =============

    def add_comment(self, answer_id: Any, user_id: Any, body: str) -> Optional[RecomputeResult]:
        """
        Attach a follow-up reply to an answer.

        Only the asker's replies count as follow-ups, so the answer is
        recomputed only when the asker comments. Returns None otherwise.
        """
        commenter = _require_user(user_id)
        text = _clean_body(body)

        with self.uow_factory() as repo:
            answer = self._load_answer(repo, answer_id)
            question = repo.answers.get_question(answer.question_id)
            repo.answers.add_comment(answer.id, commenter, text)
            answer_uuid = answer.id
            by_asker = question is not None and question.author_id == commenter

        if not by_asker:
            return None
        return self.quality.recompute(answer_uuid, RecomputeTrigger.REACTION)
