import logging
from typing import Any, List, Optional

from sqlalchemy import select, delete, func

from database.models import Question, Answer, AnswerReaction, AnswerFlag, AnswerComment, utcnow
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class AnswerRepository(BaseRepository):
    """Questions, answers and the reactions/flags/comments attached to answers."""

    # ---- questions ----

    def get_question(self, question_id: Any) -> Optional[Question]:
        stmt = select(Question).where(Question.id == question_id)
        return self._one_or_none(stmt)

    def create_question(
        self,
        author_id: Any,
        title: str,
        body: str = '',
        category: Optional[str] = None,
        created_at=None
    ) -> Question:
        question = Question(
            author_id=author_id,
            title=title,
            body=body,
            category=category,
            created_at=created_at or utcnow(),
        )
        self.db.add(question)
        self.db.flush()
        return question

    # ---- answers ----

    def get_answer(self, answer_id: Any, for_update: bool = False) -> Optional[Answer]:
        """
        Fetch an answer by id.

        With for_update=True the row is locked until the surrounding
        transaction ends (ignored by backends without row locks).
        """
        stmt = select(Answer).where(Answer.id == answer_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self._one_or_none(stmt)

    def create_answer(self, question_id: Any, author_id: Any, body: str, created_at=None) -> Answer:
        now = created_at or utcnow()
        answer = Answer(
            question_id=question_id,
            author_id=author_id,
            body=body,
            is_accepted=False,
            edit_count=0,
            created_at=now,
            updated_at=now,
        )
        self.db.add(answer)
        self.db.flush()
        return answer

    def get_accepted_answers(self, question_id: Any) -> List[Answer]:
        stmt = select(Answer).where(
            Answer.question_id == question_id,
            Answer.is_accepted.is_(True)
        )
        return self._all(stmt)

    def get_answer_ids_for_question(self, question_id: Any) -> List[Any]:
        stmt = select(Answer.id).where(Answer.question_id == question_id).order_by(Answer.created_at)
        return self._all(stmt)

    def get_answer_ids_for_author(self, author_id: Any) -> List[Any]:
        stmt = select(Answer.id).where(Answer.author_id == author_id).order_by(Answer.created_at)
        return self._all(stmt)

    # ---- reactions ----

    def get_reactions(self, answer_id: Any) -> List[AnswerReaction]:
        stmt = select(AnswerReaction).where(
            AnswerReaction.answer_id == answer_id
        ).order_by(AnswerReaction.created_at, AnswerReaction.user_id)
        return self._all(stmt)

    def upsert_reaction(self, answer_id: Any, user_id: Any, reaction_type: str) -> AnswerReaction:
        stmt = select(AnswerReaction).where(
            AnswerReaction.answer_id == answer_id,
            AnswerReaction.user_id == user_id
        )
        reaction = self._one_or_none(stmt)

        if reaction:
            reaction.type = reaction_type
            reaction.created_at = utcnow()
        else:
            reaction = AnswerReaction(answer_id=answer_id, user_id=user_id, type=reaction_type)
            self.db.add(reaction)

        self.db.flush()
        return reaction

    def delete_reaction(self, answer_id: Any, user_id: Any) -> int:
        result = self.db.execute(
            delete(AnswerReaction).where(
                AnswerReaction.answer_id == answer_id,
                AnswerReaction.user_id == user_id
            )
        )
        return result.rowcount or 0

    # ---- flags ----

    def get_flags(self, answer_id: Any) -> List[AnswerFlag]:
        stmt = select(AnswerFlag).where(
            AnswerFlag.answer_id == answer_id
        ).order_by(AnswerFlag.created_at, AnswerFlag.user_id)
        return self._all(stmt)

    def upsert_flag(self, answer_id: Any, user_id: Any, reason: str, note: Optional[str] = None) -> AnswerFlag:
        stmt = select(AnswerFlag).where(
            AnswerFlag.answer_id == answer_id,
            AnswerFlag.user_id == user_id
        )
        flag = self._one_or_none(stmt)

        if flag:
            flag.reason = reason
            flag.note = note
            flag.created_at = utcnow()
        else:
            flag = AnswerFlag(answer_id=answer_id, user_id=user_id, reason=reason, note=note)
            self.db.add(flag)

        self.db.flush()
        return flag

    # ---- follow-ups ----

    def add_comment(self, answer_id: Any, author_id: Any, body: str) -> AnswerComment:
        comment = AnswerComment(answer_id=answer_id, author_id=author_id, body=body)
        self.db.add(comment)
        self.db.flush()
        return comment

    def count_followups(self, answer_id: Any, asker_id: Any) -> int:
        """Replies the asker left on this answer."""
        if asker_id is None:
            return 0
        stmt = select(func.count()).select_from(AnswerComment).where(
            AnswerComment.answer_id == answer_id,
            AnswerComment.author_id == asker_id
        )
        return int(self.db.execute(stmt).scalar_one())
