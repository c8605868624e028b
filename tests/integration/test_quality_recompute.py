#!/usr/bin/env python3
"""
Integration tests for AQS recomputes against a real (SQLite) database.

Runs the full load -> extract -> combine -> classify -> upsert path through
qa_uow and the repositories.
"""

import unittest
import uuid
from datetime import timedelta
from functools import partial
from unittest.mock import patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from core.quality import AnswerQualityService, ComputeState, QAService, RecomputeTrigger, QualityLabel
from core.quality.exceptions import AnswerNotFoundError, QualityPersistenceError
from database.models import Answer, AnswerQualityMetrics, utcnow
from database.repositories.quality import QualityMetricsRepository
from database.uow import qa_uow
from tests import make_sqlite_session_factory, seed_question, RICH_ANSWER


class QualityDatabaseTestCase(unittest.TestCase):

    def setUp(self):
        self.engine, self.Session = make_sqlite_session_factory()
        self.uow = partial(qa_uow, self.Session)
        self.quality = AnswerQualityService(uow_factory=self.uow)
        self.qa = QAService(self.quality, uow_factory=self.uow)
        self.question_id, self.asker_id = seed_question(self.Session)
        self.author_id = uuid.uuid4()

    def tearDown(self):
        self.engine.dispose()

    def metrics_row(self, answer_id):
        session = self.Session()
        try:
            return session.execute(
                select(AnswerQualityMetrics).where(AnswerQualityMetrics.answer_id == answer_id)
            ).scalar_one_or_none()
        finally:
            session.close()

    def metrics_count(self):
        session = self.Session()
        try:
            return session.execute(select(func.count()).select_from(AnswerQualityMetrics)).scalar_one()
        finally:
            session.close()


class TestEndToEndScenario(QualityDatabaseTestCase):

    def test_submit_reaction_accept(self):
        """A rich answer climbs as the asker reacts and then accepts it."""
        submitted = self.qa.submit_answer(self.question_id, self.author_id, RICH_ANSWER)
        answer_id = submitted.answer_id

        self.assertEqual(submitted.trigger, RecomputeTrigger.SUBMIT)
        self.assertIsNone(submitted.previous_aqs)
        row = self.metrics_row(answer_id)
        self.assertEqual(row.aqs, submitted.aqs)
        self.assertEqual(row.last_trigger, 'SUBMIT')
        self.assertGreaterEqual(submitted.label.rank, QualityLabel.USEFUL.rank)

        reacted = self.qa.record_reaction(answer_id, self.asker_id, 'helpful')
        self.assertEqual(reacted.previous_aqs, submitted.aqs)
        self.assertIn(reacted.aqs - submitted.aqs, (7, 8))

        accepted = self.qa.toggle_accept(answer_id, self.asker_id)[0]
        self.assertEqual(accepted.trigger, RecomputeTrigger.ACCEPT)
        self.assertIn(accepted.aqs - reacted.aqs, (12, 13))
        self.assertGreaterEqual(accepted.label.rank, reacted.label.rank)
        self.assertEqual(accepted.label, QualityLabel.PRO)

        row = self.metrics_row(answer_id)
        self.assertEqual(row.aqs, accepted.aqs)
        self.assertEqual(row.label, 'PRO')
        self.assertEqual(row.last_trigger, 'ACCEPT')
        self.assertEqual(row.details['engagement']['accepted_bonus'], 50.0)
        self.assertEqual(row.details['engagement']['asker_helpful_bonus'], 30.0)
        self.assertNotIn('trigger', row.details)
        self.assertEqual(self.metrics_count(), 1)

    def test_recompute_is_idempotent(self):
        answer_id = self.qa.submit_answer(self.question_id, self.author_id, RICH_ANSWER).answer_id

        first = self.quality.recompute(answer_id, RecomputeTrigger.MANUAL)
        first_row = self.metrics_row(answer_id)
        second = self.quality.recompute(answer_id, RecomputeTrigger.MANUAL)
        second_row = self.metrics_row(answer_id)

        self.assertEqual(first.aqs, second.aqs)
        self.assertFalse(second.changed)
        self.assertEqual(first_row.details, second_row.details)
        self.assertEqual(first_row.id, second_row.id)
        self.assertEqual(self.metrics_count(), 1)

    def test_generic_answer_scores_low(self):
        result = self.qa.submit_answer(self.question_id, self.author_id, "Just ask HR.")
        row = self.metrics_row(result.answer_id)

        self.assertEqual(result.label, QualityLabel.NORMAL)
        self.assertTrue(row.details['raw_signals']['content']['is_generic'])
        self.assertEqual(row.details['content']['generic_penalty'], -20.0)

    def test_profile_strength_scales_score(self):
        answer_id = self.qa.submit_answer(self.question_id, self.author_id, RICH_ANSWER).answer_id
        neutral = self.metrics_row(answer_id)
        self.assertEqual(float(neutral.expert_multiplier), 1.0)

        results = self.quality.update_profile_strength_and_recompute(self.author_id, 100)

        self.assertEqual(len(results), 1)
        self.assertEqual(results[0].trigger, RecomputeTrigger.PROFILE_UPDATE)
        self.assertGreater(results[0].aqs, neutral.aqs)
        self.assertEqual(float(self.metrics_row(answer_id).expert_multiplier), 1.2)

    def test_preview_matches_recompute_without_writing(self):
        session = self.Session()
        try:
            answer = Answer(question_id=self.question_id, author_id=self.author_id, body=RICH_ANSWER)
            session.add(answer)
            session.commit()
            answer_id = answer.id
        finally:
            session.close()

        preview = self.quality.preview(answer_id)
        self.assertIsNone(self.metrics_row(answer_id))
        self.assertEqual(self.quality.state(answer_id), ComputeState.UNCOMPUTED)

        stored = self.quality.recompute(answer_id, RecomputeTrigger.MANUAL)
        self.assertEqual(preview.aqs, stored.aqs)
        self.assertEqual(preview.label, stored.label)

        with self.assertRaises(AnswerNotFoundError):
            self.quality.preview(uuid.uuid4())


class TestFailureModes(QualityDatabaseTestCase):

    def test_unknown_answer_writes_nothing(self):
        with self.assertRaises(AnswerNotFoundError):
            self.quality.recompute(uuid.uuid4(), RecomputeTrigger.MANUAL)
        self.assertEqual(self.metrics_count(), 0)

    def test_failed_upsert_keeps_previous_row(self):
        answer_id = self.qa.submit_answer(self.question_id, self.author_id, RICH_ANSWER).answer_id
        before = self.metrics_row(answer_id)

        # Asker reaction commits, the recompute that follows fails
        with patch.object(QualityMetricsRepository, 'upsert_metrics', side_effect=SQLAlchemyError("disk full")):
            with self.assertRaises(QualityPersistenceError):
                self.qa.record_reaction(answer_id, self.asker_id, 'helpful')

        after = self.metrics_row(answer_id)
        self.assertEqual(after.aqs, before.aqs)
        self.assertEqual(after.last_trigger, 'SUBMIT')
        self.assertEqual(after.computed_at, before.computed_at)

        with self.uow() as repo:
            self.assertEqual(len(repo.answers.get_reactions(answer_id)), 1)


class TestStaleBatch(QualityDatabaseTestCase):

    def test_batch_picks_missing_and_old_metrics(self):
        scored = self.qa.submit_answer(self.question_id, self.author_id, RICH_ANSWER).answer_id
        fresh = self.qa.submit_answer(self.question_id, uuid.uuid4(), "Check the labor law on overtime.").answer_id

        session = self.Session()
        try:
            unscored = Answer(question_id=self.question_id, author_id=uuid.uuid4(), body="Unscored answer body")
            session.add(unscored)
            row = session.execute(
                select(AnswerQualityMetrics).where(AnswerQualityMetrics.answer_id == scored)
            ).scalar_one()
            row.computed_at = utcnow() - timedelta(days=30)
            session.commit()
            unscored_id = unscored.id
        finally:
            session.close()

        outcome = self.quality.batch_recompute_stale(max_age_days=7, limit=10)

        self.assertEqual(outcome['processed'], 2)
        self.assertEqual(outcome['failed'], 0)
        self.assertEqual(self.metrics_row(unscored_id).last_trigger, 'CRON')
        self.assertEqual(self.metrics_row(scored).last_trigger, 'CRON')
        self.assertEqual(self.metrics_row(fresh).last_trigger, 'SUBMIT')

        # Everything is fresh now
        self.assertEqual(self.quality.batch_recompute_stale(max_age_days=7)['processed'], 0)

    def test_sorted_by_quality(self):
        weak = self.qa.submit_answer(self.question_id, uuid.uuid4(), "Just ask HR.").answer_id
        strong = self.qa.submit_answer(self.question_id, self.author_id, RICH_ANSWER).answer_id
        accepted = self.qa.submit_answer(self.question_id, uuid.uuid4(), "Ask payroll.").answer_id
        self.qa.toggle_accept(accepted, self.asker_id)

        with self.uow() as repo:
            rows = repo.metrics.get_answers_sorted_by_quality(self.question_id)
            order = [answer.id for answer, _ in rows]

        self.assertEqual(order, [accepted, strong, weak])


@pytest.mark.db
class TestPostgresRowLock(unittest.TestCase):
    """Same flow on PostgreSQL, where SELECT ... FOR UPDATE is enforced."""

    @pytest.fixture(autouse=True)
    def _db(self, test_db_url):
        from sqlalchemy import create_engine
        from sqlalchemy.orm import sessionmaker

        self.engine = create_engine(test_db_url)
        self.Session = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)
        yield
        self.engine.dispose()

    def test_submit_and_react(self):
        uow = partial(qa_uow, self.Session)
        quality = AnswerQualityService(uow_factory=uow)
        qa = QAService(quality, uow_factory=uow)
        question_id, asker_id = seed_question(self.Session)

        submitted = qa.submit_answer(question_id, uuid.uuid4(), RICH_ANSWER)
        reacted = qa.record_reaction(submitted.answer_id, asker_id, 'helpful')

        self.assertGreater(reacted.aqs, submitted.aqs)


if __name__ == '__main__':
    unittest.main()
