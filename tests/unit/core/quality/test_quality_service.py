#!/usr/bin/env python3
"""
Unit tests for AnswerQualityService with mocked repositories.

Covers call order, error mapping, retries and per-answer serialization.
Database-backed behavior lives in tests/integration/test_quality_recompute.py.
"""

import contextlib
import threading
import time
import unittest
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from sqlalchemy.exc import IntegrityError, OperationalError

from core.quality import scoring
from core.quality.exceptions import AnswerNotFoundError, QualityPersistenceError
from core.quality.models import RecomputeTrigger
from core.quality.labels import QualityLabel
from core.quality.service import AnswerQualityService, ComputeState


def make_repo(answer_id=None, metrics=None):
    asked = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
    asker = uuid.uuid4()

    repo = MagicMock()
    repo.answers.get_answer.return_value = SimpleNamespace(
        id=answer_id or uuid.uuid4(),
        question_id=uuid.uuid4(),
        author_id=uuid.uuid4(),
        body="1. Check the contract\n2. Ask HR for the payslip breakdown",
        is_accepted=False,
        edit_count=0,
        created_at=asked + timedelta(minutes=30),
    )
    repo.answers.get_question.return_value = SimpleNamespace(author_id=asker, category='salary', created_at=asked)
    repo.answers.get_reactions.return_value = [SimpleNamespace(user_id=asker, type='helpful')]
    repo.answers.get_flags.return_value = []
    repo.answers.count_followups.return_value = 0
    repo.expertise.get_profile.return_value = None
    repo.metrics.get_metrics.return_value = metrics
    return repo


def uow_for(repo):
    @contextlib.contextmanager
    def factory():
        yield repo
    return factory


class TestRecompute(unittest.TestCase):

    def test_recompute_persists_full_row(self):
        answer_id = uuid.uuid4()
        repo = make_repo(answer_id)
        service = AnswerQualityService(uow_factory=uow_for(repo))

        result = service.recompute(str(answer_id), RecomputeTrigger.REACTION)

        repo.answers.get_answer.assert_called_once_with(answer_id, for_update=True)
        repo.metrics.upsert_metrics.assert_called_once()
        args, kwargs = repo.metrics.upsert_metrics.call_args
        values = args[1]

        self.assertEqual(result.answer_id, answer_id)
        self.assertEqual(values['aqs'], result.aqs)
        self.assertEqual(values['label'], result.label.value)
        self.assertEqual(values['last_trigger'], 'REACTION')
        self.assertNotIn('trigger', values['details'])
        self.assertEqual(values['details']['engagement']['asker_helpful_bonus'], 30.0)
        self.assertIsNone(result.previous_aqs)
        self.assertTrue(result.changed)

    def test_previous_values_and_changed_flag(self):
        repo = make_repo()
        service = AnswerQualityService(uow_factory=uow_for(repo))
        first = service.recompute(uuid.uuid4(), RecomputeTrigger.SUBMIT)

        repo.metrics.get_metrics.return_value = SimpleNamespace(aqs=first.aqs, label=first.label.value)
        second = service.recompute(uuid.uuid4(), RecomputeTrigger.MANUAL)

        self.assertEqual(second.previous_aqs, first.aqs)
        self.assertEqual(second.previous_label, first.label.value)
        self.assertFalse(second.changed)

    def test_trigger_does_not_affect_score(self):
        repo = make_repo()
        service = AnswerQualityService(uow_factory=uow_for(repo))
        answer_id = uuid.uuid4()

        scores = {service.recompute(answer_id, trigger).aqs for trigger in RecomputeTrigger}
        self.assertEqual(len(scores), 1)

    def test_behavior_extracted_before_expert(self):
        repo = make_repo()
        service = AnswerQualityService(uow_factory=uow_for(repo))
        calls = []

        import core.quality.service as service_module
        real_behavior = service_module.extract_behavior_signals
        real_expert = service_module.extract_expert_signals

        def behavior(*args, **kwargs):
            calls.append('behavior')
            return real_behavior(*args, **kwargs)

        def expert(*args, **kwargs):
            calls.append('expert')
            return real_expert(*args, **kwargs)

        with patch.object(service_module, 'extract_behavior_signals', side_effect=behavior), \
                patch.object(service_module, 'extract_expert_signals', side_effect=expert):
            service.recompute(uuid.uuid4(), RecomputeTrigger.FLAG)

        self.assertEqual(calls, ['behavior', 'expert'])

    def test_missing_answer(self):
        repo = make_repo()
        repo.answers.get_answer.return_value = None
        service = AnswerQualityService(uow_factory=uow_for(repo))

        with self.assertRaises(AnswerNotFoundError):
            service.recompute(uuid.uuid4(), RecomputeTrigger.MANUAL)
        repo.metrics.upsert_metrics.assert_not_called()

    def test_invalid_answer_id(self):
        service = AnswerQualityService(uow_factory=uow_for(make_repo()))
        with self.assertRaises(AnswerNotFoundError):
            service.recompute("not-a-uuid", RecomputeTrigger.MANUAL)

    def test_missing_question_uses_neutral_signals(self):
        repo = make_repo()
        repo.answers.get_question.return_value = None
        service = AnswerQualityService(uow_factory=uow_for(repo))

        result = service.recompute(uuid.uuid4(), RecomputeTrigger.SUBMIT)

        values = repo.metrics.upsert_metrics.call_args[0][1]
        self.assertIsNone(values['details']['raw_signals']['trust']['response_time_minutes'])
        self.assertFalse(values['details']['raw_signals']['behavior']['asker_helpful'])
        self.assertIn(result.label, set(QualityLabel))

    def test_persistence_error_is_wrapped(self):
        repo = make_repo()
        repo.metrics.upsert_metrics.side_effect = IntegrityError("INSERT", {}, Exception("duplicate"))
        service = AnswerQualityService(uow_factory=uow_for(repo))

        with self.assertRaises(QualityPersistenceError) as ctx:
            service.recompute(uuid.uuid4(), RecomputeTrigger.EDIT)
        self.assertIsInstance(ctx.exception.cause, IntegrityError)
        self.assertEqual(repo.metrics.upsert_metrics.call_count, 1)

    def test_operational_errors_are_retried(self):
        repo = make_repo()
        repo.metrics.upsert_metrics.side_effect = [
            OperationalError("UPDATE", {}, Exception("deadlock detected")),
            None,
        ]
        service = AnswerQualityService(uow_factory=uow_for(repo))

        result = service.recompute(uuid.uuid4(), RecomputeTrigger.REACTION)

        self.assertEqual(repo.metrics.upsert_metrics.call_count, 2)
        self.assertEqual(result.trigger, RecomputeTrigger.REACTION)

    def test_operational_errors_give_up_after_three_attempts(self):
        repo = make_repo()
        repo.metrics.upsert_metrics.side_effect = OperationalError("UPDATE", {}, Exception("server closed"))
        service = AnswerQualityService(uow_factory=uow_for(repo))

        with self.assertRaises(QualityPersistenceError):
            service.recompute(uuid.uuid4(), RecomputeTrigger.REACTION)
        self.assertEqual(repo.metrics.upsert_metrics.call_count, 3)


class TestStateAndSerialization(unittest.TestCase):

    def test_state_transitions(self):
        repo = make_repo()
        service = AnswerQualityService(uow_factory=uow_for(repo))
        answer_id = uuid.uuid4()
        seen = []
        real_compute = scoring.compute_aqs

        def observing_compute(signals, config=None):
            seen.append(service.state(answer_id))
            return real_compute(signals, config)

        self.assertEqual(service.state(answer_id), ComputeState.UNCOMPUTED)

        with patch('core.quality.service.compute_aqs', side_effect=observing_compute):
            service.recompute(answer_id, RecomputeTrigger.SUBMIT)

        self.assertEqual(seen, [ComputeState.COMPUTING])
        repo.metrics.get_metrics.return_value = SimpleNamespace(aqs=10, label='NORMAL')
        self.assertEqual(service.state(answer_id), ComputeState.COMPUTED)

    def test_same_answer_recomputes_never_overlap(self):
        repo = make_repo()
        service = AnswerQualityService(uow_factory=uow_for(repo))
        answer_id = uuid.uuid4()
        real_compute = scoring.compute_aqs

        active = 0
        max_active = 0
        guard = threading.Lock()

        def slow_compute(signals, config=None):
            nonlocal active, max_active
            with guard:
                active += 1
                max_active = max(max_active, active)
            time.sleep(0.02)
            with guard:
                active -= 1
            return real_compute(signals, config)

        with patch('core.quality.service.compute_aqs', side_effect=slow_compute):
            threads = [
                threading.Thread(target=service.recompute, args=(answer_id, RecomputeTrigger.REACTION))
                for _ in range(6)
            ]
            for t in threads:
                t.start()
            for t in threads:
                t.join()

        self.assertEqual(max_active, 1)
        self.assertEqual(repo.metrics.upsert_metrics.call_count, 6)

    def test_different_answers_run_concurrently(self):
        repo = make_repo()
        service = AnswerQualityService(uow_factory=uow_for(repo))
        real_compute = scoring.compute_aqs
        barrier = threading.Barrier(2, timeout=2)
        errors = []

        def meeting_compute(signals, config=None):
            try:
                barrier.wait()
            except threading.BrokenBarrierError as e:
                errors.append(e)
            return real_compute(signals, config)

        with patch('core.quality.service.compute_aqs', side_effect=meeting_compute):
            threads = [
                threading.Thread(target=service.recompute, args=(uuid.uuid4(), RecomputeTrigger.SUBMIT))
                for _ in range(2)
            ]
            for t in threads:
                t.start()
            for t in threads:
                t.join()

        self.assertEqual(errors, [])


class TestBulk(unittest.TestCase):

    def test_batch_recompute_stale_counts(self):
        repo = make_repo()
        ids = [uuid.uuid4() for _ in range(3)]
        repo.metrics.find_stale_answer_ids.return_value = ids
        service = AnswerQualityService(uow_factory=uow_for(repo))

        outcome = service.batch_recompute_stale(max_age_days=7, limit=10)

        self.assertEqual(outcome, {'processed': 3, 'updated': 3, 'failed': 0})
        cutoff = repo.metrics.find_stale_answer_ids.call_args[0][0]
        self.assertAlmostEqual(
            (datetime.now(timezone.utc) - cutoff).total_seconds(), timedelta(days=7).total_seconds(), delta=60
        )
        self.assertEqual(repo.metrics.find_stale_answer_ids.call_args[1], {'limit': 10})

    def test_batch_continues_after_failure(self):
        repo = make_repo()
        repo.metrics.find_stale_answer_ids.return_value = [uuid.uuid4(), uuid.uuid4()]
        repo.metrics.upsert_metrics.side_effect = [IntegrityError("INSERT", {}, Exception("x")), None]
        service = AnswerQualityService(uow_factory=uow_for(repo))

        outcome = service.batch_recompute_stale()

        self.assertEqual(outcome['processed'], 2)
        self.assertEqual(outcome['failed'], 1)
        self.assertEqual(outcome['updated'], 1)

    def test_batch_counts_unexpected_errors_and_continues(self):
        repo = make_repo()
        repo.metrics.find_stale_answer_ids.return_value = [uuid.uuid4(), uuid.uuid4(), uuid.uuid4()]
        repo.answers.count_followups.side_effect = [0, ValueError("corrupt row"), 0]
        service = AnswerQualityService(uow_factory=uow_for(repo))

        with self.assertLogs("core.quality.service", level="ERROR"):
            outcome = service.batch_recompute_stale()

        self.assertEqual(outcome, {"processed": 3, "updated": 2, "failed": 1})
        self.assertEqual(repo.metrics.upsert_metrics.call_count, 2)

    def test_recompute_author_answers_uses_trigger(self):
        repo = make_repo()
        repo.answers.get_answer_ids_for_author.return_value = [uuid.uuid4(), uuid.uuid4()]
        service = AnswerQualityService(uow_factory=uow_for(repo))

        results = service.recompute_author_answers(uuid.uuid4())

        self.assertEqual(len(results), 2)
        self.assertTrue(all(r.trigger == RecomputeTrigger.PROFILE_UPDATE for r in results))


if __name__ == '__main__':
    unittest.main()
