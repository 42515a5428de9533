# File: quizflow_app/modules/quiz_session/services/progress_ledger.py
"""
Progress Ledger
===============
Persisted, resumable record of one (user, category) attempt.

Every write goes through ``QuizRepository.update_progress`` so the row's
``last_updated`` moves on each transition. Writes are safe to replay:
``record_answer`` is an upsert keyed by pool index and ``mark_completed``
is a no-op on an already completed record.
"""

from flask import current_app

from quizflow_app.core.error_handlers import InvalidSessionStateError, ValidationError
from quizflow_app.core.signals import answer_recorded
from quizflow_app.utils.time_utils import utcnow

from ..logics.reconciliation import index_answers, reconcile_progress
from .repository import QuizRepository


class ProgressLedger:

    @staticmethod
    def load_incomplete(user_id, category_id):
        """Return the most recently started incomplete record, or None."""
        return QuizRepository.get_incomplete_progress(user_id, category_id)

    @staticmethod
    def create(user_id, quiz_id, category_id, question_order=None):
        """Start an empty record: no answers, not completed, timestamps now."""
        record = QuizRepository.create_progress(user_id, quiz_id, category_id, question_order)
        current_app.logger.info(
            "Ledger: created progress %s for user %s, category %s (%s questions)",
            record.progress_id, user_id, category_id, len(record.question_order or []),
        )
        return record

    @staticmethod
    def reconcile(record, pool_size):
        """Resume plan for ``record`` against the current pool size."""
        return reconcile_progress(record.question_order, record.answered_questions, pool_size)

    @staticmethod
    def record_answer(record, pool_index, answer, correct):
        """
        Upsert the answer for ``pool_index``.

        Replaying the same call leaves the ledger unchanged; a different
        answer for the same index overwrites the earlier one.
        """
        if record.completed:
            raise InvalidSessionStateError(
                'This quiz session is already completed',
                details={'progress_id': record.progress_id},
            )
        pool_index = int(pool_index)
        if pool_index not in (record.question_order or []):
            raise ValidationError('Question is not part of this session', errors={'pool_index': pool_index})

        entry = {'questionId': str(pool_index), 'answer': answer, 'correct': bool(correct)}
        existing = index_answers(record.answered_questions)
        pending = record.pending_answer
        clears_pending = bool(pending) and str(pending.get('questionId')) == entry['questionId']

        if existing.get(pool_index) == entry and not clears_pending:
            current_app.logger.debug("Ledger: answer for index %s already recorded, skipping write", pool_index)
            return record

        answered = []
        replaced = False
        for stored in record.answered_questions or []:
            if str(stored.get('questionId')) == entry['questionId']:
                if not replaced:
                    answered.append(entry)
                    replaced = True
                continue
            answered.append(dict(stored))
        if not replaced:
            answered.append(entry)

        fields = {'answered_questions': answered}
        if clears_pending:
            fields['pending_answer'] = None
        QuizRepository.update_progress(record, **fields)

        answer_recorded.send(
            None,
            user_id=record.user_id,
            progress_id=record.progress_id,
            pool_index=pool_index,
            correct=bool(correct),
        )
        return record

    @staticmethod
    def mark_completed(record):
        """
        Flip ``completed`` once every index in the order has an answer.

        Returns True when this call completed the record, False when it
        was already completed.
        """
        if record.completed:
            return False
        if not record.covers_order:
            missing = [i for i in record.question_order or [] if i not in record.answered_indices]
            raise InvalidSessionStateError(
                'Cannot complete a session with unanswered questions',
                details={'progress_id': record.progress_id, 'unanswered': missing},
            )
        QuizRepository.update_progress(record, completed=True, completed_at=utcnow(), pending_answer=None)
        current_app.logger.info("Ledger: progress %s marked completed", record.progress_id)
        return True

    @staticmethod
    def save_and_exit(record, current_partial_answer=None):
        """
        Persist the session for a later resume.

        ``current_partial_answer`` is ``{'pool_index': int, 'answer': str}``
        for a selection that was never submitted; it is stored apart from the
        answered list so a resume lands on the same question with the
        selection restored.
        """
        if record.completed:
            raise InvalidSessionStateError(
                'This quiz session is already completed',
                details={'progress_id': record.progress_id},
            )
        pending = None
        if current_partial_answer and current_partial_answer.get('answer'):
            pending = {
                'questionId': str(int(current_partial_answer['pool_index'])),
                'answer': current_partial_answer['answer'],
            }
        QuizRepository.update_progress(record, pending_answer=pending)
        current_app.logger.info(
            "Ledger: progress %s saved (%s answered, pending=%s)",
            record.progress_id, len(record.answered_questions or []), bool(pending),
        )
        return record

    @staticmethod
    def retire(record):
        """Close a record that is fully answered but was never marked completed."""
        current_app.logger.warning(
            "Ledger: progress %s has every question answered but is not completed; retiring it",
            record.progress_id,
        )
        return ProgressLedger.mark_completed(record)

    @staticmethod
    def reset_order(record, question_order):
        """Give a record a fresh order and drop answers that no longer line up with the pool."""
        current_app.logger.warning(
            "Ledger: progress %s has a stored order that does not fit the pool; reordering",
            record.progress_id,
        )
        return QuizRepository.update_progress(
            record, question_order=question_order, answered_questions=[], pending_answer=None
        )
