# File: quizflow_app/modules/quiz_session/services/session_service.py
"""Starting, resuming and reloading quiz sessions."""

from flask import current_app

from quizflow_app.core.error_handlers import InvalidSessionStateError, SessionNotFoundError

from ..engine import QuizSessionMachine
from ..logics.ordering import generate_question_order, is_valid_order
from ..logics.reconciliation import REORDER, RESTART, RESUME
from .catalog_service import QuestionSetResolver
from .progress_ledger import ProgressLedger
from .repository import QuizRepository
from .result_service import ScoreFinalizer


class QuizSessionService:
    """Wires the resolver, ledger and finalizer into a session machine."""

    @staticmethod
    def start_or_resume(user_id, category_id, rng=None):
        """
        Return ``(machine, resumed)`` for the user's attempt at ``category_id``.

        The pool is resolved first, so an empty category fails before any
        record is written.
        """
        pool = QuestionSetResolver.resolve(category_id, user_id=user_id)
        record = ProgressLedger.load_incomplete(user_id, category_id)
        resumed = False

        if record is not None:
            plan = ProgressLedger.reconcile(record, pool.size)
            if plan.action == RESUME:
                resumed = True
                current_app.logger.info(
                    "Session: resuming progress %s for user %s (%s/%s answered, %s stale entries)",
                    record.progress_id, user_id, plan.answered_count,
                    len(record.question_order), plan.dropped_entries,
                )
            elif plan.action == REORDER:
                ProgressLedger.reset_order(record, generate_question_order(pool.size, rng))
                resumed = True
            elif plan.action == RESTART:
                ProgressLedger.retire(record)
                ScoreFinalizer.finalize(record, pool.category_name, pool.subject_name)
                record = None

        if record is None:
            record = ProgressLedger.create(
                user_id,
                pool.primary_quiz_id,
                pool.category_id,
                generate_question_order(pool.size, rng),
            )

        machine = QuizSessionMachine.restore(record, pool, ProgressLedger, ScoreFinalizer)
        return machine, resumed

    @staticmethod
    def load(user_id, handle, snapshot=None):
        """
        Rebuild the machine for an existing handle owned by ``user_id``.

        Raises:
            SessionNotFoundError: unknown handle or owned by someone else.
            InvalidSessionStateError: the quiz content changed under an
                open session; starting again reorders it.
        """
        record = QuizRepository.get_progress(handle)
        if record is None or record.user_id != user_id:
            raise SessionNotFoundError(handle)

        pool = QuestionSetResolver.resolve(record.category_id, user_id=user_id)
        if not record.completed and not is_valid_order(record.question_order, pool.size):
            raise InvalidSessionStateError(
                'The questions for this category changed; start the quiz again',
                details={'progress_id': record.progress_id, 'redirect': 'start'},
            )
        return QuizSessionMachine.restore(record, pool, ProgressLedger, ScoreFinalizer, snapshot=snapshot)
