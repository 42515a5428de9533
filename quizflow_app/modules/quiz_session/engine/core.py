# File: quizflow_app/modules/quiz_session/engine/core.py
"""
Quiz Session State Machine
==========================
In-memory controller for one quiz attempt::

    UNANSWERED --submit--> REVEALED --advance--> UNANSWERED (next question)
                                    \\--advance--> COMPLETED (terminal)

Framework-agnostic: the progress ledger and the score finalizer are
injected, and the machine never touches the request or the store
directly. The ledger record is the authority;
:meth:`QuizSessionMachine.restore` rebuilds the controller from it plus
an optional advisory snapshot (current question, pending selection) kept
by the caller between requests.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from quizflow_app.core.error_handlers import (
    InvalidSessionStateError,
    NoSelectionError,
    NotAnsweredError,
    ValidationError,
)

from ..logics.ordering import is_valid_order
from ..logics.question_pool import grade_answer, is_well_formed, public_question
from ..logics.reconciliation import index_answers
from ..logics.scoring import ScoreCalculator
from ..schemas import AdvanceResult, QuestionPool, SubmissionFeedback

logger = logging.getLogger('quizflow.quiz_session.engine')

UNANSWERED = 'unanswered'
REVEALED = 'revealed'
COMPLETED = 'completed'


class QuizSessionMachine:

    def __init__(self, record, pool: QuestionPool, ledger, finalizer,
                 current_index: Optional[int] = None, selection: Optional[str] = None,
                 revealed: bool = False):
        self.record = record
        self.pool = pool
        self.ledger = ledger
        self.finalizer = finalizer
        self.current_index = current_index
        self.selection = selection
        self.revealed = revealed
        self.ended = False
        self._final: Optional[AdvanceResult] = None

    # ── construction ─────────────────────────────────────────────────

    @classmethod
    def restore(cls, record, pool: QuestionPool, ledger, finalizer,
                snapshot: Optional[Dict[str, Any]] = None) -> 'QuizSessionMachine':
        """
        Rebuild the controller from the ledger record.

        The snapshot only decides which question is on screen and what is
        pre-selected; whether that question is answered always comes from
        the record.
        """
        snapshot = snapshot or {}
        machine = cls(record, pool, ledger, finalizer)
        if record.completed:
            return machine
        if not is_valid_order(record.question_order, pool.size):
            # Callers reconcile or reject a stale order before restoring
            raise InvalidSessionStateError(
                'The stored question order does not match the question set',
                details={'progress_id': record.progress_id, 'redirect': 'start'},
            )
        order = [int(i) for i in record.question_order]
        answers = index_answers(record.answered_questions)

        current = snapshot.get('current_index')
        current = int(current) if current is not None and int(current) in order else None
        if current is not None and current in answers:
            # Submitted but not advanced yet: keep showing its feedback
            machine._present(current, revealed=True, selection=answers[current]['answer'])
            return machine

        remaining = [i for i in order if i not in answers]
        if current is None:
            if not remaining:
                # Fully answered but never completed; let advance() finish it
                machine._present(order[-1], revealed=True, selection=answers[order[-1]]['answer'])
                return machine
            current = remaining[0]

        selection = snapshot.get('selection')
        pending = record.pending_answer or {}
        if not selection and str(pending.get('questionId')) == str(current):
            selection = pending.get('answer')
        if not cls._accepts(pool.questions[current], selection):
            selection = None
        machine._present(current, revealed=False, selection=selection)
        return machine

    def _present(self, pool_index: int, revealed: bool, selection: Optional[str]):
        self.current_index = pool_index
        self.revealed = revealed
        self.selection = selection

    # ── state ────────────────────────────────────────────────────────

    @property
    def state(self) -> str:
        if self.record.completed:
            return COMPLETED
        return REVEALED if self.revealed else UNANSWERED

    @property
    def question_order(self):
        return [int(i) for i in self.record.question_order or []]

    def _question(self, pool_index: int) -> Dict[str, Any]:
        return self.pool.questions[pool_index]

    def progress(self) -> Dict[str, Any]:
        order = self.question_order
        answered = len(self.record.answered_indices & set(order))
        total = len(order)
        return {
            'answered': answered,
            'total': total,
            'percent': ScoreCalculator.percentage(answered, total),
            'position': order.index(self.current_index) + 1 if self.current_index in order else None,
        }

    def current_question(self) -> Optional[Dict[str, Any]]:
        if self.state == COMPLETED or self.current_index is None:
            return None
        payload = public_question(self._question(self.current_index), self.current_index)
        payload['state'] = self.state
        payload['selection'] = self.selection
        if self.revealed:
            payload['feedback'] = self._feedback().to_dict()
        return payload

    def snapshot(self) -> Dict[str, Any]:
        """Advisory state the caller may keep between requests."""
        return {
            'progress_id': self.record.progress_id,
            'category_id': self.record.category_id,
            'current_index': self.current_index,
            'selection': self.selection,
            'revealed': self.revealed,
        }

    def _feedback(self) -> SubmissionFeedback:
        question = self._question(self.current_index)
        entry = index_answers(self.record.answered_questions).get(self.current_index, {})
        selected = entry.get('answer', self.selection)
        return SubmissionFeedback(
            pool_index=self.current_index,
            selected=selected,
            correct=bool(entry.get('correct', False)),
            correct_answer=question['correctAnswer'],
            explanation=question.get('explanation'),
        )

    @staticmethod
    def _accepts(question: Dict[str, Any], option: Optional[str]) -> bool:
        # Any text is accepted for a malformed question; it grades incorrect
        if not isinstance(option, str) or not option:
            return False
        return option in question['options'] or not is_well_formed(question)

    def _require_open(self):
        if self.state == COMPLETED:
            raise InvalidSessionStateError(
                'This quiz session is already completed',
                details={'progress_id': self.record.progress_id},
            )
        if self.ended:
            raise InvalidSessionStateError('This quiz session was saved and closed')

    # ── transitions ──────────────────────────────────────────────────

    def select_answer(self, option: str) -> Optional[str]:
        """Update the pending selection. Nothing is written to the ledger."""
        self._require_open()
        if self.revealed:
            raise InvalidSessionStateError('The answer for this question is already submitted')
        if not self._accepts(self._question(self.current_index), option):
            raise ValidationError('Unknown option for this question', errors={'option': option})
        self.selection = option
        return self.selection

    def submit_answer(self) -> SubmissionFeedback:
        """
        Grade the pending selection and write it to the ledger.

        A repeated submit for an already revealed question returns the
        recorded feedback without writing again. If the write fails the
        machine stays UNANSWERED with the selection intact.
        """
        self._require_open()
        if self.revealed:
            return self._feedback()
        if not self.selection:
            raise NoSelectionError()

        question = self._question(self.current_index)
        correct = grade_answer(question, self.selection)
        self.ledger.record_answer(self.record, self.current_index, self.selection, correct)
        self.revealed = True
        logger.debug(
            "Progress %s: index %s answered (%s)",
            self.record.progress_id, self.current_index, 'correct' if correct else 'incorrect',
        )
        return self._feedback()

    def advance(self) -> AdvanceResult:
        """
        Move past a revealed question.

        Completes the session when every index in the order is answered;
        calling again after completion returns the same terminal result.
        """
        if self._final is not None:
            return self._final
        if self.record.completed:
            return self._finalize()
        if self.ended:
            raise InvalidSessionStateError('This quiz session was saved and closed')
        if not self.revealed:
            raise NotAnsweredError()

        answered = self.record.answered_indices
        remaining = [i for i in self.question_order if i not in answered]
        if not remaining:
            self.ledger.mark_completed(self.record)
            return self._finalize()

        self._present(remaining[0], revealed=False, selection=None)
        return AdvanceResult(done=False, next_question=self.current_question())

    def _finalize(self) -> AdvanceResult:
        result = self.finalizer.finalize(self.record, self.pool.category_name, self.pool.subject_name)
        self._final = AdvanceResult(
            done=True,
            score=result.score,
            total=result.total_questions,
            percentage=ScoreCalculator.percentage(result.score, result.total_questions),
            result_id=result.result_id,
        )
        return self._final

    def save_and_exit(self) -> None:
        """Persist the session, including an unsubmitted selection, and close it."""
        self._require_open()
        partial = None
        if not self.revealed and self.selection:
            partial = {'pool_index': self.current_index, 'answer': self.selection}
        self.ledger.save_and_exit(self.record, partial)
        self.ended = True
