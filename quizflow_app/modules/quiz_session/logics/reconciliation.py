# File: quizflow_app/modules/quiz_session/logics/reconciliation.py
"""
Resume reconciliation for a stored progress record.

Answers are matched to the stored order by pool index, never by position.
The result tells the caller which of three things to do:

* ``RESUME``      - present ``remaining`` in order, seeded with ``prior_answers``
* ``RESTART``     - every index is answered; retire the record, start fresh
* ``REORDER``     - the stored order is missing or no longer fits the pool;
                    keep the record but give it a new order and no answers
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .ordering import is_valid_order

RESUME = 'resume'
RESTART = 'restart'
REORDER = 'reorder'


@dataclass
class ResumePlan:
    action: str
    remaining: List[int] = field(default_factory=list)
    prior_answers: Dict[int, Dict[str, Any]] = field(default_factory=dict)
    dropped_entries: int = 0

    @property
    def answered_count(self) -> int:
        return len(self.prior_answers)


def index_answers(answered_questions: Optional[Iterable[Dict[str, Any]]]) -> Dict[int, Dict[str, Any]]:
    """
    Map pool index -> answer entry. Later entries for the same index win,
    which makes replayed writes harmless. Unparseable ids are skipped.
    """
    by_index: Dict[int, Dict[str, Any]] = {}
    for entry in answered_questions or []:
        try:
            pool_index = int(entry['questionId'])
        except (KeyError, TypeError, ValueError):
            continue
        by_index[pool_index] = {
            'questionId': str(pool_index),
            'answer': entry.get('answer'),
            'correct': bool(entry.get('correct')),
        }
    return by_index


def reconcile_progress(
    question_order: Optional[Sequence[int]],
    answered_questions: Optional[Iterable[Dict[str, Any]]],
    pool_size: int,
) -> ResumePlan:
    """Work out how a stored record resumes against a pool of ``pool_size``."""
    if not is_valid_order(question_order, pool_size):
        return ResumePlan(action=REORDER)

    order = [int(index) for index in question_order]
    answers = index_answers(answered_questions)

    in_order = set(order)
    prior = {index: entry for index, entry in answers.items() if index in in_order}
    remaining = [index for index in order if index not in prior]

    if not remaining:
        return ResumePlan(action=RESTART, prior_answers=prior)

    return ResumePlan(
        action=RESUME,
        remaining=remaining,
        prior_answers=prior,
        dropped_entries=len(answers) - len(prior),
    )
