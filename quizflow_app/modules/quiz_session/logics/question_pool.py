# File: quizflow_app/modules/quiz_session/logics/question_pool.py
"""
Pure helpers for the candidate question pool.

Stored quiz documents have drifted over time, so every question dict is
normalised into one canonical shape here and nothing downstream looks at
the raw document:

    {'question': str, 'options': [str, ...], 'correctAnswer': str,
     'explanation': str | None}
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger('quizflow.quiz_session')

# Legacy key -> canonical key, first match wins
_QUESTION_KEYS = ('question', 'question_text', 'text')
_OPTION_KEYS = ('options', 'answers', 'choices')
_CORRECT_KEYS = ('correctAnswer', 'correct_answer', 'answer')
_EXPLANATION_KEYS = ('explanation', 'ai_explanation')


def _first(raw: Dict[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def canonical_question(raw: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Normalise one stored question dict into the canonical shape."""
    raw = raw or {}
    options = _first(raw, _OPTION_KEYS) or []
    if isinstance(options, dict):
        # {'A': 'Paris', 'B': 'London'} style
        options = [options[key] for key in sorted(options)]

    correct = _first(raw, _CORRECT_KEYS)
    explanation = _first(raw, _EXPLANATION_KEYS)

    return {
        'question': str(_first(raw, _QUESTION_KEYS) or ''),
        'options': [str(option) for option in options],
        'correctAnswer': str(correct) if correct is not None else '',
        'explanation': str(explanation) if explanation else None,
    }


def is_well_formed(question: Dict[str, Any]) -> bool:
    """True when there are at least two options and the correct answer is one of them."""
    options = question.get('options') or []
    return len(options) >= 2 and question.get('correctAnswer') in options


def grade_answer(question: Dict[str, Any], answer: str) -> bool:
    """Grade a selection. A malformed question never grades as correct."""
    if not is_well_formed(question):
        return False
    return answer == question['correctAnswer']


def flatten_questions(quizzes: Iterable[Any]) -> List[Dict[str, Any]]:
    """
    Concatenate the questions of ``quizzes`` in quiz order, then in-quiz order.

    Duplicates are kept and malformed questions stay in place so every
    pool index keeps pointing at the same question.
    """
    pool: List[Dict[str, Any]] = []
    for quiz in quizzes:
        for raw in quiz.questions or []:
            question = canonical_question(raw)
            if not is_well_formed(question):
                logger.warning(
                    "Quiz %s has a malformed question at pool index %s; it will be graded incorrect",
                    getattr(quiz, 'quiz_id', None), len(pool),
                )
            pool.append(question)
    return pool


def public_question(question: Dict[str, Any], pool_index: int) -> Dict[str, Any]:
    """The view of a question that is safe to send before it is answered."""
    return {
        'pool_index': pool_index,
        'question': question['question'],
        'options': list(question['options']),
    }
