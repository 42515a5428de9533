from typing import Any, Dict, Iterable, Sequence

from .reconciliation import index_answers

GRADE_BANDS = (
    (90, 'Excellent!'),
    (70, 'Good Job!'),
    (50, 'Keep Practicing!'),
)
LOWEST_GRADE = 'Need Improvement'


class ScoreCalculator:
    """Integer scoring for a finished answer set."""

    @staticmethod
    def calculate(question_order: Sequence[int], answered_questions: Iterable[Dict[str, Any]]):
        """
        Return ``(score, total)``.

        Only entries whose pool index is in ``question_order`` count, so
        ``0 <= score <= total`` always holds.
        """
        order = set(int(index) for index in question_order or [])
        answers = index_answers(answered_questions)
        score = sum(1 for index, entry in answers.items() if index in order and entry['correct'])
        return score, len(order)

    @staticmethod
    def percentage(score: int, total: int) -> int:
        """Presentation-only percentage, ``round(100 * score / total)``."""
        if not total:
            return 0
        return int(round(100 * score / total))

    @staticmethod
    def grade_for_percentage(percentage: float) -> str:
        for threshold, label in GRADE_BANDS:
            if percentage >= threshold:
                return label
        return LOWEST_GRADE
