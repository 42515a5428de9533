"""Framework-free logic for the quiz session engine."""

from .ordering import generate_question_order, is_valid_order
from .question_pool import canonical_question, flatten_questions, grade_answer, is_well_formed
from .reconciliation import REORDER, RESTART, RESUME, ResumePlan, reconcile_progress
from .scoring import ScoreCalculator

__all__ = [
    'generate_question_order',
    'is_valid_order',
    'canonical_question',
    'flatten_questions',
    'grade_answer',
    'is_well_formed',
    'REORDER',
    'RESTART',
    'RESUME',
    'ResumePlan',
    'reconcile_progress',
    'ScoreCalculator',
]
