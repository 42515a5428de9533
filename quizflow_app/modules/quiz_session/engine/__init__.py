"""Framework-agnostic quiz session engine."""

from .core import COMPLETED, REVEALED, UNANSWERED, QuizSessionMachine

__all__ = ['QuizSessionMachine', 'UNANSWERED', 'REVEALED', 'COMPLETED']
