"""Database models package for QuizFlow."""

from ..core.extensions import db

from .user import User
from .catalog import Category, Quiz, Subject
from .progress import QuizProgress, QuizResult

__all__ = [
    'db',
    'User',
    'Subject',
    'Category',
    'Quiz',
    'QuizProgress',
    'QuizResult',
]
