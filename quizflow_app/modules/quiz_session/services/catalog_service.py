from flask import current_app

from quizflow_app.core.error_handlers import EmptyCategoryError, NotFoundError

from ..logics.question_pool import flatten_questions
from ..schemas import QuestionPool
from .repository import QuizRepository


class QuestionSetResolver:
    """
    Builds the candidate pool for a category.
    Layer 2 service: reads the catalog, hands pure data to the engine.
    """

    @staticmethod
    def resolve(category_id, user_id=None):
        """
        Collect every quiz tagged to ``category_id`` and flatten their questions.

        Raises:
            EmptyCategoryError: no category, no active quiz, or no questions.
                Terminal for the request; nothing has been written yet.
        """
        category = QuizRepository.get_category(category_id)
        if category is None:
            current_app.logger.info("Resolver: category %s does not exist (user %s)", category_id, user_id)
            raise EmptyCategoryError(category_id)

        require_active = current_app.config.get('QUIZ_REQUIRE_ACTIVE', True)
        quizzes = QuizRepository.list_quizzes_by_category(category, require_active=require_active)
        if not quizzes:
            current_app.logger.info("Resolver: no quizzes for category %s (user %s)", category_id, user_id)
            raise EmptyCategoryError(category_id)

        questions = flatten_questions(quizzes)
        if not questions:
            current_app.logger.info("Resolver: quizzes of category %s have no questions", category_id)
            raise EmptyCategoryError(category_id)

        subject = category.subject or quizzes[0].subject
        pool = QuestionPool(
            category_id=category.category_id,
            category_name=category.name,
            subject_name=subject.name if subject else '',
            quiz_ids=[quiz.quiz_id for quiz in quizzes],
            questions=questions,
        )
        current_app.logger.debug(
            "Resolver: category %s -> %s quizzes, %s questions", category_id, len(quizzes), pool.size
        )
        return pool


class CatalogService:
    """Read-only subject/category lookups."""

    @staticmethod
    def list_subjects():
        return [subject.to_dict() for subject in QuizRepository.list_subjects()]

    @staticmethod
    def list_categories(subject_id):
        if QuizRepository.get_subject(subject_id) is None:
            raise NotFoundError('Subject not found', resource='subject')
        return [category.to_dict() for category in QuizRepository.list_categories(subject_id)]

    @staticmethod
    def get_category(category_id):
        category = QuizRepository.get_category(category_id)
        if category is None:
            raise NotFoundError('Category not found', resource='category')
        return category.to_dict()
