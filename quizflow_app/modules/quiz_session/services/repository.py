# File: quizflow_app/modules/quiz_session/services/repository.py
"""
Store collaborators for the quiz session engine.

Everything that touches the database for this module goes through
``QuizRepository`` so the engine sees one canonical schema and one error
type (``PersistenceError``) no matter what failed underneath.
"""

from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError

from quizflow_app.models import Category, Quiz, QuizProgress, QuizResult, Subject, db
from quizflow_app.utils.db_session import persistence_guard, safe_commit
from quizflow_app.utils.time_utils import utcnow

UPDATABLE_PROGRESS_FIELDS = frozenset({
    'question_order',
    'answered_questions',
    'pending_answer',
    'completed',
    'completed_at',
})


class QuizRepository:
    """SQLAlchemy-backed quiz catalog, progress store and result log."""

    # ── quiz catalog / taxonomy ──────────────────────────────────────

    @staticmethod
    def get_category(category_id):
        with persistence_guard(db.session, 'get_category'):
            return db.session.get(Category, category_id)

    @staticmethod
    def get_subject(subject_id):
        if subject_id is None:
            return None
        with persistence_guard(db.session, 'get_subject'):
            return db.session.get(Subject, subject_id)

    @staticmethod
    def list_subjects():
        with persistence_guard(db.session, 'list_subjects'):
            return Subject.query.order_by(Subject.name.asc()).all()

    @staticmethod
    def list_categories(subject_id=None):
        with persistence_guard(db.session, 'list_categories'):
            query = Category.query
            if subject_id is not None:
                query = query.filter(Category.subject_id == subject_id)
            return query.order_by(Category.name.asc()).all()

    @staticmethod
    def list_quizzes_by_category(category, require_active=True):
        """
        Quizzes tagged to ``category``, oldest first.

        Older quiz rows only carry the category name, so those match by
        name when they have no ``category_id``.
        """
        with persistence_guard(db.session, 'list_quizzes_by_category'):
            query = Quiz.query.filter(
                or_(
                    Quiz.category_id == category.category_id,
                    and_(Quiz.category_id.is_(None), Quiz.category_name == category.name),
                )
            )
            if require_active:
                query = query.filter(Quiz.is_active.is_(True))
            return query.order_by(Quiz.created_at.asc(), Quiz.quiz_id.asc()).all()

    # ── progress store ───────────────────────────────────────────────

    @staticmethod
    def get_progress(progress_id):
        with persistence_guard(db.session, 'get_progress'):
            return db.session.get(QuizProgress, progress_id)

    @staticmethod
    def get_incomplete_progress(user_id, category_id):
        """Most recently started incomplete record for (user, category)."""
        with persistence_guard(db.session, 'get_incomplete_progress'):
            return (
                QuizProgress.query
                .filter_by(user_id=user_id, category_id=category_id, completed=False)
                .order_by(QuizProgress.started_at.desc(), QuizProgress.progress_id.desc())
                .first()
            )

    @staticmethod
    def create_progress(user_id, quiz_id, category_id, question_order=None):
        now = utcnow()
        with persistence_guard(db.session, 'create_progress'):
            record = QuizProgress(
                user_id=user_id,
                quiz_id=quiz_id,
                category_id=category_id,
                question_order=list(question_order or []),
                answered_questions=[],
                pending_answer=None,
                completed=False,
                started_at=now,
                last_updated=now,
            )
            db.session.add(record)
            safe_commit(db.session)
            return record

    @staticmethod
    def update_progress(record, **fields):
        """Write ``fields`` onto the record; JSON columns are always replaced, never mutated."""
        unknown = set(fields) - UPDATABLE_PROGRESS_FIELDS
        if unknown:
            raise ValueError(f"Cannot update progress fields: {sorted(unknown)}")

        with persistence_guard(db.session, 'update_progress'):
            for name, value in fields.items():
                if isinstance(value, list):
                    value = list(value)
                elif isinstance(value, dict):
                    value = dict(value)
                setattr(record, name, value)
            record.last_updated = utcnow()
            db.session.add(record)
            safe_commit(db.session)
            return record

    @staticmethod
    def list_completed_without_result(limit=100):
        with persistence_guard(db.session, 'list_completed_without_result'):
            return (
                QuizProgress.query
                .outerjoin(QuizResult, QuizResult.progress_id == QuizProgress.progress_id)
                .filter(QuizProgress.completed.is_(True), QuizResult.result_id.is_(None))
                .order_by(QuizProgress.progress_id.asc())
                .limit(limit)
                .all()
            )

    # ── result log ───────────────────────────────────────────────────

    @staticmethod
    def find_result_for_progress(progress_id):
        with persistence_guard(db.session, 'find_result_for_progress'):
            return QuizResult.query.filter_by(progress_id=progress_id).first()

    @staticmethod
    def append_result(**fields):
        """
        Append one result row. If another request already wrote the row for
        the same progress record, that row is returned instead.
        """
        with persistence_guard(db.session, 'append_result'):
            try:
                result = QuizResult(timestamp=utcnow(), **fields)
                db.session.add(result)
                safe_commit(db.session)
                return result
            except IntegrityError:
                db.session.rollback()
                existing = None
                if fields.get('progress_id') is not None:
                    existing = QuizResult.query.filter_by(progress_id=fields['progress_id']).first()
                if existing is None:
                    raise
                return existing

    @staticmethod
    def list_results_for_user(user_id, limit=None):
        with persistence_guard(db.session, 'list_results_for_user'):
            query = (
                QuizResult.query
                .filter_by(user_id=user_id)
                .order_by(QuizResult.timestamp.desc(), QuizResult.result_id.desc())
            )
            if limit:
                query = query.limit(limit)
            return query.all()
