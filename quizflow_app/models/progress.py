from datetime import datetime, timezone
from sqlalchemy.types import JSON
from ..core.extensions import db
from ..modules.quiz_session.logics.reconciliation import index_answers


class QuizProgress(db.Model):
    """
    Resumable state of one (user, category) quiz attempt.

    ``question_order`` holds pool indices in presentation order and
    ``answered_questions`` holds ``{questionId, answer, correct}`` entries
    where ``questionId`` is the pool index as text.
    """
    __tablename__ = 'quiz_progress'

    progress_id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=False, index=True)
    quiz_id = db.Column(db.Integer, db.ForeignKey('quizzes.quiz_id'), nullable=True)
    category_id = db.Column(db.Integer, db.ForeignKey('categories.category_id'), nullable=False, index=True)

    question_order = db.Column(JSON, nullable=False, default=list)
    answered_questions = db.Column(JSON, nullable=False, default=list)
    # Selected but not yet submitted answer, written by Save & Exit
    pending_answer = db.Column(JSON, nullable=True)
    completed = db.Column(db.Boolean, default=False, nullable=False, index=True)

    started_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)
    last_updated = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    completed_at = db.Column(db.DateTime(timezone=True))

    result = db.relationship('QuizResult', backref='progress', uselist=False, lazy=True)

    def to_dict(self):
        """Serialize progress to dictionary."""
        return {
            'id': self.progress_id,
            'user_id': self.user_id,
            'quiz_id': self.quiz_id,
            'category_id': self.category_id,
            'question_order': list(self.question_order or []),
            'answered_questions': list(self.answered_questions or []),
            'pending_answer': self.pending_answer,
            'completed': self.completed,
            'started_at': self.started_at.isoformat() if self.started_at else None,
            'last_updated': self.last_updated.isoformat() if self.last_updated else None,
        }

    @property
    def answered_indices(self):
        # Entries without a parseable questionId are ignored
        return set(index_answers(self.answered_questions))

    @property
    def covers_order(self):
        order = self.question_order or []
        return bool(order) and set(order) <= self.answered_indices


class QuizResult(db.Model):
    """Immutable score record, one per completed session."""
    __tablename__ = 'quiz_results'

    result_id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=False, index=True)
    quiz_id = db.Column(db.Integer, db.ForeignKey('quizzes.quiz_id'), nullable=True)
    # Unique so a retried finalization can never write a second row
    progress_id = db.Column(db.Integer, db.ForeignKey('quiz_progress.progress_id'), nullable=True, unique=True)
    category_name = db.Column(db.String(120), nullable=False, default='')
    subject_name = db.Column(db.String(120), nullable=False, default='')
    score = db.Column(db.Integer, nullable=False)
    total_questions = db.Column(db.Integer, nullable=False)
    timestamp = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)

    def to_dict(self):
        return {
            'id': self.result_id,
            'user_id': self.user_id,
            'quiz_id': self.quiz_id,
            'progress_id': self.progress_id,
            'category_name': self.category_name,
            'subject_name': self.subject_name,
            'score': self.score,
            'total_questions': self.total_questions,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
        }
