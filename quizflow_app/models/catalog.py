"""Quiz catalog and subject/category taxonomy models."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy.types import JSON

from ..core.extensions import db


class Subject(db.Model):
    """Top level of the taxonomy (e.g. an exam subject)."""

    __tablename__ = 'subjects'

    subject_id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False, unique=True)
    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    categories = db.relationship('Category', backref='subject', lazy=True)

    def to_dict(self):
        return {'id': self.subject_id, 'name': self.name}


class Category(db.Model):
    """A topic inside a subject. Quizzes are tagged to exactly one category."""

    __tablename__ = 'categories'

    category_id = db.Column(db.Integer, primary_key=True)
    subject_id = db.Column(db.Integer, db.ForeignKey('subjects.subject_id'), nullable=True)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text)
    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    def to_dict(self):
        return {
            'id': self.category_id,
            'name': self.name,
            'description': self.description,
            'subject_id': self.subject_id,
        }


class Quiz(db.Model):
    """
    A quiz document with its questions embedded as a JSON list.

    Question dicts are normalised on read by
    ``logics.question_pool.canonical_question`` so older shapes
    (``answers``/``correct_answer``) keep working.
    """

    __tablename__ = 'quizzes'

    quiz_id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    subject_id = db.Column(db.Integer, db.ForeignKey('subjects.subject_id'), nullable=True)
    category_id = db.Column(db.Integer, db.ForeignKey('categories.category_id'), nullable=True, index=True)
    # Legacy documents identify the category by name only
    category_name = db.Column(db.String(120))
    questions = db.Column(JSON, nullable=False, default=list)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)

    category = db.relationship('Category', lazy=True)
    subject = db.relationship('Subject', lazy=True)

    def __repr__(self):
        return f"<Quiz {self.quiz_id}: {self.title}>"
