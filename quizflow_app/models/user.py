"""User model."""

from __future__ import annotations

from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from ..core.extensions import db


class User(UserMixin, db.Model):
    """Application user. Only the identity matters to the quiz engine."""

    __tablename__ = 'users'

    user_id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    timezone = db.Column(db.String(50), default='UTC')

    quiz_progress = db.relationship(
        'QuizProgress', backref='user', lazy=True, cascade='all, delete-orphan'
    )
    quiz_results = db.relationship(
        'QuizResult', backref='user', lazy=True, cascade='all, delete-orphan'
    )

    def get_id(self):
        return str(self.user_id)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def __repr__(self):
        return f"<User {self.user_id}: {self.username}>"
