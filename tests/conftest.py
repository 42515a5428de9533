import os
import sys
import tempfile

import pytest
from flask import g

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from quizflow_app import create_app, db
from quizflow_app.core.config import Config
from quizflow_app.models import Category, Quiz, Subject, User


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'connect_args': {'check_same_thread': False}
    }
    WTF_CSRF_ENABLED = False
    LOG_DIR = os.path.join(tempfile.gettempdir(), 'quizflow-test-logs')
    LOG_LEVEL = 'WARNING'
    QUIZ_RECOVERY_INTERVAL_MINUTES = 0


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def login_client(client, user_id):
    with client.session_transaction() as session:
        session['_user_id'] = str(user_id)
        session['_fresh'] = True
    # Requests share the fixture's app context, so drop the cached user
    g.pop('_login_user', None)


def make_question(text, options, correct, explanation=None):
    question = {'question': text, 'options': list(options), 'correctAnswer': correct}
    if explanation:
        question['explanation'] = explanation
    return question


def five_questions():
    return [
        make_question(f'Q{i}: {i} + {i} = ?', [str(i * 2), str(i * 2 + 1), str(i * 2 + 2)], str(i * 2))
        for i in range(5)
    ]


@pytest.fixture
def user(app):
    user = User(username='learner', email='learner@example.com')
    user.set_password('password')
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def other_user(app):
    user = User(username='someone_else', email='else@example.com')
    user.set_password('password')
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def category(app):
    subject = Subject(name='Mathematics')
    db.session.add(subject)
    db.session.flush()
    category = Category(subject_id=subject.subject_id, name='Arithmetic')
    db.session.add(category)
    db.session.commit()
    return category


@pytest.fixture
def make_quiz(app):
    def _make_quiz(category, questions, title='Quiz', is_active=True, by_name=False):
        quiz = Quiz(
            title=title,
            subject_id=category.subject_id,
            category_id=None if by_name else category.category_id,
            category_name=category.name,
            questions=questions,
            is_active=is_active,
        )
        db.session.add(quiz)
        db.session.commit()
        return quiz
    return _make_quiz


@pytest.fixture
def five_question_quiz(category, make_quiz):
    return make_quiz(category, five_questions(), title='Doubling')
