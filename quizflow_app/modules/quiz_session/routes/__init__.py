# File: quizflow_app/modules/quiz_session/routes/__init__.py
from . import api  # noqa: F401
