# File: quizflow_app/modules/quiz_session/__init__.py
from flask import Blueprint

blueprint = Blueprint('quiz_session', __name__)

# Module Metadata
module_metadata = {
    'name': 'Quiz Session',
    'icon': 'list-check',
    'category': 'Core',
    'url_prefix': '/quiz',
    'enabled': True
}

def setup_module(app):
    """Register routes for the quiz session module."""
    from . import routes  # noqa: F401
