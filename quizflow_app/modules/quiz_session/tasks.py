# File: quizflow_app/modules/quiz_session/tasks.py
"""Scheduled jobs for the quiz session module."""

from quizflow_app.core.error_handlers import QuizFlowError
from quizflow_app.core.extensions import scheduler
from quizflow_app.core.logging_config import get_logger

from .services.result_service import recover_lost_finalizations

logger = get_logger('quiz_session.tasks')


def run_result_recovery(app):
    """Finalize completed sessions that never got a result, inside ``app``'s context."""
    with app.app_context():
        limit = app.config.get('QUIZ_RECOVERY_BATCH_SIZE', 100)
        return recover_lost_finalizations(limit=limit)


def recover_lost_results_job():
    """
    Job to be executed by scheduler.
    A failed sweep is logged and retried on the next tick.
    """
    try:
        recovered = run_result_recovery(scheduler.app)
        logger.debug("Result recovery sweep finished, %s recovered.", len(recovered))
    except QuizFlowError as e:
        logger.error(f"Result recovery sweep failed: {e.message}")
