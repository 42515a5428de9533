"""Bootstrap helpers for configuring the Flask application."""

from __future__ import annotations

import os

from flask import Flask

from .error_handlers import SessionExpiredError, register_error_handlers
from .extensions import csrf_protect, db, login_manager, scheduler
from .logging_config import setup_logging
from .module_registry import register_default_modules


def configure_logging(app: Flask) -> None:
    """Point the package logger and the Flask app logger at the configured handlers."""

    level = app.config.get('LOG_LEVEL') or ('DEBUG' if app.debug else 'INFO')
    setup_logging(
        app,
        log_level=level,
        log_dir=app.config.get('LOG_DIR'),
        json_format=app.config.get('LOG_JSON', False),
    )
    app.logger.info("Flask app logger configured (level=%s).", level)


def register_extensions(app: Flask) -> None:
    """Initialize shared extensions with the Flask app instance."""

    db.init_app(app)
    login_manager.init_app(app)
    csrf_protect.init_app(app)
    register_error_handlers(app)

    interval = app.config.get('QUIZ_RECOVERY_INTERVAL_MINUTES', 0)
    if app.testing or not interval:
        return

    # Only start the scheduler in the reloader child (or without a reloader)
    if not app.debug or os.environ.get("WERKZEUG_RUN_MAIN") == "true":
        from apscheduler.schedulers import SchedulerAlreadyRunningError
        from ..modules.quiz_session.tasks import recover_lost_results_job

        try:
            scheduler.init_app(app)
            if not scheduler.running:
                scheduler.start()
            if not scheduler.get_job('quiz_result_recovery'):
                scheduler.add_job(
                    id='quiz_result_recovery',
                    func=recover_lost_results_job,
                    trigger='interval',
                    minutes=interval,
                    replace_existing=True
                )
                app.logger.info("Registered quiz result recovery job (every %s min).", interval)
        except SchedulerAlreadyRunningError:
            app.logger.info("Scheduler already running, skipping re-initialisation.")


def register_user_loader(app: Flask) -> None:
    """Wire Flask-Login to the user table and fail closed on missing identity."""

    @login_manager.user_loader
    def load_user(user_id: str):
        from ..models import User

        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def handle_unauthorized():
        raise SessionExpiredError()


def register_blueprints(app: Flask) -> None:
    """Register all default blueprints with the app."""

    register_default_modules(app)


def initialize_database(app: Flask) -> None:
    """Create database tables."""

    from .. import models  # noqa: F401 - registers the mappers

    db.create_all()
    app.logger.info("Database tables ensured at %s", app.config['SQLALCHEMY_DATABASE_URI'])
