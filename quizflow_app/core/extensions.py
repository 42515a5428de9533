# File: quizflow_app/core/extensions.py
# Infrastructure Layer: shared extension instances, bound to the app in bootstrap

import sqlite3
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_wtf import CSRFProtect
from flask_apscheduler import APScheduler
from sqlalchemy import event
from sqlalchemy.engine import Engine

# Applied to every new SQLite connection. Quiz answers are written one small
# transaction at a time, so WAL keeps readers unblocked while a write commits.
SQLITE_PRAGMAS = (
    ("journal_mode", "WAL"),
    ("synchronous", "NORMAL"),
    ("busy_timeout", "30000"),
    ("foreign_keys", "ON"),
)

db = SQLAlchemy()


@event.listens_for(Engine, "connect")
def apply_sqlite_pragmas(dbapi_connection, _connection_record):
    if not isinstance(dbapi_connection, sqlite3.Connection):
        return
    cursor = dbapi_connection.cursor()
    try:
        for name, value in SQLITE_PRAGMAS:
            cursor.execute(f"PRAGMA {name}={value};")
    finally:
        cursor.close()


# API-only app: no login view, the unauthorized handler answers with JSON
login_manager = LoginManager()
login_manager.session_protection = "basic"

csrf_protect = CSRFProtect()

# Runs the lost-result recovery sweep when QUIZ_RECOVERY_INTERVAL_MINUTES > 0
scheduler = APScheduler()

__all__ = ["db", "login_manager", "csrf_protect", "scheduler", "SQLITE_PRAGMAS"]
