# File: quizflow_app/modules/quiz_session/interface.py
"""
Quiz Session Interface
======================
Public API for the presentation layer. Every call identifies the user
from the login session and fails closed with ``SessionExpiredError`` when
there is none; the machine is rebuilt from the progress ledger on each
call and its on-screen state is kept in the per-browser draft store.
"""

from typing import Optional

from flask_login import current_user

from quizflow_app.core.error_handlers import SessionExpiredError

from .engine import COMPLETED
from .schemas import AdvanceResult, SessionHandle, SubmissionFeedback
from .services.catalog_service import CatalogService
from .services.draft_store import SessionDraftStore
from .services.result_service import ResultLog
from .services.session_service import QuizSessionService


class QuizSessionInterface:
    """Public interface for quiz session operations."""

    @staticmethod
    def _require_user():
        if not current_user or not current_user.is_authenticated:
            raise SessionExpiredError()
        return current_user

    @staticmethod
    def _load(handle):
        user = QuizSessionInterface._require_user()
        return QuizSessionService.load(user.user_id, handle, snapshot=SessionDraftStore.get(handle))

    @staticmethod
    def _describe(machine, resumed=False) -> SessionHandle:
        return SessionHandle(
            handle=machine.record.progress_id,
            category_id=machine.record.category_id,
            category_name=machine.pool.category_name,
            resumed=resumed,
            current_question=machine.current_question(),
            progress=machine.progress(),
            state=machine.state,
            pending_selection=machine.selection if not machine.revealed else None,
        )

    @staticmethod
    def start_or_resume_session(category_id: int) -> SessionHandle:
        """
        Open the user's attempt at a category.

        Resumes the incomplete record when there is one, otherwise starts a
        fresh shuffled session.
        """
        user = QuizSessionInterface._require_user()
        machine, resumed = QuizSessionService.start_or_resume(user.user_id, category_id)
        SessionDraftStore.put(machine.record.progress_id, machine.snapshot())
        return QuizSessionInterface._describe(machine, resumed=resumed)

    @staticmethod
    def get_current_question(handle: int) -> SessionHandle:
        machine = QuizSessionInterface._load(handle)
        return QuizSessionInterface._describe(machine, resumed=True)

    @staticmethod
    def select_answer(handle: int, option: str) -> SessionHandle:
        machine = QuizSessionInterface._load(handle)
        machine.select_answer(option)
        SessionDraftStore.put(handle, machine.snapshot())
        return QuizSessionInterface._describe(machine, resumed=True)

    @staticmethod
    def submit_answer(handle: int, option: Optional[str] = None) -> SubmissionFeedback:
        """Submit the pending selection; ``option`` selects first when given."""
        machine = QuizSessionInterface._load(handle)
        if option is not None and not machine.revealed:
            machine.select_answer(option)
            SessionDraftStore.put(handle, machine.snapshot())
        feedback = machine.submit_answer()
        SessionDraftStore.put(handle, machine.snapshot())
        return feedback

    @staticmethod
    def advance(handle: int) -> AdvanceResult:
        machine = QuizSessionInterface._load(handle)
        result = machine.advance()
        if machine.state == COMPLETED:
            SessionDraftStore.discard(handle)
        else:
            SessionDraftStore.put(handle, machine.snapshot())
        return result

    @staticmethod
    def save_and_exit(handle: int) -> None:
        machine = QuizSessionInterface._load(handle)
        machine.save_and_exit()
        SessionDraftStore.discard(handle)

    @staticmethod
    def list_results(limit: Optional[int] = None):
        user = QuizSessionInterface._require_user()
        return ResultLog.list_for_user(user, limit=limit)

    @staticmethod
    def list_subjects():
        return CatalogService.list_subjects()

    @staticmethod
    def list_categories(subject_id: int):
        return CatalogService.list_categories(subject_id)
