# File: quizflow_app/modules/quiz_session/services/draft_store.py
"""
Per-browser draft of the on-screen quiz state.

Lives in the Flask session under ``SESSION_KEY`` keyed by progress id.
It only remembers which question is showing and the unsubmitted
selection; anything it says is checked against the progress ledger on
the next request, so losing it costs at most the current selection.
"""

from flask import session


class SessionDraftStore:
    SESSION_KEY = 'quiz_sessions'

    @classmethod
    def get(cls, handle):
        return (session.get(cls.SESSION_KEY) or {}).get(str(handle))

    @classmethod
    def put(cls, handle, snapshot):
        drafts = dict(session.get(cls.SESSION_KEY) or {})
        drafts[str(handle)] = dict(snapshot)
        # Reassign so the session cookie is marked modified
        session[cls.SESSION_KEY] = drafts

    @classmethod
    def discard(cls, handle):
        drafts = dict(session.get(cls.SESSION_KEY) or {})
        if drafts.pop(str(handle), None) is not None:
            session[cls.SESSION_KEY] = drafts
