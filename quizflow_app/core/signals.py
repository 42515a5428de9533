"""
Central Signal Registry for Event-Driven Architecture.

Uses blinker (Flask's signal backend) so modules can react to quiz
events without importing each other.

Usage:
    # Publisher (sender)
    from quizflow_app.core.signals import session_completed
    session_completed.send(None, user_id=1, progress_id=2, ...)

    # Subscriber (receiver)
    @session_completed.connect
    def on_session_completed(sender, **kwargs):
        ...
"""
from blinker import Namespace

quiz_signals = Namespace()

# Signal: Fired after an answer has been written to the progress ledger
# Payload: user_id, progress_id, pool_index, correct
answer_recorded = quiz_signals.signal('answer_recorded')

# Signal: Fired once per completed session, after its result is appended
# Payload: user_id, progress_id, result_id, score, total
session_completed = quiz_signals.signal('session_completed')

# Signal: Fired when the recovery sweep writes a result that was lost
# Payload: user_id, progress_id, result_id
result_recovered = quiz_signals.signal('result_recovered')
