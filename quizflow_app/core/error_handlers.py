"""
Error types and JSON error responses for QuizFlow.

Every failure the quiz engine reports is a ``QuizFlowError`` subclass with a
stable ``code``; the handlers registered here turn them into

    {"success": false, "message": ..., "code": ..., "retryable": ..., "details": {...}}

Only ``PersistenceError`` is retryable: the same request may succeed later.
"""

from flask import jsonify, request, current_app
from typing import Optional, Dict, Any

API_PREFIX = '/quiz/api/'


class QuizFlowError(Exception):
    """Base exception class for QuizFlow."""

    code = 'UNKNOWN_ERROR'
    status_code = 500
    default_message = 'Unexpected error'
    retryable = False

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message or self.default_message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            'success': False,
            'message': self.message,
            'code': self.code,
            'retryable': self.retryable,
            'details': self.details
        }


class NotFoundError(QuizFlowError):
    code = 'NOT_FOUND'
    status_code = 404
    default_message = 'Resource not found'

    def __init__(self, message: str = None, resource: str = None):
        super().__init__(message, details={'resource': resource} if resource else None)


class ValidationError(QuizFlowError):
    code = 'VALIDATION_ERROR'
    status_code = 400
    default_message = 'Validation failed'

    def __init__(self, message: str = None, errors: Dict = None):
        super().__init__(message, details={'errors': errors} if errors else None)


class EmptyCategoryError(QuizFlowError):
    """No active quiz or no question for the category. Terminal: pick another category."""

    code = 'EMPTY_CATEGORY'
    status_code = 404
    default_message = 'No questions available for this category'

    def __init__(self, category_id=None):
        super().__init__(details={'category_id': category_id, 'redirect': 'category_selection'})


class NoSelectionError(QuizFlowError):
    code = 'NO_SELECTION'
    status_code = 400
    default_message = 'Please select an answer'


class NotAnsweredError(QuizFlowError):
    code = 'NOT_ANSWERED'
    status_code = 409
    default_message = 'Submit an answer before moving on'


class InvalidSessionStateError(QuizFlowError):
    code = 'INVALID_STATE'
    status_code = 409
    default_message = 'Invalid session state'

    def __init__(self, message: str = None, details: Dict = None):
        super().__init__(message, details=details)


class SessionNotFoundError(QuizFlowError):
    code = 'SESSION_NOT_FOUND'
    status_code = 404
    default_message = 'Quiz session not found'

    def __init__(self, handle=None):
        super().__init__(details={'handle': handle} if handle is not None else None)


class SessionExpiredError(QuizFlowError):
    """No signed-in user. Nothing was read or written."""

    code = 'SESSION_EXPIRED'
    status_code = 401
    default_message = 'Session expired. Please sign in again.'

    def __init__(self, message: str = None):
        super().__init__(message, details={'redirect': 'sign_in'})


class PersistenceError(QuizFlowError):
    """A store read or write failed and was rolled back."""

    code = 'PERSISTENCE_FAILURE'
    status_code = 503
    default_message = 'Could not reach the quiz store'
    retryable = True

    def __init__(self, message: str = None, operation: str = None):
        super().__init__(message, details={'operation': operation} if operation else None)


def error_response(
    message: str,
    code: str = 'ERROR',
    status_code: int = 400,
    details: Dict = None
) -> tuple:
    """JSON error body for failures that are not a ``QuizFlowError``."""
    response = {'success': False, 'message': message, 'code': code}
    if details:
        response['details'] = details
    return jsonify(response), status_code


def success_response(data: Any = None, message: str = None) -> dict:
    response = {'success': True}
    if data is not None:
        response['data'] = data
    if message:
        response['message'] = message
    return response


def _is_api_request() -> bool:
    return request.path.startswith(API_PREFIX)


def register_error_handlers(app):
    """Register error handlers with Flask app."""

    @app.errorhandler(QuizFlowError)
    def handle_quizflow_error(error):
        log = current_app.logger.error if error.status_code >= 500 else current_app.logger.info
        log("%s %s: %s %s", request.method, request.path, error.code, error.details or '')
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def handle_not_found(error):
        if _is_api_request():
            return error_response('Endpoint not found', 'NOT_FOUND', 404)
        return error

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        if _is_api_request():
            return error_response('Method not allowed', 'METHOD_NOT_ALLOWED', 405)
        return error

    @app.errorhandler(500)
    def handle_internal_error(error):
        current_app.logger.exception('Internal server error on %s', request.path)
        if _is_api_request():
            return error_response('Internal server error', 'SERVER_ERROR', 500)
        return error
