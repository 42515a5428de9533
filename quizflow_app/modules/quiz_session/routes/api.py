# File: quizflow_app/modules/quiz_session/routes/api.py
from flask import request, jsonify
from flask_login import login_required

from quizflow_app.core.error_handlers import ValidationError, success_response
from quizflow_app.core.extensions import csrf_protect
from .. import blueprint
from ..interface import QuizSessionInterface


def _json_body():
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def _int_field(data, name):
    value = data.get(name)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{name} must be an integer', errors={name: value})


@blueprint.route('/api/sessions', methods=['POST'])
@login_required
@csrf_protect.exempt
def api_start_session():
    """Start a quiz for a category, or resume the open one."""
    category_id = _int_field(_json_body(), 'category_id')
    handle = QuizSessionInterface.start_or_resume_session(category_id)
    return jsonify(success_response(handle.to_dict())), 200 if handle.resumed else 201


@blueprint.route('/api/sessions/<int:handle>', methods=['GET'])
@login_required
def api_get_session(handle):
    return jsonify(success_response(QuizSessionInterface.get_current_question(handle).to_dict()))


@blueprint.route('/api/sessions/<int:handle>/select', methods=['POST'])
@login_required
@csrf_protect.exempt
def api_select_answer(handle):
    option = _json_body().get('option')
    if not isinstance(option, str) or not option:
        raise ValidationError('option is required', errors={'option': option})
    state = QuizSessionInterface.select_answer(handle, option)
    return jsonify(success_response(state.to_dict()))


@blueprint.route('/api/sessions/<int:handle>/submit', methods=['POST'])
@login_required
@csrf_protect.exempt
def api_submit_answer(handle):
    """Grade the selected option. An ``option`` in the body selects it first."""
    option = _json_body().get('option')
    if option is not None and not isinstance(option, str):
        raise ValidationError('option must be a string', errors={'option': option})
    feedback = QuizSessionInterface.submit_answer(handle, option=option or None)
    return jsonify(success_response(feedback.to_dict()))


@blueprint.route('/api/sessions/<int:handle>/advance', methods=['POST'])
@login_required
@csrf_protect.exempt
def api_advance(handle):
    result = QuizSessionInterface.advance(handle)
    return jsonify(success_response(result.to_dict()))


@blueprint.route('/api/sessions/<int:handle>/save-exit', methods=['POST'])
@login_required
@csrf_protect.exempt
def api_save_and_exit(handle):
    QuizSessionInterface.save_and_exit(handle)
    return jsonify(success_response({'handle': handle}, message='Progress saved'))


@blueprint.route('/api/results', methods=['GET'])
@login_required
def api_list_results():
    limit = request.args.get('limit', type=int)
    return jsonify(success_response(QuizSessionInterface.list_results(limit=limit)))


@blueprint.route('/api/subjects', methods=['GET'])
@login_required
def api_list_subjects():
    return jsonify(success_response(QuizSessionInterface.list_subjects()))


@blueprint.route('/api/subjects/<int:subject_id>/categories', methods=['GET'])
@login_required
def api_list_categories(subject_id):
    return jsonify(success_response(QuizSessionInterface.list_categories(subject_id)))
