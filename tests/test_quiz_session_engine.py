"""
Session engine tests: the state machine driven through the session
service against an in-memory database.
"""

import random

import pytest
from sqlalchemy.exc import OperationalError

from quizflow_app.core.error_handlers import (
    EmptyCategoryError,
    InvalidSessionStateError,
    NoSelectionError,
    NotAnsweredError,
    PersistenceError,
    SessionNotFoundError,
    ValidationError,
)
from quizflow_app.models import QuizProgress, QuizResult, db
from quizflow_app.modules.quiz_session.engine import COMPLETED, REVEALED, UNANSWERED, QuizSessionMachine
from quizflow_app.modules.quiz_session.services import (
    ProgressLedger,
    QuizRepository,
    QuizSessionService,
    ScoreFinalizer,
    recover_lost_finalizations,
)
from quizflow_app.modules.quiz_session.services import repository as repository_module

from conftest import make_question


def _start(user, category, seed=1):
    return QuizSessionService.start_or_resume(user.user_id, category.category_id, rng=random.Random(seed))


def _correct_option(machine):
    return machine.pool.questions[machine.current_index]['correctAnswer']


def _wrong_option(machine):
    question = machine.pool.questions[machine.current_index]
    return next(option for option in question['options'] if option != question['correctAnswer'])


def _answer_current(machine, correct=True):
    machine.select_answer(_correct_option(machine) if correct else _wrong_option(machine))
    return machine.submit_answer()


def _failing_commit(*args, **kwargs):
    raise OperationalError('COMMIT', {}, Exception('disk I/O error'))


def test_all_correct_session_scores_full_marks(user, category, five_question_quiz):
    machine, resumed = _start(user, category)
    assert resumed is False
    assert machine.state == UNANSWERED
    assert sorted(machine.record.question_order) == [0, 1, 2, 3, 4]

    seen = []
    result = None
    for _ in range(5):
        seen.append(machine.current_index)
        feedback = _answer_current(machine)
        assert feedback.correct is True
        assert machine.state == REVEALED
        result = machine.advance()

    assert seen == machine.record.question_order
    assert result.done is True
    assert (result.score, result.total, result.percentage) == (5, 5, 100)
    assert machine.state == COMPLETED
    assert QuizResult.query.count() == 1

    again = machine.advance()
    assert again.result_id == result.result_id
    assert QuizResult.query.count() == 1


def test_resume_presents_remaining_questions_in_original_order(user, category, five_question_quiz):
    machine, _ = _start(user, category)
    order = list(machine.record.question_order)
    progress_id = machine.record.progress_id

    for _ in range(3):
        _answer_current(machine, correct=True)
        machine.advance()
    machine.save_and_exit()

    resumed_machine, resumed = _start(user, category, seed=99)
    assert resumed is True
    assert resumed_machine.record.progress_id == progress_id
    assert resumed_machine.record.question_order == order
    assert resumed_machine.progress()['answered'] == 3

    presented = []
    _answer_current(resumed_machine, correct=True)
    presented.append(resumed_machine.current_index)
    resumed_machine.advance()
    presented.append(resumed_machine.current_index)
    _answer_current(resumed_machine, correct=False)
    result = resumed_machine.advance()

    assert presented == order[3:]
    assert result.done is True
    assert (result.score, result.total) == (4, 5)
    assert QuizProgress.query.filter_by(user_id=user.user_id).count() == 1


def test_resume_ignores_answer_entries_without_question_id(user, category, five_question_quiz):
    record = ProgressLedger.create(user.user_id, five_question_quiz.quiz_id, category.category_id, [4, 3, 2, 1, 0])
    QuizRepository.update_progress(record, answered_questions=[{'answer': '0', 'correct': True}])

    machine, resumed = _start(user, category)
    assert resumed is True
    assert machine.record.progress_id == record.progress_id
    assert machine.progress()['answered'] == 0
    assert machine.current_index == 4

    result = None
    for _ in range(5):
        _answer_current(machine)
        result = machine.advance()

    assert result.done is True
    assert (result.score, result.total) == (5, 5)


def test_empty_category_fails_before_creating_a_record(user, category):
    with pytest.raises(EmptyCategoryError):
        _start(user, category)
    assert QuizProgress.query.count() == 0


def test_inactive_or_empty_quizzes_count_as_empty(user, category, make_quiz):
    make_quiz(category, [make_question('Q', ['a', 'b'], 'a')], is_active=False)
    make_quiz(category, [], title='Empty')
    with pytest.raises(EmptyCategoryError):
        _start(user, category)
    assert QuizProgress.query.count() == 0


def test_submit_without_selection_writes_nothing(user, category, five_question_quiz):
    machine, _ = _start(user, category)
    before = machine.record.last_updated

    with pytest.raises(NoSelectionError):
        machine.submit_answer()

    assert machine.state == UNANSWERED
    stored = db.session.get(QuizProgress, machine.record.progress_id)
    assert stored.answered_questions == []
    assert stored.last_updated == before


def test_malformed_question_is_graded_incorrect(user, category, make_quiz):
    make_quiz(category, [
        make_question('Broken', ['red', 'green'], 'blue'),
        make_question('Fine', ['yes', 'no'], 'yes'),
    ])
    machine, _ = _start(user, category)

    results = {}
    outcome = None
    while machine.state != COMPLETED:
        question = machine.pool.questions[machine.current_index]
        machine.select_answer(question['options'][0])
        results[question['question']] = machine.submit_answer().correct
        outcome = machine.advance()

    assert results == {'Broken': False, 'Fine': True}
    assert (outcome.score, outcome.total) == (1, 2)


def test_question_without_options_accepts_any_answer_and_grades_it_wrong(user, category, make_quiz):
    make_quiz(category, [
        {'question': 'No options', 'correctAnswer': 'x'},
        make_question('Fine', ['yes', 'no'], 'yes'),
    ])
    machine, _ = _start(user, category)

    results = {}
    outcome = None
    while machine.state != COMPLETED:
        question = machine.pool.questions[machine.current_index]
        if question['options']:
            machine.select_answer(question['correctAnswer'])
        else:
            with pytest.raises(ValidationError):
                machine.select_answer('')
            assert machine.select_answer('x') == 'x'
        results[question['question']] = machine.submit_answer().correct
        outcome = machine.advance()

    assert results == {'No options': False, 'Fine': True}
    assert (outcome.score, outcome.total) == (1, 2)
    assert QuizResult.query.count() == 1


def test_advance_before_submit_is_rejected(user, category, five_question_quiz):
    machine, _ = _start(user, category)
    with pytest.raises(NotAnsweredError):
        machine.advance()
    machine.select_answer(_correct_option(machine))
    with pytest.raises(NotAnsweredError):
        machine.advance()


def test_select_rejects_unknown_option_and_locked_question(user, category, five_question_quiz):
    machine, _ = _start(user, category)
    with pytest.raises(ValidationError):
        machine.select_answer('not an option')

    _answer_current(machine)
    with pytest.raises(InvalidSessionStateError):
        machine.select_answer(_wrong_option(machine))


def test_resubmit_after_reveal_replays_feedback(user, category, five_question_quiz):
    machine, _ = _start(user, category)
    first = _answer_current(machine, correct=False)
    second = machine.submit_answer()
    assert second == first
    assert len(machine.record.answered_questions) == 1


def test_failed_answer_write_keeps_machine_unanswered(user, category, five_question_quiz, monkeypatch):
    machine, _ = _start(user, category)
    choice = _correct_option(machine)
    machine.select_answer(choice)

    monkeypatch.setattr(repository_module, 'safe_commit', _failing_commit)
    with pytest.raises(PersistenceError) as excinfo:
        machine.submit_answer()
    assert excinfo.value.retryable is True
    assert machine.state == UNANSWERED
    assert machine.selection == choice

    monkeypatch.undo()
    feedback = machine.submit_answer()
    assert feedback.correct is True
    assert db.session.get(QuizProgress, machine.record.progress_id).answered_indices == {machine.current_index}


def test_failed_result_write_is_retried_once(user, category, five_question_quiz, monkeypatch):
    machine, _ = _start(user, category)
    for _ in range(4):
        _answer_current(machine)
        machine.advance()
    _answer_current(machine)

    def failing_append(**fields):
        raise PersistenceError(operation='append_result')

    monkeypatch.setattr(QuizRepository, 'append_result', staticmethod(failing_append))
    with pytest.raises(PersistenceError):
        machine.advance()
    assert machine.record.completed is True
    assert QuizResult.query.count() == 0

    monkeypatch.undo()
    result = machine.advance()
    assert result.done is True
    assert result.score == 5
    assert machine.advance().result_id == result.result_id
    assert QuizResult.query.count() == 1


def test_lost_result_is_recovered_by_sweep(user, category, five_question_quiz, monkeypatch):
    machine, _ = _start(user, category)
    for _ in range(4):
        _answer_current(machine)
        machine.advance()
    _answer_current(machine, correct=False)

    def failing_append(**fields):
        raise PersistenceError(operation='append_result')

    monkeypatch.setattr(QuizRepository, 'append_result', staticmethod(failing_append))
    with pytest.raises(PersistenceError):
        machine.advance()
    monkeypatch.undo()

    recovered = recover_lost_finalizations()
    assert len(recovered) == 1
    assert db.session.get(QuizResult, recovered[0]).score == 4


def test_save_and_exit_restores_unsubmitted_selection(user, category, five_question_quiz):
    machine, _ = _start(user, category)
    _answer_current(machine)
    machine.advance()
    current = machine.current_index
    choice = _wrong_option(machine)
    machine.select_answer(choice)
    machine.save_and_exit()

    with pytest.raises(InvalidSessionStateError):
        machine.submit_answer()

    resumed, was_resumed = _start(user, category)
    assert was_resumed is True
    assert resumed.current_index == current
    assert resumed.selection == choice
    assert resumed.state == UNANSWERED


def test_fully_answered_open_record_is_retired(user, category, five_question_quiz):
    record = ProgressLedger.create(user.user_id, five_question_quiz.quiz_id, category.category_id, [0, 1, 2, 3, 4])
    for index in range(5):
        ProgressLedger.record_answer(record, index, str(index * 2), True)
    old_id = record.progress_id

    machine, resumed = _start(user, category)
    assert resumed is False
    assert machine.record.progress_id != old_id
    assert machine.record.answered_questions == []
    assert db.session.get(QuizProgress, old_id).completed is True
    assert QuizResult.query.filter_by(progress_id=old_id).count() == 1
    assert QuizResult.query.filter_by(progress_id=old_id).one().score == 5


def test_order_that_no_longer_fits_pool_is_regenerated(user, category, five_question_quiz, make_quiz):
    machine, _ = _start(user, category)
    _answer_current(machine)
    progress_id = machine.record.progress_id

    make_quiz(category, [make_question('Extra', ['a', 'b'], 'a')], title='Later addition')

    machine, resumed = _start(user, category)
    assert resumed is True
    assert machine.record.progress_id == progress_id
    assert sorted(machine.record.question_order) == list(range(6))
    assert machine.record.answered_questions == []


def test_changed_pool_blocks_loading_open_handle(user, category, five_question_quiz, make_quiz):
    machine, _ = _start(user, category)
    make_quiz(category, [make_question('Extra', ['a', 'b'], 'a')], title='Later addition')
    with pytest.raises(InvalidSessionStateError):
        QuizSessionService.load(user.user_id, machine.record.progress_id)


def test_restore_rejects_order_that_does_not_fit_pool(user, category, five_question_quiz):
    machine, _ = _start(user, category)
    QuizRepository.update_progress(machine.record, question_order=[0, 1, 2])

    with pytest.raises(InvalidSessionStateError):
        QuizSessionMachine.restore(machine.record, machine.pool, ProgressLedger, ScoreFinalizer)


def test_load_rejects_foreign_or_unknown_handle(user, other_user, category, five_question_quiz):
    machine, _ = _start(user, category)
    with pytest.raises(SessionNotFoundError):
        QuizSessionService.load(other_user.user_id, machine.record.progress_id)
    with pytest.raises(SessionNotFoundError):
        QuizSessionService.load(user.user_id, 424242)


def test_snapshot_round_trip_keeps_revealed_question(user, category, five_question_quiz):
    machine, _ = _start(user, category)
    _answer_current(machine)
    snapshot = machine.snapshot()

    reloaded = QuizSessionService.load(user.user_id, machine.record.progress_id, snapshot=snapshot)
    assert reloaded.current_index == machine.current_index
    assert reloaded.state == REVEALED
    assert reloaded.current_question()['feedback']['correct'] is True


def test_stale_snapshot_defers_to_ledger(user, category, five_question_quiz):
    machine, _ = _start(user, category)
    first = machine.current_index
    stale = machine.snapshot()
    _answer_current(machine)

    # The browser still thinks the question is unanswered
    reloaded = QuizSessionService.load(user.user_id, machine.record.progress_id, snapshot=stale)
    assert reloaded.current_index == first
    assert reloaded.state == REVEALED


def test_legacy_quiz_rows_are_matched_by_category_name(user, category, make_quiz):
    make_quiz(category, [
        {'question_text': 'Old shape', 'answers': ['x', 'y'], 'correct_answer': 'y'},
    ], by_name=True)
    machine, _ = _start(user, category)
    assert machine.pool.size == 1
    machine.select_answer('y')
    assert machine.submit_answer().correct is True
