# File: quizflow_app/modules/quiz_session/services/result_service.py
"""Score finalization, result history and recovery of lost finalizations."""

from flask import current_app

from quizflow_app.core.error_handlers import InvalidSessionStateError
from quizflow_app.core.signals import result_recovered, session_completed
from quizflow_app.utils.time_utils import format_user_time

from ..logics.scoring import ScoreCalculator
from .repository import QuizRepository


class ScoreFinalizer:
    """Writes exactly one immutable result per completed session."""

    @staticmethod
    def finalize(record, category_name='', subject_name=''):
        """
        Append the result for a completed ``record``.

        Safe to call again: if a result is already linked to the record it is
        returned and nothing is written.
        """
        if not record.completed or not record.covers_order:
            raise InvalidSessionStateError(
                'Only a completed session can be scored',
                details={'progress_id': record.progress_id},
            )

        existing = QuizRepository.find_result_for_progress(record.progress_id)
        if existing is not None:
            current_app.logger.info(
                "Finalizer: progress %s already has result %s, skipping", record.progress_id, existing.result_id
            )
            return existing

        score, total = ScoreCalculator.calculate(record.question_order, record.answered_questions)
        result = QuizRepository.append_result(
            user_id=record.user_id,
            quiz_id=record.quiz_id,
            progress_id=record.progress_id,
            category_name=category_name or '',
            subject_name=subject_name or '',
            score=score,
            total_questions=total,
        )
        current_app.logger.info(
            "Finalizer: result %s written for progress %s (%s/%s)",
            result.result_id, record.progress_id, score, total,
        )
        session_completed.send(
            None,
            user_id=record.user_id,
            progress_id=record.progress_id,
            result_id=result.result_id,
            score=score,
            total=total,
        )
        return result


class ResultLog:
    """Read side of the result log."""

    @staticmethod
    def list_for_user(user, limit=None):
        rows = []
        for result in QuizRepository.list_results_for_user(user.user_id, limit=limit):
            data = result.to_dict()
            percentage = ScoreCalculator.percentage(result.score, result.total_questions)
            data['percentage'] = percentage
            data['grade'] = ScoreCalculator.grade_for_percentage(percentage)
            data['display_time'] = format_user_time(result.timestamp, user)
            rows.append(data)
        return rows


def recover_lost_finalizations(limit=100):
    """
    Finalize completed records that never got a result row.

    A crash between marking a record completed and appending its result
    leaves exactly this shape behind. Returns the recovered result ids.
    """
    recovered = []
    for record in QuizRepository.list_completed_without_result(limit=limit):
        if not record.covers_order:
            current_app.logger.error(
                "Recovery: progress %s is completed but not fully answered, leaving it alone", record.progress_id
            )
            continue

        category = QuizRepository.get_category(record.category_id)
        category_name = category.name if category else ''
        subject_name = category.subject.name if category and category.subject else ''

        result = ScoreFinalizer.finalize(record, category_name, subject_name)
        recovered.append(result.result_id)
        result_recovered.send(
            None, user_id=record.user_id, progress_id=record.progress_id, result_id=result.result_id
        )

    if recovered:
        current_app.logger.warning("Recovery: wrote %s lost result(s): %s", len(recovered), recovered)
    return recovered
