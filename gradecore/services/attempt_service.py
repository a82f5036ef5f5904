"""
Attempt Service
Starts attempts, records responses and submits them for grading
"""
from collections.abc import Mapping
import logging

from sqlalchemy.exc import SQLAlchemyError

from gradecore.errors import (
    AttemptNotFound,
    ExamNotFound,
    InvalidAttemptState,
    PersistenceFailure,
    QuestionNotInExam,
)
from gradecore.extensions import db
from gradecore.models import AttemptStatus, ExamAttempt, ExamPackage, ExamResponse, Question
from gradecore.utils import now_utc

log = logging.getLogger(__name__)


class AttemptService:
    """Attempt lifecycle before finalization"""

    @staticmethod
    def get_attempt(attempt_id):
        attempt = db.session.get(ExamAttempt, attempt_id)
        if attempt is None:
            raise AttemptNotFound(attempt_id)
        return attempt

    @staticmethod
    def start_attempt(exam_id, student_id):
        """Create a new attempt in the started state"""
        if db.session.get(ExamPackage, exam_id) is None:
            raise ExamNotFound(exam_id)

        attempt = ExamAttempt(
            exam_id=exam_id,
            student_id=str(student_id),
            status=AttemptStatus.STARTED,
            started_at=now_utc(),
        )
        db.session.add(attempt)
        db.session.commit()
        log.info("Attempt %s started by %s on exam %s", attempt.id, student_id, exam_id)
        return attempt

    @staticmethod
    def save_response(attempt_id, question_id, response_type, response_data):
        """
        Store (or overwrite) the answer to one question

        Payload shape is not validated here; the scorer treats anything
        malformed as no answer.
        """
        attempt = AttemptService.get_attempt(attempt_id)
        if attempt.status != AttemptStatus.STARTED:
            raise InvalidAttemptState(attempt_id, attempt.status, 'answer')

        question = Question.query.filter_by(id=question_id, exam_id=attempt.exam_id).first()
        if question is None:
            raise QuestionNotInExam(question_id)

        response = ExamResponse.query.filter_by(
            attempt_id=attempt_id,
            question_id=question_id
        ).first()
        if response is None:
            response = ExamResponse(attempt_id=attempt_id, question_id=question_id)
            db.session.add(response)

        response.response_type = response_type or question.response_type
        response.response_data = dict(response_data) if isinstance(response_data, Mapping) else response_data
        response.responded_at = now_utc()

        try:
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise PersistenceFailure(attempt_id, exc) from exc
        return response

    @staticmethod
    def submit_attempt(attempt_id):
        """started -> submitted; submitting twice is a no-op"""
        attempt = AttemptService.get_attempt(attempt_id)

        if attempt.status == AttemptStatus.SUBMITTED:
            return attempt
        if not AttemptStatus.can_advance(attempt.status, AttemptStatus.SUBMITTED):
            raise InvalidAttemptState(attempt_id, attempt.status, 'submit')

        attempt.status = AttemptStatus.SUBMITTED
        attempt.submitted_at = now_utc()
        db.session.commit()
        log.info("Attempt %s submitted", attempt_id)
        return attempt
