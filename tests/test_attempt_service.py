import pytest

from gradecore.errors import AttemptNotFound, ExamNotFound, InvalidAttemptState, QuestionNotInExam
from gradecore.models import AttemptStatus, ExamResponse
from gradecore.services import AttemptService, FinalizationService

from tests.conftest import THREE_QUESTION_RESPONSES


def test_start_attempt(exam):
    attempt = AttemptService.start_attempt(exam.id, 42)

    assert attempt.status == AttemptStatus.STARTED
    assert attempt.student_id == '42'
    assert attempt.started_at is not None
    assert attempt.submitted_at is None


def test_start_attempt_on_unknown_exam(app):
    with pytest.raises(ExamNotFound):
        AttemptService.start_attempt('no-such-exam', 'student-1')


def test_save_response_overwrites_previous_answer(exam):
    attempt = AttemptService.start_attempt(exam.id, 'student-1')

    AttemptService.save_response(attempt.id, 'q-mcq', 'mcq', {'selectedOptionId': 'A'})
    AttemptService.save_response(attempt.id, 'q-mcq', 'mcq', {'selectedOptionId': 'B'})

    stored = ExamResponse.query.filter_by(attempt_id=attempt.id).all()
    assert len(stored) == 1
    assert stored[0].response_data == {'selectedOptionId': 'B'}


def test_save_response_defaults_to_question_type(exam):
    attempt = AttemptService.start_attempt(exam.id, 'student-1')

    response = AttemptService.save_response(attempt.id, 'q-num', None, {'answer': 12})

    assert response.response_type == 'numeric'


def test_save_response_for_question_outside_exam(exam, build_exam):
    other = build_exam([{'id': 'q-other', 'response_type': 'boolean', 'key': {'correct_boolean': True}}])
    attempt = AttemptService.start_attempt(exam.id, 'student-1')

    with pytest.raises(QuestionNotInExam):
        AttemptService.save_response(attempt.id, 'q-other', 'boolean', {'answer': True})
    assert other.id != exam.id


def test_cannot_answer_after_submitting(exam):
    attempt = AttemptService.start_attempt(exam.id, 'student-1')
    AttemptService.submit_attempt(attempt.id)

    with pytest.raises(InvalidAttemptState):
        AttemptService.save_response(attempt.id, 'q-mcq', 'mcq', {'selectedOptionId': 'B'})


def test_submit_twice_is_a_no_op(exam):
    attempt = AttemptService.start_attempt(exam.id, 'student-1')
    first = AttemptService.submit_attempt(attempt.id)
    submitted_at = first.submitted_at

    second = AttemptService.submit_attempt(attempt.id)

    assert second.status == AttemptStatus.SUBMITTED
    assert second.submitted_at == submitted_at


def test_evaluated_attempt_cannot_be_resubmitted(submitted_attempt):
    FinalizationService.finalize(
        submitted_attempt.id,
        manual_marks=[{'question_id': 'q-ext', 'score': 3}]
    )

    with pytest.raises(InvalidAttemptState):
        AttemptService.submit_attempt(submitted_attempt.id)


def test_unknown_attempt(app):
    with pytest.raises(AttemptNotFound):
        AttemptService.submit_attempt('missing')


def test_full_lifecycle(exam):
    attempt = AttemptService.start_attempt(exam.id, 'student-1')
    for question_id, payload in THREE_QUESTION_RESPONSES.items():
        AttemptService.save_response(attempt.id, question_id, None, payload)
    AttemptService.submit_attempt(attempt.id)

    result = FinalizationService.finalize(
        attempt.id,
        manual_marks=[{'question_id': 'q-ext', 'score': 4}]
    )

    assert result.percentage == 90.0
    assert AttemptService.get_attempt(attempt.id).status == AttemptStatus.EVALUATED
    assert AttemptService.get_attempt(attempt.id).time_taken_seconds >= 0


def test_status_only_moves_forward():
    assert AttemptStatus.can_advance(AttemptStatus.STARTED, AttemptStatus.SUBMITTED)
    assert AttemptStatus.can_advance(AttemptStatus.SUBMITTED, AttemptStatus.EVALUATED)
    assert not AttemptStatus.can_advance(AttemptStatus.EVALUATED, AttemptStatus.SUBMITTED)
    assert not AttemptStatus.can_advance(AttemptStatus.STARTED, AttemptStatus.EVALUATED)
    assert not AttemptStatus.can_advance('archived', AttemptStatus.STARTED)
