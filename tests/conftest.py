import pytest

from gradecore import create_app
from gradecore.extensions import db
from gradecore.models import (
    AnswerKey,
    AttemptStatus,
    ExamAttempt,
    ExamPackage,
    ExamResponse,
    Question,
)
from gradecore.utils import now_utc


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def login_as(client, role, user_id):
    with client.session_transaction() as sess:
        sess['role'] = role
        sess['user_id'] = user_id


@pytest.fixture
def build_exam(app):
    """Create an exam from a list of question dicts"""
    def _build(questions, pass_mark_percentage=None, title='Year 5 Maths', subject='Maths'):
        exam = ExamPackage(title=title, subject=subject, year_level=5,
                           pass_mark_percentage=pass_mark_percentage)
        db.session.add(exam)
        db.session.flush()

        for seq, item in enumerate(questions, start=1):
            question = Question(
                id=item['id'],
                exam_id=exam.id,
                sequence_number=seq,
                response_type=item['response_type'],
                marks=item.get('marks', 1),
                partial_credit=item.get('partial_credit', False),
                prompt_blocks=[{'type': 'text', 'content': f'Question {seq}'}],
            )
            db.session.add(question)
            if item.get('key') is not None:
                db.session.add(AnswerKey(
                    question_id=item['id'],
                    answer_type=item['response_type'],
                    **item['key']
                ))

        db.session.commit()
        return exam
    return _build


@pytest.fixture
def build_attempt(app):
    """Create an attempt with stored responses (question id -> payload)"""
    def _build(exam, responses=None, status=AttemptStatus.SUBMITTED, student_id='student-1'):
        attempt = ExamAttempt(
            exam_id=exam.id,
            student_id=student_id,
            status=status,
            started_at=now_utc(),
            submitted_at=now_utc() if status != AttemptStatus.STARTED else None,
        )
        db.session.add(attempt)
        db.session.flush()

        for question_id, payload in (responses or {}).items():
            question = db.session.get(Question, question_id)
            db.session.add(ExamResponse(
                attempt_id=attempt.id,
                question_id=question_id,
                response_type=question.response_type,
                response_data=payload,
            ))

        db.session.commit()
        return attempt
    return _build


THREE_QUESTION_EXAM = [
    {
        'id': 'q-mcq',
        'response_type': 'mcq',
        'marks': 2,
        'key': {'correct_option_id': 'B'},
    },
    {
        'id': 'q-num',
        'response_type': 'numeric',
        'marks': 3,
        'key': {'exact_value': 12.5, 'tolerance': 0.5},
    },
    {
        'id': 'q-ext',
        'response_type': 'extended',
        'marks': 5,
        'key': {'sample_response': 'Plants convert light into chemical energy.'},
    },
]

THREE_QUESTION_RESPONSES = {
    'q-mcq': {'selectedOptionId': 'B'},
    'q-num': {'answer': 12.8},
    'q-ext': {'answer': 'Photosynthesis turns sunlight into sugar.'},
}


@pytest.fixture
def exam(build_exam):
    """2-mark single choice, 3-mark numeric, 5-mark extended text"""
    return build_exam(THREE_QUESTION_EXAM)


@pytest.fixture
def submitted_attempt(exam, build_attempt):
    """Single choice right, numeric within tolerance, extended text unmarked"""
    return build_attempt(exam, THREE_QUESTION_RESPONSES)
