from migrate_db import migrate_database

from gradecore.extensions import db
from gradecore.models import AttemptStatus, ExamResult
from gradecore.services import AggregationService, normalize_breakdown

LEGACY_BREAKDOWN = [
    {'question_id': 'q-mcq', 'score': 2, 'max_score': 2, 'is_correct': True},
    {'question_id': 'q-num', 'score': 0, 'max_score': 3, 'is_correct': False},
    {'question_id': 'q-ext', 'score': 3, 'max_score': 5, 'is_correct': False, 'teacher_feedback': 'Expand on this'},
]


def test_legacy_breakdowns_are_rewritten(app, exam, build_attempt):
    attempt = build_attempt(exam, status=AttemptStatus.EVALUATED)
    db.session.add(ExamResult(
        attempt_id=attempt.id,
        total_score=5,
        max_score=10,
        percentage=50.0,
        passed=True,
        pass_mark_percentage=50.0,
        breakdown=LEGACY_BREAKDOWN,
    ))
    db.session.commit()
    before = AggregationService.aggregate(normalize_breakdown(LEGACY_BREAKDOWN))

    report = migrate_database(app)

    assert report == {'columns_added': [], 'breakdowns_normalized': 1}
    db.session.expire_all()
    stored = ExamResult.query.one().breakdown
    assert stored[0]['marks_awarded'] == 2
    assert 'score' not in stored[0]
    assert stored[2]['feedback'] == 'Expand on this'
    assert AggregationService.aggregate(stored) == before

    assert migrate_database(app)['breakdowns_normalized'] == 0
