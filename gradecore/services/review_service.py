"""
Review Service
Read paths over attempts: student/parent review and admin marking

Stored breakdowns are only ever read through the breakdown normalizer.
Student and parent views never receive the raw answer key, only the
correct answer echoed into each breakdown entry.
"""
import logging

from gradecore.errors import InvalidAttemptState
from gradecore.models import AnswerKey, AttemptStatus, ExamAttempt, ExamResponse, ExamResult, ManualMark
from gradecore.services.attempt_service import AttemptService
from gradecore.services.breakdown_normalizer import normalize_breakdown
from gradecore.services.finalization_service import FinalizationService, apply_manual_marks
from gradecore.utils import isoformat, to_local_time

log = logging.getLogger(__name__)


def _entry_view(entry):
    if entry is None:
        return None
    view = entry.to_dict()
    view['display_score'] = entry.display_score
    return view


def _result_view(result):
    if result is None:
        return None
    local = to_local_time(result.evaluated_at)
    return {
        'total_score': result.total_score,
        'max_score': result.max_score,
        'percentage': result.percentage,
        'passed': result.passed,
        'pass_mark_percentage': result.pass_mark_percentage,
        'evaluated_at': isoformat(result.evaluated_at),
        'evaluated_at_local': local.strftime('%d %b %Y, %I:%M %p') if local else None,
    }


class ReviewService:
    """Review and marking views"""

    @staticmethod
    def attempt_review(attempt_id):
        """
        Student/parent review of a submitted attempt

        Returns:
            dict with attempt, exam, result (None until evaluated) and one
            item per question: content, response and breakdown entry
        """
        attempt = AttemptService.get_attempt(attempt_id)
        if attempt.status == AttemptStatus.STARTED:
            raise InvalidAttemptState(attempt_id, attempt.status, 'review')

        questions = FinalizationService.load_questions(attempt.exam_id)
        responses = {
            r.question_id: r.to_dict()
            for r in ExamResponse.query.filter_by(attempt_id=attempt_id).all()
        }
        result = ExamResult.query.filter_by(attempt_id=attempt_id).first()
        entries = {}
        if result is not None:
            entries = {e.question_id: e for e in normalize_breakdown(result.breakdown)}

        items = []
        for question in questions:
            items.append({
                'question': question.to_dict(),
                'response': responses.get(question.id),
                'breakdown': _entry_view(entries.get(question.id)),
            })

        return {
            'attempt': attempt.to_dict(),
            'exam': attempt.exam.to_dict(),
            'result': _result_view(result),
            'questions': items,
        }

    @staticmethod
    def marking_view(attempt_id):
        """
        Everything a grader needs to mark one attempt

        Includes the full answer keys, a fresh automatic breakdown with
        saved marks applied, the stored result (if any) and the ids still
        awaiting a manual mark.
        """
        attempt = AttemptService.get_attempt(attempt_id)
        if attempt.status == AttemptStatus.STARTED:
            raise InvalidAttemptState(attempt_id, attempt.status, 'mark')

        questions, breakdown = FinalizationService.build_breakdown(attempt)
        question_ids = [q.id for q in questions]
        keys = {}
        if question_ids:
            keys = {
                k.question_id: k.to_dict()
                for k in AnswerKey.query.filter(AnswerKey.question_id.in_(question_ids)).all()
            }
        responses = {
            r.question_id: r.to_dict()
            for r in ExamResponse.query.filter_by(attempt_id=attempt_id).all()
        }
        marks = {
            m.question_id: m.to_dict()
            for m in ManualMark.query.filter_by(attempt_id=attempt_id).all()
        }
        merged = apply_manual_marks(breakdown, marks)
        merged_by_id = {e.question_id: e for e in merged}

        result = ExamResult.query.filter_by(attempt_id=attempt_id).first()
        stored = {}
        if result is not None:
            stored = {e.question_id: e for e in normalize_breakdown(result.breakdown)}

        items = []
        for question in questions:
            items.append({
                'question': question.to_dict(),
                'answer_key': keys.get(question.id),
                'response': responses.get(question.id),
                'manual_mark': marks.get(question.id),
                'current_score': _entry_view(merged_by_id.get(question.id)),
                'stored_score': _entry_view(stored.get(question.id)),
            })

        return {
            'attempt': attempt.to_dict(),
            'exam': attempt.exam.to_dict(),
            'result': _result_view(result),
            'pending_question_ids': [e.question_id for e in merged if e.requires_manual_review],
            'questions': items,
        }

    @staticmethod
    def marking_queue(exam_id=None):
        """Submitted attempts waiting to be finalized, oldest first"""
        query = ExamAttempt.query.filter_by(status=AttemptStatus.SUBMITTED)
        if exam_id:
            query = query.filter_by(exam_id=exam_id)
        attempts = query.order_by(ExamAttempt.submitted_at.asc(), ExamAttempt.id).all()

        marked = {}
        if attempts:
            for mark in ManualMark.query.filter(ManualMark.attempt_id.in_([a.id for a in attempts])).all():
                marked.setdefault(mark.attempt_id, set()).add(mark.question_id)

        review_ids = {}
        queue = []
        for attempt in attempts:
            if attempt.exam_id not in review_ids:
                review_ids[attempt.exam_id] = FinalizationService.review_question_ids(attempt.exam_id)
            done = marked.get(attempt.id, set())
            pending = [qid for qid in review_ids[attempt.exam_id] if qid not in done]
            row = attempt.to_dict()
            row['exam_title'] = attempt.exam.title
            row['pending_question_ids'] = pending
            row['pending_count'] = len(pending)
            queue.append(row)

        log.debug("Marking queue has %d attempt(s)", len(queue))
        return queue
