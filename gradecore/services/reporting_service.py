"""
Reporting Service
Exam-wide statistics and parent-facing progress summaries
"""
from gradecore.errors import ExamNotFound
from gradecore.extensions import db
from gradecore.models import AttemptStatus, ExamAttempt, ExamPackage, ExamResult
from gradecore.services.aggregation_service import AggregationService, mean
from gradecore.services.breakdown_normalizer import normalize_breakdown
from gradecore.utils import ensure_utc, isoformat


class ReportingService:
    """Reporting queries"""

    @staticmethod
    def exam_summary(exam_id):
        """
        Attempt counts and score statistics for one exam

        Returns:
            dict with exam, attempt counts by status and statistics
            (None-valued when nothing has been evaluated yet)
        """
        exam = db.session.get(ExamPackage, exam_id)
        if exam is None:
            raise ExamNotFound(exam_id)

        attempts = ExamAttempt.query.filter_by(exam_id=exam_id).all()
        results = ExamResult.query.join(
            ExamAttempt, ExamResult.attempt_id == ExamAttempt.id
        ).filter(ExamAttempt.exam_id == exam_id).all()

        counts = {status: 0 for status in AttemptStatus.ORDER}
        for attempt in attempts:
            counts[attempt.status] = counts.get(attempt.status, 0) + 1

        return {
            'exam': exam.to_dict(),
            'total_attempts': len(attempts),
            'started_count': counts[AttemptStatus.STARTED],
            'submitted_count': counts[AttemptStatus.SUBMITTED],
            'evaluated_count': counts[AttemptStatus.EVALUATED],
            'statistics': AggregationService.summarize([r.grade_fields() for r in results]),
        }

    @staticmethod
    def student_progress(student_id):
        """
        Progress overview for one student (parent dashboard)

        Uses the latest evaluated attempt per exam.
        """
        attempts = ExamAttempt.query.filter_by(student_id=str(student_id)).all()

        latest = {}
        for attempt in attempts:
            if attempt.status != AttemptStatus.EVALUATED or attempt.result is None:
                continue
            current = latest.get(attempt.exam_id)
            if current is None or ensure_utc(attempt.evaluated_at) > ensure_utc(current.evaluated_at):
                latest[attempt.exam_id] = attempt

        exams = []
        for attempt in sorted(latest.values(), key=lambda a: (a.exam.title, a.exam_id)):
            result = attempt.result
            entries = normalize_breakdown(result.breakdown)
            exams.append({
                'exam_id': attempt.exam_id,
                'title': attempt.exam.title,
                'subject': attempt.exam.subject,
                'attempt_id': attempt.id,
                'total_score': result.total_score,
                'max_score': result.max_score,
                'percentage': result.percentage,
                'passed': result.passed,
                'questions_correct': sum(1 for e in entries if e.correct),
                'questions_pending': sum(1 for e in entries if e.requires_manual_review),
                'evaluated_at': isoformat(result.evaluated_at),
            })

        by_subject = {}
        for row in exams:
            by_subject.setdefault(row['subject'] or 'General', []).append(row['percentage'])

        subjects = [
            {
                'subject': subject,
                'exam_count': len(percentages),
                'average_percentage': mean(percentages),
                'highest_percentage': max(percentages),
                'lowest_percentage': min(percentages),
            }
            for subject, percentages in sorted(by_subject.items())
        ]

        return {
            'student_id': str(student_id),
            'total_exams': len({a.exam_id for a in attempts}),
            'evaluated_exams': len(exams),
            'in_progress': sum(1 for a in attempts if a.status == AttemptStatus.STARTED),
            'awaiting_marking': sum(1 for a in attempts if a.status == AttemptStatus.SUBMITTED),
            'average_percentage': mean(row['percentage'] for row in exams),
            'exams': exams,
            'subjects': subjects,
        }
