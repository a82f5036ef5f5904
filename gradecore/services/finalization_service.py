"""
Finalization Service
Scores an attempt, merges human marks and persists the authoritative result

finalize() is one transaction: the attempt row is locked, the breakdown is
recomputed from scratch, and the result upsert plus the status change are
committed together or not at all.
"""
from collections.abc import Mapping
import logging
import math

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from gradecore.errors import (
    GradingError,
    AttemptNotFound,
    InvalidAttemptState,
    IncompleteManualReview,
    InvalidManualMark,
    PersistenceFailure,
)
from gradecore.extensions import db
from gradecore.models import (
    AnswerKey,
    AttemptStatus,
    ExamAttempt,
    ExamResponse,
    ExamResult,
    ManualMark,
    Question,
    ResponseType,
)
from gradecore.services.aggregation_service import AggregationService
from gradecore.services.scoring_service import ScoringService
from gradecore.utils import generate_id, now_utc

log = logging.getLogger(__name__)

MARKABLE_STATUSES = (AttemptStatus.SUBMITTED, AttemptStatus.EVALUATED)


def apply_manual_marks(breakdown, manual_marks):
    """
    Merge human marks into an automatic breakdown

    Args:
        breakdown: list of QuestionScore
        manual_marks: dict question_id -> {'score', 'feedback'}

    Returns:
        new list; a manual mark always replaces the automatic entry
    """
    merged = []
    for entry in breakdown:
        mark = manual_marks.get(entry.question_id)
        if mark is None:
            merged.append(entry)
        else:
            merged.append(entry.with_manual_mark(mark['score'], mark.get('feedback')))
    return merged


def _upsert_statement(dialect_name):
    if dialect_name == 'postgresql':
        from sqlalchemy.dialects.postgresql import insert
    elif dialect_name == 'sqlite':
        from sqlalchemy.dialects.sqlite import insert
    else:
        return None
    return insert(ExamResult)


class FinalizationService:
    """Finalize attempts and record manual marks"""

    # ================= LOADING =================

    @staticmethod
    def _lock_attempt(attempt_id):
        """Load the attempt with a row lock held until commit/rollback"""
        return ExamAttempt.query.filter_by(id=attempt_id).with_for_update().first()

    @staticmethod
    def _markable_attempt(attempt_id, action):
        attempt = FinalizationService._lock_attempt(attempt_id)
        if attempt is None:
            raise AttemptNotFound(attempt_id)
        if attempt.status not in MARKABLE_STATUSES:
            raise InvalidAttemptState(attempt_id, attempt.status, action)
        return attempt

    @staticmethod
    def load_questions(exam_id):
        return Question.query.filter_by(
            exam_id=exam_id
        ).order_by(Question.sequence_number, Question.id).all()

    @staticmethod
    def load_answer_keys(questions):
        """dict question_id -> answer key mapping"""
        question_ids = [q.id for q in questions]
        if not question_ids:
            return {}
        return {
            key.question_id: key.to_dict()
            for key in AnswerKey.query.filter(AnswerKey.question_id.in_(question_ids)).all()
        }

    @staticmethod
    def review_question_ids(exam_id):
        """
        Questions of an exam that always need a human mark

        The review flag depends only on the question and its answer key,
        never on the response, so this holds for every attempt.
        """
        questions = FinalizationService.load_questions(exam_id)
        breakdown = ScoringService.score_all(
            [q.to_dict() for q in questions],
            FinalizationService.load_answer_keys(questions),
            {},
        )
        return [e.question_id for e in breakdown if e.requires_manual_review]

    @staticmethod
    def build_breakdown(attempt, questions=None):
        """
        Fresh automatic breakdown for an attempt

        Returns:
            (questions, list of QuestionScore in sequence order)
        """
        if questions is None:
            questions = FinalizationService.load_questions(attempt.exam_id)
        answer_keys = FinalizationService.load_answer_keys(questions)
        responses = {
            r.question_id: r.to_dict()
            for r in ExamResponse.query.filter_by(attempt_id=attempt.id).all()
        }

        breakdown = ScoringService.score_all(
            [q.to_dict() for q in questions],
            answer_keys,
            responses,
        )
        return questions, breakdown

    @staticmethod
    def stored_manual_marks(attempt_id):
        """dict question_id -> mark for everything graders have saved"""
        return {
            m.question_id: {'score': m.score, 'feedback': m.feedback}
            for m in ManualMark.query.filter_by(attempt_id=attempt_id).all()
        }

    @staticmethod
    def pending_manual_review(attempt_id):
        """Question ids that still need a human mark before finalizing"""
        attempt = db.session.get(ExamAttempt, attempt_id)
        if attempt is None:
            raise AttemptNotFound(attempt_id)
        _, breakdown = FinalizationService.build_breakdown(attempt)
        merged = apply_manual_marks(breakdown, FinalizationService.stored_manual_marks(attempt_id))
        return [e.question_id for e in merged if e.requires_manual_review]

    # ================= MANUAL MARKS =================

    @staticmethod
    def _validate_manual_mark(mark, questions_by_id, entries_by_id):
        """Check a grader's mark; returns (question_id, score, max_score, feedback)"""
        if not isinstance(mark, Mapping):
            raise InvalidManualMark(None, 'mark must be an object')

        question_id = mark.get('question_id') or mark.get('questionId')
        if not isinstance(question_id, str):
            raise InvalidManualMark(None, 'question_id must be text')
        question = questions_by_id.get(question_id)
        if question is None:
            raise InvalidManualMark(question_id, 'question is not part of this exam')

        entry = entries_by_id[question_id]
        is_extended = ResponseType.parse(question.response_type) is ResponseType.EXTENDED_TEXT
        if not (is_extended or entry.requires_manual_review):
            raise InvalidManualMark(question_id, 'question is graded automatically')

        score = mark.get('score')
        if isinstance(score, bool) or not isinstance(score, (int, float)) or not math.isfinite(score):
            raise InvalidManualMark(question_id, 'score must be a number')
        if score < 0 or score > entry.marks_possible:
            raise InvalidManualMark(
                question_id, f'score must be between 0 and {entry.marks_possible:g}'
            )

        max_score = mark.get('max_score', mark.get('maxScore'))
        if max_score is not None and max_score != entry.marks_possible:
            raise InvalidManualMark(
                question_id, f'max score {max_score} does not match question marks {entry.marks_possible:g}'
            )

        feedback = mark.get('feedback')
        if feedback is not None and not isinstance(feedback, str):
            raise InvalidManualMark(question_id, 'feedback must be text')

        return question_id, float(score), entry.marks_possible, feedback

    @staticmethod
    def _store_manual_mark(attempt_id, question_id, score, max_score, feedback, marked_by):
        existing = ManualMark.query.filter_by(
            attempt_id=attempt_id,
            question_id=question_id
        ).first()

        if existing is None:
            existing = ManualMark(attempt_id=attempt_id, question_id=question_id)
            db.session.add(existing)

        existing.score = score
        existing.max_score = max_score
        existing.feedback = feedback or None
        existing.marked_by = marked_by
        existing.updated_at = now_utc()
        db.session.flush()
        return existing

    @staticmethod
    def save_manual_mark(attempt_id, mark, marked_by=None):
        """
        Persist one grader mark without finalizing

        Args:
            attempt_id: attempt being marked
            mark: {'question_id', 'score', 'feedback', optional 'max_score'}
            marked_by: grader id

        Returns:
            ManualMark
        """
        try:
            attempt = FinalizationService._markable_attempt(attempt_id, 'mark')
            questions, breakdown = FinalizationService.build_breakdown(attempt)
            question_id, score, max_score, feedback = FinalizationService._validate_manual_mark(
                mark,
                {q.id: q for q in questions},
                {e.question_id: e for e in breakdown},
            )
            saved = FinalizationService._store_manual_mark(
                attempt_id, question_id, score, max_score, feedback, marked_by
            )
            db.session.commit()
        except GradingError:
            db.session.rollback()
            raise
        except SQLAlchemyError as exc:
            db.session.rollback()
            log.error("Saving manual mark for attempt %s failed: %s", attempt_id, exc)
            raise PersistenceFailure(attempt_id, exc) from exc

        log.info("Manual mark saved: attempt=%s question=%s score=%s", attempt_id, question_id, score)
        return saved

    # ================= RESULT =================

    @staticmethod
    def _upsert_result(attempt_id, fields):
        """Insert or replace the single result row of an attempt"""
        stmt = _upsert_statement(db.session.get_bind().dialect.name)

        if stmt is not None:
            stmt = stmt.values(id=generate_id(), attempt_id=attempt_id, **fields)
            stmt = stmt.on_conflict_do_update(index_elements=['attempt_id'], set_=fields)
            db.session.execute(stmt)
        else:
            result = ExamResult.query.filter_by(attempt_id=attempt_id).first()
            if result is None:
                result = ExamResult(attempt_id=attempt_id)
                db.session.add(result)
            for name, value in fields.items():
                setattr(result, name, value)
            db.session.flush()

        return ExamResult.query.populate_existing().filter_by(attempt_id=attempt_id).one()

    @staticmethod
    def finalize(attempt_id, manual_marks=None, marked_by=None):
        """
        Compute and persist the authoritative result of an attempt

        Re-finalizing an evaluated attempt recomputes the result in place;
        the outcome only depends on responses, answer keys and marks.

        Args:
            attempt_id: attempt to finalize
            manual_marks: optional list of marks supplied with the request
            marked_by: grader id recorded on supplied marks

        Returns:
            ExamResult

        Raises:
            AttemptNotFound, InvalidAttemptState, InvalidManualMark,
            IncompleteManualReview, PersistenceFailure
        """
        log.info("Finalizing attempt %s", attempt_id)

        try:
            attempt = FinalizationService._markable_attempt(attempt_id, 'finalize')
            questions, breakdown = FinalizationService.build_breakdown(attempt)

            if manual_marks:
                questions_by_id = {q.id: q for q in questions}
                entries_by_id = {e.question_id: e for e in breakdown}
                for mark in manual_marks:
                    question_id, score, max_score, feedback = FinalizationService._validate_manual_mark(
                        mark, questions_by_id, entries_by_id
                    )
                    FinalizationService._store_manual_mark(
                        attempt_id, question_id, score, max_score, feedback, marked_by
                    )

            merged = apply_manual_marks(
                breakdown,
                FinalizationService.stored_manual_marks(attempt_id)
            )

            pending = [e.question_id for e in merged if e.requires_manual_review]
            if pending:
                raise IncompleteManualReview(attempt_id, pending)

            threshold = attempt.exam.pass_mark_percentage
            if threshold is None:
                threshold = current_app.config['DEFAULT_PASS_MARK_PERCENTAGE']
            totals = AggregationService.aggregate(merged, threshold)

            evaluated_at = now_utc()
            fields = dict(totals)
            fields['breakdown'] = [e.to_dict() for e in merged]
            fields['evaluated_at'] = evaluated_at
            fields['updated_at'] = evaluated_at
            result = FinalizationService._upsert_result(attempt_id, fields)

            attempt.status = AttemptStatus.EVALUATED
            attempt.evaluated_at = evaluated_at
            db.session.commit()

        except IncompleteManualReview as exc:
            db.session.rollback()
            log.warning("Attempt %s not finalized, awaiting marks for %s", attempt_id, exc.question_ids)
            raise
        except GradingError:
            db.session.rollback()
            raise
        except SQLAlchemyError as exc:
            db.session.rollback()
            log.error("Persisting result for attempt %s failed: %s", attempt_id, exc)
            raise PersistenceFailure(attempt_id, exc) from exc

        log.info(
            "Attempt %s evaluated: %s/%s (%s%%) passed=%s",
            attempt_id, result.total_score, result.max_score, result.percentage, result.passed
        )
        return result
