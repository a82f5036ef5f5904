"""
ExamResult Model
Authoritative grade of an attempt, one row per attempt
"""
from gradecore.extensions import db
from gradecore.utils import generate_id, now_utc, isoformat


class ExamResult(db.Model):
    """Exam result model"""
    __tablename__ = 'exam_result'

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    attempt_id = db.Column(db.String(36), db.ForeignKey('exam_attempt.id'), nullable=False, unique=True)
    total_score = db.Column(db.Float, nullable=False, default=0)
    max_score = db.Column(db.Float, nullable=False, default=0)
    percentage = db.Column(db.Float, nullable=False, default=0)
    passed = db.Column(db.Boolean, nullable=False, default=False)
    pass_mark_percentage = db.Column(db.Float, nullable=False)

    # Ordered per-question entries; read through the breakdown normalizer
    breakdown = db.Column(db.JSON, nullable=False, default=list)

    evaluated_at = db.Column(db.DateTime(timezone=True), default=now_utc)
    updated_at = db.Column(db.DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    def __repr__(self):
        return f'<ExamResult {self.attempt_id}: {self.total_score}/{self.max_score}>'

    def grade_fields(self):
        """Everything except timestamps"""
        return {
            'attempt_id': self.attempt_id,
            'total_score': self.total_score,
            'max_score': self.max_score,
            'percentage': self.percentage,
            'passed': self.passed,
            'pass_mark_percentage': self.pass_mark_percentage,
            'breakdown': self.breakdown,
        }

    def to_dict(self):
        data = self.grade_fields()
        data['evaluated_at'] = isoformat(self.evaluated_at)
        data['updated_at'] = isoformat(self.updated_at)
        return data
