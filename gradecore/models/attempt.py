"""
ExamAttempt Model
One student's run through an exam: started -> submitted -> evaluated
"""
from gradecore.extensions import db
from gradecore.utils import generate_id, now_utc, ensure_utc, isoformat


class AttemptStatus:
    """Attempt lifecycle states (forward only)"""
    STARTED = 'started'
    SUBMITTED = 'submitted'
    EVALUATED = 'evaluated'

    ORDER = (STARTED, SUBMITTED, EVALUATED)

    @classmethod
    def can_advance(cls, current, target):
        """True when target is the next state after current"""
        if current not in cls.ORDER or target not in cls.ORDER:
            return False
        return cls.ORDER.index(target) == cls.ORDER.index(current) + 1


class ExamAttempt(db.Model):
    """Exam attempt model"""
    __tablename__ = 'exam_attempt'

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    exam_id = db.Column(db.String(36), db.ForeignKey('exam_package.id'), nullable=False, index=True)
    student_id = db.Column(db.String(100), nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default=AttemptStatus.STARTED)

    started_at = db.Column(db.DateTime(timezone=True), default=now_utc)
    submitted_at = db.Column(db.DateTime(timezone=True))
    evaluated_at = db.Column(db.DateTime(timezone=True))

    # Relationships
    exam = db.relationship('ExamPackage', lazy=True)
    responses = db.relationship('ExamResponse', backref='attempt', lazy=True)
    manual_marks = db.relationship('ManualMark', backref='attempt', lazy=True)
    result = db.relationship('ExamResult', backref='attempt', uselist=False, lazy=True)

    def __repr__(self):
        return f'<ExamAttempt {self.id} [{self.status}]>'

    @property
    def time_taken_seconds(self):
        """Seconds between start and submission"""
        if not (self.started_at and self.submitted_at):
            return None
        elapsed = ensure_utc(self.submitted_at) - ensure_utc(self.started_at)
        return max(0, round(elapsed.total_seconds()))

    def to_dict(self):
        return {
            'id': self.id,
            'exam_id': self.exam_id,
            'student_id': self.student_id,
            'status': self.status,
            'started_at': isoformat(self.started_at),
            'submitted_at': isoformat(self.submitted_at),
            'evaluated_at': isoformat(self.evaluated_at),
            'time_taken_seconds': self.time_taken_seconds,
        }
