"""
ManualMark Model
Human-entered marks for questions that cannot be graded automatically
"""
from gradecore.extensions import db
from gradecore.utils import generate_id, now_utc, isoformat


class ManualMark(db.Model):
    """Manual mark model"""
    __tablename__ = 'manual_mark'

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    attempt_id = db.Column(db.String(36), db.ForeignKey('exam_attempt.id'), nullable=False, index=True)
    question_id = db.Column(db.String(36), db.ForeignKey('question.id'), nullable=False)
    score = db.Column(db.Float, nullable=False)
    max_score = db.Column(db.Float, nullable=False)
    feedback = db.Column(db.Text)
    marked_by = db.Column(db.String(100))
    created_at = db.Column(db.DateTime(timezone=True), default=now_utc)
    updated_at = db.Column(db.DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    __table_args__ = (
        db.UniqueConstraint(
            'attempt_id', 'question_id',
            name='unique_mark_per_question'
        ),
    )

    def __repr__(self):
        return f'<ManualMark Q{self.question_id}: {self.score}/{self.max_score}>'

    def to_dict(self):
        return {
            'question_id': self.question_id,
            'score': self.score,
            'max_score': self.max_score,
            'feedback': self.feedback,
            'marked_by': self.marked_by,
            'updated_at': isoformat(self.updated_at),
        }
