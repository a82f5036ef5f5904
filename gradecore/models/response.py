"""
ExamResponse Model
Stores the latest answer per (attempt, question)
"""
from gradecore.extensions import db
from gradecore.utils import generate_id, now_utc, isoformat


class ExamResponse(db.Model):
    """Exam response model"""
    __tablename__ = 'exam_response'

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    attempt_id = db.Column(db.String(36), db.ForeignKey('exam_attempt.id'), nullable=False, index=True)
    question_id = db.Column(db.String(36), db.ForeignKey('question.id'), nullable=False)
    response_type = db.Column(db.String(20))
    response_data = db.Column(db.JSON)
    responded_at = db.Column(db.DateTime(timezone=True), default=now_utc)

    __table_args__ = (
        db.UniqueConstraint(
            'attempt_id', 'question_id',
            name='unique_response_per_question'
        ),
    )

    def __repr__(self):
        return f'<ExamResponse Q{self.question_id} in {self.attempt_id}>'

    def to_dict(self):
        return {
            'question_id': self.question_id,
            'response_type': self.response_type,
            'response_data': self.response_data,
            'responded_at': isoformat(self.responded_at),
        }
