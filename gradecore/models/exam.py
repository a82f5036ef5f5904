"""
ExamPackage Model
A published exam: its questions and the pass mark used to grade attempts
"""
from gradecore.extensions import db
from gradecore.utils import generate_id, now_utc


class ExamPackage(db.Model):
    """Exam package model"""
    __tablename__ = 'exam_package'

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    title = db.Column(db.String(200), nullable=False)
    subject = db.Column(db.String(100))
    year_level = db.Column(db.Integer)

    # NULL means the configured default (50%)
    pass_mark_percentage = db.Column(db.Float, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), default=now_utc)

    # Relationships
    questions = db.relationship(
        'Question',
        backref='exam',
        lazy=True,
        order_by='Question.sequence_number'
    )

    def __repr__(self):
        return f'<ExamPackage {self.title}>'

    @property
    def total_marks(self):
        """Sum of question marks"""
        return sum((q.marks or 0) for q in self.questions)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'subject': self.subject,
            'year_level': self.year_level,
            'pass_mark_percentage': self.pass_mark_percentage,
            'total_marks': self.total_marks,
        }
