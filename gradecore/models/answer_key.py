"""
AnswerKey Model
Type-specific correctness data, one row per question
Only admin marking views may see the raw row
"""
from gradecore.extensions import db
from gradecore.utils import generate_id


class AnswerKey(db.Model):
    """Answer key model"""
    __tablename__ = 'answer_key'

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    question_id = db.Column(db.String(36), db.ForeignKey('question.id'), nullable=False, unique=True)
    answer_type = db.Column(db.String(20))

    # Choice questions
    correct_option_id = db.Column(db.String(50))
    correct_option_ids = db.Column(db.JSON)

    # Short text
    accepted_answers = db.Column(db.JSON)
    case_sensitive = db.Column(db.Boolean, default=False)

    # Numeric: exact value + tolerance, or closed range
    exact_value = db.Column(db.Float)
    tolerance = db.Column(db.Float)
    range_min = db.Column(db.Float)
    range_max = db.Column(db.Float)
    unit = db.Column(db.String(20))

    # Boolean / ordering / matching
    correct_boolean = db.Column(db.Boolean)
    correct_order = db.Column(db.JSON)
    correct_pairs = db.Column(db.JSON)

    # Extended text (no automatic verdict)
    rubric = db.Column(db.JSON)
    sample_response = db.Column(db.Text)

    def __repr__(self):
        return f'<AnswerKey Q{self.question_id}>'

    def to_dict(self):
        return {
            'question_id': self.question_id,
            'answer_type': self.answer_type,
            'correct_option_id': self.correct_option_id,
            'correct_option_ids': self.correct_option_ids,
            'accepted_answers': self.accepted_answers,
            'case_sensitive': bool(self.case_sensitive),
            'exact_value': self.exact_value,
            'tolerance': self.tolerance,
            'range_min': self.range_min,
            'range_max': self.range_max,
            'unit': self.unit,
            'correct_boolean': self.correct_boolean,
            'correct_order': self.correct_order,
            'correct_pairs': self.correct_pairs,
            'rubric': self.rubric,
            'sample_response': self.sample_response,
        }
