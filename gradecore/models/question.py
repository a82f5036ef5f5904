"""
Question Model
Question definitions and the closed set of response types
"""
from enum import Enum
from gradecore.extensions import db
from gradecore.utils import generate_id


class ResponseType(str, Enum):
    """Response-type tags for questions and responses"""
    SINGLE_CHOICE = 'mcq'
    MULTI_CHOICE = 'multi'
    SHORT_TEXT = 'short'
    NUMERIC = 'numeric'
    BOOLEAN = 'boolean'
    ORDERING = 'ordering'
    MATCHING = 'matching'
    EXTENDED_TEXT = 'extended'

    @classmethod
    def parse(cls, value):
        """Return the ResponseType for a raw tag, or None when unknown"""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        tag = value.strip().lower()
        tag = RESPONSE_TYPE_ALIASES.get(tag, tag)
        try:
            return cls(tag)
        except ValueError:
            return None


# Older exam packages used these tags
RESPONSE_TYPE_ALIASES = {
    'multi_select': 'multi',
    'single_choice': 'mcq',
    'short_text': 'short',
    'extended_text': 'extended',
}


class Question(db.Model):
    """Question model"""
    __tablename__ = 'question'

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    exam_id = db.Column(db.String(36), db.ForeignKey('exam_package.id'), nullable=False, index=True)
    sequence_number = db.Column(db.Integer, nullable=False, default=0)

    response_type = db.Column(db.String(20), nullable=False)
    marks = db.Column(db.Float, nullable=False, default=1.0)

    # Multi-choice only: award proportional credit
    partial_credit = db.Column(db.Boolean, nullable=False, default=False)

    # Content blocks (text, images, ...) - never scored
    prompt_blocks = db.Column(db.JSON, default=list)

    answer_key = db.relationship('AnswerKey', backref='question', uselist=False, lazy=True)

    def __repr__(self):
        return f'<Question {self.id} ({self.response_type})>'

    def to_dict(self):
        return {
            'id': self.id,
            'exam_id': self.exam_id,
            'sequence_number': self.sequence_number,
            'response_type': self.response_type,
            'marks': self.marks,
            'partial_credit': bool(self.partial_credit),
            'prompt_blocks': self.prompt_blocks or [],
        }
