"""
QuestionScore
Canonical per-question breakdown entry
"""
from dataclasses import dataclass, replace
from typing import Any, Optional


@dataclass(frozen=True)
class QuestionScore:
    question_id: Optional[str]
    marks_awarded: float
    marks_possible: float
    correct: bool
    requires_manual_review: bool = False
    response_type: Optional[str] = None
    correct_answer: Any = None
    feedback: Optional[str] = None

    @property
    def is_pending(self):
        return self.requires_manual_review

    @property
    def display_score(self):
        """Score shown on review screens; "pending" until a human marks it"""
        return 'pending' if self.requires_manual_review else self.marks_awarded

    def with_manual_mark(self, score, feedback=None):
        """Copy of this entry with a human mark applied, bounded to [0, marks_possible]"""
        score = min(max(float(score), 0.0), self.marks_possible)
        return replace(
            self,
            marks_awarded=score,
            correct=score >= self.marks_possible,
            requires_manual_review=False,
            feedback=feedback or None,
        )

    def to_dict(self):
        """Canonical stored shape"""
        return {
            'question_id': self.question_id,
            'response_type': self.response_type,
            'marks_awarded': self.marks_awarded,
            'marks_possible': self.marks_possible,
            'correct': self.correct,
            'requires_manual_review': self.requires_manual_review,
            'correct_answer': self.correct_answer,
            'feedback': self.feedback,
        }
