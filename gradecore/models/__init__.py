"""
Models Package
Exports all database models
"""
from gradecore.models.exam import ExamPackage
from gradecore.models.question import Question, ResponseType
from gradecore.models.answer_key import AnswerKey
from gradecore.models.attempt import ExamAttempt, AttemptStatus
from gradecore.models.response import ExamResponse
from gradecore.models.manual_mark import ManualMark
from gradecore.models.result import ExamResult

__all__ = [
    'ExamPackage', 'Question', 'ResponseType', 'AnswerKey', 'ExamAttempt',
    'AttemptStatus', 'ExamResponse', 'ManualMark', 'ExamResult'
]
