"""
Grading Errors
Exceptions raised by the grading services and rendered by the API
"""


class GradingError(Exception):
    """Base class for grading failures surfaced to callers"""
    status_code = 400
    code = 'grading_error'

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self):
        return {
            'error': self.message,
            'code': self.code,
            'details': self.details,
        }


class MalformedResponse(GradingError):
    """Response payload does not match its declared type (scorer-internal)"""
    code = 'malformed_response'


class MissingAnswerKey(GradingError):
    """Question has no usable answer key (scorer-internal)"""
    code = 'missing_answer_key'


class AttemptNotFound(GradingError):
    status_code = 404
    code = 'attempt_not_found'

    def __init__(self, attempt_id):
        super().__init__(f'Attempt {attempt_id} not found', {'attempt_id': attempt_id})


class InvalidAttemptState(GradingError):
    """Attempt is not in a state that allows the requested transition"""
    status_code = 409
    code = 'invalid_attempt_state'

    def __init__(self, attempt_id, status, action):
        super().__init__(
            f'Cannot {action} attempt {attempt_id} while it is {status}',
            {'attempt_id': attempt_id, 'status': status, 'action': action},
        )


class IncompleteManualReview(GradingError):
    """Finalize was requested while manual-review questions lack a mark"""
    status_code = 409
    code = 'incomplete_manual_review'

    def __init__(self, attempt_id, question_ids):
        self.question_ids = list(question_ids)
        super().__init__(
            f'{len(self.question_ids)} question(s) still need a manual mark',
            {'attempt_id': attempt_id, 'question_ids': self.question_ids},
        )


class InvalidManualMark(GradingError):
    status_code = 400
    code = 'invalid_manual_mark'

    def __init__(self, question_id, reason):
        super().__init__(
            f'Invalid manual mark for question {question_id}: {reason}',
            {'question_id': question_id, 'reason': reason},
        )


class PersistenceFailure(GradingError):
    """Writing the result or the status transition failed; nothing was committed"""
    status_code = 500
    code = 'persistence_failure'

    def __init__(self, attempt_id, original):
        self.original = original
        super().__init__(
            f'Failed to persist result for attempt {attempt_id}: {original}',
            {'attempt_id': attempt_id},
        )


class ExamNotFound(GradingError):
    status_code = 404
    code = 'exam_not_found'

    def __init__(self, exam_id):
        super().__init__(f'Exam {exam_id} not found', {'exam_id': exam_id})


class QuestionNotInExam(GradingError):
    status_code = 400
    code = 'question_not_in_exam'

    def __init__(self, question_id):
        super().__init__(
            f'Question {question_id} is not part of this exam',
            {'question_id': question_id},
        )
