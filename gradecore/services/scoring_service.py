"""
Scoring Service
Grades a single response against its question and answer key

Pure and deterministic: inputs are plain mappings (see the models'
to_dict()) and are treated as untrusted. A malformed payload counts as
no answer; a missing answer key flags the question for manual review.
Nothing in here raises to the caller.
"""
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
import logging
import math

from gradecore.errors import MalformedResponse, MissingAnswerKey
from gradecore.models.question import ResponseType
from gradecore.services.question_score import QuestionScore

log = logging.getLogger(__name__)

DEFAULT_QUESTION_MARKS = 1.0


# ================= HELPERS =================

def _pick(payload, *names):
    """First present key out of camelCase / snake_case variants"""
    for name in names:
        if name in payload and payload[name] is not None:
            return payload[name]
    return None


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _question_marks(question):
    marks = question.get('marks')
    if not _is_number(marks) or not math.isfinite(marks):
        return DEFAULT_QUESTION_MARKS
    return float(max(marks, 0))


def _option_id(value):
    """Option ids are letters or numbers; compare them trimmed and upper-cased"""
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        return None
    return str(value).strip().upper()


def _to_decimal(value):
    """Decimal for a finite number or numeric string, else None"""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    elif not _is_number(value):
        return None
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def _response_payload(response, response_type):
    """
    Extract the type-shaped payload of a response

    Returns None when there is no answer at all; raises MalformedResponse
    when the response is present but has the wrong shape.
    """
    if response is None:
        return None
    if not isinstance(response, Mapping):
        raise MalformedResponse('response is not an object')

    declared = response.get('response_type')
    if declared is not None and ResponseType.parse(declared) is not response_type:
        raise MalformedResponse(f'declared type {declared!r} does not match question')

    data = response.get('response_data')
    if data is None:
        return None
    if not isinstance(data, Mapping):
        raise MalformedResponse('response_data is not an object')
    return data


# ================= SINGLE CHOICE =================

def _expected_single_choice(key):
    correct = _option_id(key.get('correct_option_id'))
    if not correct:
        raise MissingAnswerKey('no correct option')
    return correct, str(key['correct_option_id']).strip()


def _grade_single_choice(expected, payload, question, marks):
    selected = _pick(payload, 'selectedOptionId', 'selected_option_id')
    if selected is None:
        return 0.0, False
    selected = _option_id(selected)
    if selected is None:
        raise MalformedResponse('selected option is not an id')
    is_correct = selected == expected
    return (marks if is_correct else 0.0), is_correct


# ================= MULTI CHOICE =================

def _expected_multi_choice(key):
    correct = key.get('correct_option_ids')
    if not correct:
        # Older keys stored the option ids as accepted answers
        correct = key.get('accepted_answers')
    if not isinstance(correct, (list, tuple)) or not correct:
        raise MissingAnswerKey('no correct options')
    ids = {_option_id(option) for option in correct}
    ids.discard(None)
    ids.discard('')
    if not ids:
        raise MissingAnswerKey('no usable correct options')
    return ids, sorted(ids)


def _grade_multi_choice(expected, payload, question, marks):
    selected = _pick(payload, 'selectedOptionIds', 'selected_option_ids')
    if selected is None:
        return 0.0, False
    if not isinstance(selected, (list, tuple)):
        raise MalformedResponse('selected options is not a list')
    selected_ids = {_option_id(option) for option in selected}
    if None in selected_ids:
        raise MalformedResponse('selected options contain a non-id')

    is_correct = selected_ids == expected
    if not question.get('partial_credit'):
        return (marks if is_correct else 0.0), is_correct

    # +1 per correct selection, -1 per wrong selection, floored at zero
    earned = sum(1 if option in expected else -1 for option in selected_ids)
    earned = max(0, earned)
    awarded = round(earned / len(expected) * marks, 2)
    return awarded, is_correct


# ================= SHORT TEXT =================

def _expected_short_text(key):
    accepted = key.get('accepted_answers')
    if isinstance(accepted, str):
        accepted = [accepted]
    if not isinstance(accepted, (list, tuple)):
        raise MissingAnswerKey('no accepted answers')
    variants = [str(a).strip() for a in accepted if isinstance(a, (str, int, float)) and not isinstance(a, bool)]
    variants = [v for v in variants if v]
    if not variants:
        raise MissingAnswerKey('no accepted answers')
    case_sensitive = bool(key.get('case_sensitive'))
    if not case_sensitive:
        return ({v.lower() for v in variants}, False), variants
    return (set(variants), True), variants


def _grade_short_text(expected, payload, question, marks):
    variants, case_sensitive = expected
    answer = _pick(payload, 'answer', 'text')
    if answer is None:
        return 0.0, False
    if not isinstance(answer, str):
        raise MalformedResponse('answer is not text')
    answer = answer.strip()
    if not answer:
        return 0.0, False
    if not case_sensitive:
        answer = answer.lower()
    is_correct = answer in variants
    return (marks if is_correct else 0.0), is_correct


# ================= NUMERIC =================

def _expected_numeric(key):
    exact = _to_decimal(key.get('exact_value'))
    if exact is not None:
        tolerance = _to_decimal(key.get('tolerance')) or Decimal(0)
        return ('exact', exact, abs(tolerance)), key.get('exact_value')

    low = _to_decimal(key.get('range_min'))
    high = _to_decimal(key.get('range_max'))
    if low is not None and high is not None:
        return ('range', min(low, high), max(low, high)), {
            'range_min': key.get('range_min'),
            'range_max': key.get('range_max'),
        }
    raise MissingAnswerKey('no exact value or range')


def _grade_numeric(expected, payload, question, marks):
    raw = _pick(payload, 'answer', 'value')
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return 0.0, False
    value = _to_decimal(raw)
    if value is None:
        raise MalformedResponse('answer is not a number')

    mode, first, second = expected
    if mode == 'exact':
        is_correct = abs(value - first) <= second
    else:
        is_correct = first <= value <= second
    return (marks if is_correct else 0.0), is_correct


# ================= BOOLEAN =================

def _expected_boolean(key):
    correct = key.get('correct_boolean')
    if not isinstance(correct, bool):
        raise MissingAnswerKey('no correct boolean')
    return correct, correct


def _grade_boolean(expected, payload, question, marks):
    # payload may also carry an "explanation"; it never affects the score
    answer = _pick(payload, 'answer', 'value')
    if answer is None:
        return 0.0, False
    if not isinstance(answer, bool):
        raise MalformedResponse('answer is not a boolean')
    is_correct = answer is expected
    return (marks if is_correct else 0.0), is_correct


# ================= ORDERING =================

def _expected_ordering(key):
    order = key.get('correct_order')
    if not isinstance(order, (list, tuple)) or not order:
        raise MissingAnswerKey('no correct order')
    return list(order), list(order)


def _grade_ordering(expected, payload, question, marks):
    items = _pick(payload, 'orderedItems', 'ordered_items')
    if items is None:
        return 0.0, False
    if not isinstance(items, (list, tuple)):
        raise MalformedResponse('ordered items is not a list')
    is_correct = list(items) == expected
    return (marks if is_correct else 0.0), is_correct


# ================= MATCHING =================

def _expected_matching(key):
    pairs = key.get('correct_pairs')
    if not isinstance(pairs, Mapping) or not pairs:
        raise MissingAnswerKey('no correct pairs')
    return dict(pairs), dict(pairs)


def _grade_matching(expected, payload, question, marks):
    pairs = _pick(payload, 'pairs')
    if pairs is None:
        return 0.0, False
    if not isinstance(pairs, Mapping):
        raise MalformedResponse('pairs is not a mapping')
    is_correct = dict(pairs) == expected
    return (marks if is_correct else 0.0), is_correct


# ================= DISPATCH =================

# response type -> (answer key reader, grader); extended text is never auto-graded
SCORING_RULES = {
    ResponseType.SINGLE_CHOICE: (_expected_single_choice, _grade_single_choice),
    ResponseType.MULTI_CHOICE: (_expected_multi_choice, _grade_multi_choice),
    ResponseType.SHORT_TEXT: (_expected_short_text, _grade_short_text),
    ResponseType.NUMERIC: (_expected_numeric, _grade_numeric),
    ResponseType.BOOLEAN: (_expected_boolean, _grade_boolean),
    ResponseType.ORDERING: (_expected_ordering, _grade_ordering),
    ResponseType.MATCHING: (_expected_matching, _grade_matching),
    ResponseType.EXTENDED_TEXT: None,
}


class ScoringService:
    """Per-question scoring rules"""

    @staticmethod
    def score(question, answer_key, response):
        """
        Score one response

        Args:
            question: mapping with id, response_type, marks, partial_credit
            answer_key: mapping of correctness data, or None
            response: mapping with response_type and response_data, or None

        Returns:
            QuestionScore with marks_awarded in [0, marks]
        """
        if not isinstance(question, Mapping):
            question = {}
        question_id = question.get('id')
        marks = _question_marks(question)
        response_type = ResponseType.parse(question.get('response_type'))
        type_tag = response_type.value if response_type else question.get('response_type')

        def entry(awarded=0.0, correct=False, review=False, correct_answer=None):
            return QuestionScore(
                question_id=question_id,
                marks_awarded=min(max(float(awarded), 0.0), marks),
                marks_possible=marks,
                correct=correct,
                requires_manual_review=review,
                response_type=type_tag,
                correct_answer=correct_answer,
            )

        if response_type is ResponseType.EXTENDED_TEXT:
            sample = answer_key.get('sample_response') if isinstance(answer_key, Mapping) else None
            return entry(review=True, correct_answer=sample)

        rule = SCORING_RULES.get(response_type)
        if rule is None:
            log.warning("Question %s has unknown response type %r", question_id, question.get('response_type'))
            return entry(review=True)

        read_key, grade = rule
        try:
            if not isinstance(answer_key, Mapping):
                raise MissingAnswerKey('no answer key')
            expected, display = read_key(answer_key)
        except MissingAnswerKey as exc:
            log.warning("Question %s needs manual review: %s", question_id, exc)
            return entry(review=True)

        try:
            payload = _response_payload(response, response_type)
            if payload is None:
                return entry(correct_answer=display)
            awarded, is_correct = grade(expected, payload, question, marks)
        except MalformedResponse as exc:
            log.debug("Question %s: malformed response treated as no answer (%s)", question_id, exc)
            return entry(correct_answer=display)

        return entry(awarded, is_correct, correct_answer=display)

    @staticmethod
    def score_all(questions, answer_keys, responses):
        """
        Score every question in order

        Args:
            questions: ordered list of question mappings
            answer_keys: dict question_id -> answer key mapping
            responses: dict question_id -> response mapping

        Returns:
            list of QuestionScore in question order
        """
        return [
            ScoringService.score(q, answer_keys.get(q.get('id')), responses.get(q.get('id')))
            for q in questions
        ]
