"""
Breakdown Normalizer
Reads stored breakdown entries in either field-naming scheme

Stored breakdowns come in two shapes:
    canonical: marks_awarded / marks_possible / correct
    legacy:    score / max_score / is_correct
Every read path goes through normalize_breakdown() so consumers only ever
see QuestionScore. Never raises; missing or broken fields become 0 / False.
"""
from collections.abc import Mapping
import math

from gradecore.services.question_score import QuestionScore

# canonical name -> legacy name
FIELD_ALIASES = {
    'marks_awarded': 'score',
    'marks_possible': 'max_score',
    'correct': 'is_correct',
}


def _first_present(raw, field):
    """Canonical value when present, else the legacy one"""
    value = raw.get(field)
    if value is None:
        value = raw.get(FIELD_ALIASES[field])
    return value


def safe_float(value, default=0.0):
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def safe_bool(value, default=False):
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ('true', '1', 'yes')
    if isinstance(value, (int, float)):
        return value == 1
    return default


def safe_str(value):
    if value is None or isinstance(value, (Mapping, list)):
        return None
    return str(value)


def normalize_breakdown_entry(raw):
    """
    Convert one raw breakdown entry to a QuestionScore

    Args:
        raw: stored entry (any shape, possibly not even a dict)

    Returns:
        QuestionScore
    """
    if isinstance(raw, QuestionScore):
        return raw
    if not isinstance(raw, Mapping):
        raw = {}

    return QuestionScore(
        question_id=safe_str(raw.get('question_id')),
        marks_awarded=safe_float(_first_present(raw, 'marks_awarded')),
        marks_possible=safe_float(_first_present(raw, 'marks_possible')),
        correct=safe_bool(_first_present(raw, 'correct')),
        requires_manual_review=safe_bool(raw.get('requires_manual_review')),
        response_type=safe_str(raw.get('response_type')),
        correct_answer=raw.get('correct_answer'),
        feedback=safe_str(raw.get('feedback') or raw.get('teacher_feedback')),
    )


def normalize_breakdown(raw_entries):
    """Normalize a whole stored breakdown; anything but a list reads as empty"""
    if not isinstance(raw_entries, (list, tuple)):
        return []
    return [normalize_breakdown_entry(raw) for raw in raw_entries]
