"""
Aggregation Service
Attempt totals and exam-wide statistics
"""
from collections.abc import Mapping

from gradecore.services.breakdown_normalizer import normalize_breakdown_entry, safe_float, safe_bool

DEFAULT_PASS_MARK_PERCENTAGE = 50.0


def median(values):
    """
    Median of a sequence of numbers

    Even-length input averages the two central values (rounded to 2 dp).
    Returns None for empty input.
    """
    ordered = sorted(values)
    if not ordered:
        return None
    mid = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return round((ordered[mid - 1] + ordered[mid]) / 2, 2)
    return ordered[mid]


def mean(values):
    """Arithmetic mean rounded to 2 dp, None for empty input"""
    values = list(values)
    if not values:
        return None
    return round(sum(values) / len(values), 2)


def percentage_of(total, maximum):
    return round(total / maximum * 100, 2) if maximum > 0 else 0.0


class AggregationService:
    """Reduce per-question scores and result records"""

    @staticmethod
    def aggregate(scores, pass_mark_percentage=None):
        """
        Totals for one attempt

        Entries still pending manual review count with their current score.

        Args:
            scores: QuestionScore objects or raw breakdown entries
            pass_mark_percentage: threshold, default 50 when unset

        Returns:
            dict with total_score, max_score, percentage, passed,
            pass_mark_percentage
        """
        threshold = pass_mark_percentage
        if threshold is None:
            threshold = DEFAULT_PASS_MARK_PERCENTAGE
        entries = [normalize_breakdown_entry(s) for s in scores]

        total = round(sum(e.marks_awarded for e in entries), 2)
        maximum = round(sum(e.marks_possible for e in entries), 2)
        percentage = percentage_of(total, maximum)

        return {
            'total_score': total,
            'max_score': maximum,
            'percentage': percentage,
            'passed': percentage >= threshold,
            'pass_mark_percentage': float(threshold),
        }

    @staticmethod
    def summarize(results):
        """
        Statistics across many results of one exam

        Args:
            results: mappings with total_score, percentage, passed

        Returns:
            dict with count, mean/median score and percentage (None when
            there are no results), pass_count and fail_count
        """
        rows = [r for r in results if isinstance(r, Mapping)]
        scores = [safe_float(r.get('total_score')) for r in rows]
        percentages = [safe_float(r.get('percentage')) for r in rows]
        pass_count = sum(1 for r in rows if safe_bool(r.get('passed')))

        return {
            'count': len(rows),
            'mean_score': mean(scores),
            'median_score': median(scores),
            'mean_percentage': mean(percentages),
            'median_percentage': median(percentages),
            'pass_count': pass_count,
            'fail_count': len(rows) - pass_count,
        }
