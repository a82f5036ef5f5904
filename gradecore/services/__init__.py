"""
Services Package
"""
from gradecore.services.question_score import QuestionScore
from gradecore.services.scoring_service import ScoringService
from gradecore.services.breakdown_normalizer import normalize_breakdown, normalize_breakdown_entry
from gradecore.services.aggregation_service import AggregationService, median
from gradecore.services.attempt_service import AttemptService
from gradecore.services.finalization_service import FinalizationService, apply_manual_marks
from gradecore.services.review_service import ReviewService
from gradecore.services.reporting_service import ReportingService

__all__ = [
    'QuestionScore',
    'ScoringService',
    'normalize_breakdown',
    'normalize_breakdown_entry',
    'AggregationService',
    'median',
    'AttemptService',
    'FinalizationService',
    'apply_manual_marks',
    'ReviewService',
    'ReportingService',
]
