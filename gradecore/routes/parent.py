"""
Parent Routes
Read-only progress and review for a linked student
"""
from flask import Blueprint, jsonify
from gradecore.services import ReviewService, ReportingService
from gradecore.utils import require_parent

parent_bp = Blueprint('parent', __name__)


@parent_bp.route('/students/<student_id>/progress')
@require_parent
def progress(student_id):
    """Progress overview across evaluated exams"""
    return jsonify(ReportingService.student_progress(student_id))


@parent_bp.route('/attempts/<attempt_id>/review')
@require_parent
def review(attempt_id):
    """Same review the student sees; no answer keys"""
    return jsonify(ReviewService.attempt_review(attempt_id))
