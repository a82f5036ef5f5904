"""
Admin Routes
Marking queue, manual marks, finalization and exam reporting
"""
from flask import Blueprint, request, jsonify
from gradecore.services import FinalizationService, ReviewService, ReportingService
from gradecore.sockets import notify_result_finalized
from gradecore.utils import require_admin, get_current_user_id, get_json_object, bad_request

admin_bp = Blueprint('admin', __name__)


@admin_bp.route('/marking/queue')
@require_admin
def marking_queue():
    """Submitted attempts awaiting finalization"""
    exam_id = request.args.get('exam_id')
    return jsonify({'attempts': ReviewService.marking_queue(exam_id)})


@admin_bp.route('/attempts/<attempt_id>/marking')
@require_admin
def attempt_marking(attempt_id):
    """Marking view with answer keys"""
    return jsonify(ReviewService.marking_view(attempt_id))


@admin_bp.route('/attempts/<attempt_id>/marks/<question_id>', methods=['PUT'])
@require_admin
def save_mark(attempt_id, question_id):
    """Save a manual mark for one question"""
    data = get_json_object()
    if data is None:
        return bad_request('request body must be a JSON object')
    mark = dict(data)
    mark['question_id'] = question_id

    saved = FinalizationService.save_manual_mark(
        attempt_id,
        mark,
        marked_by=get_current_user_id()
    )
    return jsonify(saved.to_dict())


@admin_bp.route('/attempts/<attempt_id>/finalize', methods=['POST'])
@require_admin
def finalize(attempt_id):
    """
    Finalize an attempt
    Optional body: {"manual_marks": [{"question_id", "score", "feedback"}]}
    """
    data = get_json_object()
    if data is None:
        return bad_request('request body must be a JSON object')
    manual_marks = data.get('manual_marks') or []
    if not isinstance(manual_marks, list):
        return bad_request('manual_marks must be a list')

    result = FinalizationService.finalize(
        attempt_id,
        manual_marks=manual_marks,
        marked_by=get_current_user_id()
    )
    notify_result_finalized(result)
    return jsonify(result.to_dict())


@admin_bp.route('/exams/<exam_id>/summary')
@require_admin
def exam_summary(exam_id):
    """Attempt counts and score statistics"""
    return jsonify(ReportingService.exam_summary(exam_id))
