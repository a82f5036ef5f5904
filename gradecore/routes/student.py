"""
Student Routes
Attempt runtime hooks and the student's own result review
"""
from flask import Blueprint, jsonify
from gradecore.services import AttemptService, ReviewService
from gradecore.utils import require_student, get_current_user_id, get_json_object, bad_request

student_bp = Blueprint('student', __name__)


def _owns(attempt):
    return attempt.student_id == str(get_current_user_id())


def _not_owner():
    return jsonify({
        'error': 'You do not own this attempt',
        'code': 'forbidden',
        'details': {},
    }), 403


@student_bp.route('/attempts', methods=['POST'])
@require_student
def start_attempt():
    """Start a new attempt on an exam"""
    data = get_json_object()
    if data is None:
        return bad_request('request body must be a JSON object')
    exam_id = data.get('exam_id')
    if not exam_id or not isinstance(exam_id, str):
        return bad_request('exam_id is required')

    attempt = AttemptService.start_attempt(exam_id, get_current_user_id())
    return jsonify(attempt.to_dict()), 201


@student_bp.route('/attempts/<attempt_id>/responses/<question_id>', methods=['PUT'])
@require_student
def save_response(attempt_id, question_id):
    """Autosave one answer"""
    attempt = AttemptService.get_attempt(attempt_id)
    if not _owns(attempt):
        return _not_owner()

    data = get_json_object()
    if data is None:
        return bad_request('request body must be a JSON object')
    response = AttemptService.save_response(
        attempt_id,
        question_id,
        data.get('response_type'),
        data.get('response_data'),
    )
    return jsonify(response.to_dict())


@student_bp.route('/attempts/<attempt_id>/submit', methods=['POST'])
@require_student
def submit_attempt(attempt_id):
    """Hand the attempt in for grading"""
    attempt = AttemptService.get_attempt(attempt_id)
    if not _owns(attempt):
        return _not_owner()

    attempt = AttemptService.submit_attempt(attempt_id)
    return jsonify(attempt.to_dict())


@student_bp.route('/attempts/<attempt_id>/review')
@require_student
def review(attempt_id):
    """Review a submitted attempt"""
    attempt = AttemptService.get_attempt(attempt_id)
    if not _owns(attempt):
        return _not_owner()

    return jsonify(ReviewService.attempt_review(attempt_id))
