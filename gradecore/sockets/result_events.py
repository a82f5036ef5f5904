"""
Socket.IO Event Handlers
Live notifications when an attempt's result is finalized
"""
import logging

from flask_socketio import join_room, leave_room
from gradecore.extensions import socketio

log = logging.getLogger(__name__)


def attempt_room(attempt_id):
    return f'attempt_{attempt_id}'


def notify_result_finalized(result):
    """Push the new totals to everyone watching the attempt"""
    socketio.emit(
        'result_finalized',
        {
            'attempt_id': result.attempt_id,
            'total_score': result.total_score,
            'max_score': result.max_score,
            'percentage': result.percentage,
            'passed': result.passed,
        },
        room=attempt_room(result.attempt_id)
    )
    log.debug("Emitted result_finalized for attempt %s", result.attempt_id)


def register_socket_events():
    """Register all Socket.IO event handlers"""

    @socketio.on('watch_attempt')
    def watch_attempt(data):
        """Review/marking screen subscribes to an attempt"""
        attempt_id = (data or {}).get('attempt_id')
        if not attempt_id:
            return {'ok': False, 'error': 'attempt_id is required'}
        join_room(attempt_room(attempt_id))
        log.debug("Client joined room %s", attempt_room(attempt_id))
        return {'ok': True}

    @socketio.on('unwatch_attempt')
    def unwatch_attempt(data):
        attempt_id = (data or {}).get('attempt_id')
        if attempt_id:
            leave_room(attempt_room(attempt_id))
        return {'ok': True}
