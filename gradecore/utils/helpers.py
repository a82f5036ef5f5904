"""
Helper Functions
Utility functions used across the application
"""
from datetime import datetime, timezone
from flask import session, jsonify, current_app, request
from functools import wraps
import uuid
import pytz


def now_utc():
    """Get current UTC timestamp"""
    return datetime.now(timezone.utc)


def generate_id():
    """Generate a new string primary key"""
    return str(uuid.uuid4())


def ensure_utc(dt):
    """Attach UTC to naive datetimes (SQLite hands them back naive)"""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=pytz.utc)
    return dt


def to_local_time(utc_dt, tz_name=None):
    """Convert a UTC datetime to the configured display timezone"""
    if not utc_dt:
        return None
    tz = pytz.timezone(tz_name or current_app.config['TIMEZONE'])
    return ensure_utc(utc_dt).astimezone(tz)


def isoformat(dt):
    """ISO-8601 string for a datetime, or None"""
    return dt.isoformat() if dt else None


def get_current_user_id():
    """Get id of the user attached to the session"""
    return session.get('user_id')


def require_role(*roles):
    """
    Decorator to require one of the given session roles
    Responds with JSON 403 instead of redirecting (API blueprints)
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if session.get('role') not in roles:
                return jsonify({
                    'error': 'Access denied',
                    'code': 'forbidden',
                    'details': {'required_roles': list(roles)},
                }), 403
            return f(*args, **kwargs)
        return decorated_function
    return decorator


require_admin = require_role('admin')
require_student = require_role('student')
require_parent = require_role('parent', 'admin')


def bad_request(message):
    """JSON 400 in the same shape as GradingError responses"""
    return jsonify({'error': message, 'code': 'bad_request', 'details': {}}), 400


def get_json_object():
    """Request body as a dict ({} when empty), or None when it is not a JSON object"""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None
