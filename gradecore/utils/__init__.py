"""
Utils Package
"""
from gradecore.utils.helpers import (
    now_utc,
    generate_id,
    ensure_utc,
    to_local_time,
    isoformat,
    get_current_user_id,
    require_role,
    require_admin,
    require_student,
    require_parent,
    bad_request,
    get_json_object
)

__all__ = [
    'now_utc',
    'generate_id',
    'ensure_utc',
    'to_local_time',
    'isoformat',
    'get_current_user_id',
    'require_role',
    'require_admin',
    'require_student',
    'require_parent',
    'bad_request',
    'get_json_object'
]
