"""
Sockets Package
"""
from gradecore.sockets.result_events import register_socket_events, notify_result_finalized

__all__ = ['register_socket_events', 'notify_result_finalized']
