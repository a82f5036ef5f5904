"""
WSGI entry point for the grading service
gunicorn: gunicorn -w 1 --threads 8 wsgi:app
"""
import os
from gradecore import create_app
from gradecore.extensions import socketio

app = create_app()

if __name__ == '__main__':
    socketio.run(
        app,
        host=os.getenv('HOST', '0.0.0.0'),
        port=int(os.getenv('PORT', 5000)),
        debug=app.config.get('DEBUG', False),
        use_reloader=False,
        allow_unsafe_werkzeug=app.config.get('DEBUG', False)
    )
