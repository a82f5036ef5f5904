"""
Application Factory
Creates and configures the Flask application
"""
import logging

from flask import Flask, jsonify
from gradecore.config import get_config
from gradecore.errors import GradingError
from gradecore.extensions import db, socketio

log = logging.getLogger(__name__)


def create_app(config_name=None):
    """
    Application factory pattern
    Creates and configures Flask app
    """
    app = Flask(__name__)

    # Load configuration
    if config_name:
        from gradecore.config import config
        app.config.from_object(config[config_name])
    else:
        app.config.from_object(get_config())

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )

    # Initialize extensions
    db.init_app(app)
    socketio.init_app(
        app,
        cors_allowed_origins=app.config['SOCKETIO_CORS_ALLOWED_ORIGINS'],
        async_mode=app.config['SOCKETIO_ASYNC_MODE']
    )

    # Register blueprints
    from gradecore.routes import student_bp, admin_bp, parent_bp

    app.register_blueprint(student_bp, url_prefix='/student')
    app.register_blueprint(admin_bp, url_prefix='/admin')
    app.register_blueprint(parent_bp, url_prefix='/parent')

    @app.errorhandler(GradingError)
    def handle_grading_error(error):
        if error.status_code >= 500:
            log.error("%s: %s", error.code, error.message)
        return jsonify(error.to_dict()), error.status_code

    # Register Socket.IO events
    from gradecore.sockets import register_socket_events
    with app.app_context():
        register_socket_events()

    # Create database tables
    with app.app_context():
        db.create_all()
        log.info('Database tables created/verified')

    return app
