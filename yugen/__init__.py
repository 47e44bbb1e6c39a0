# yugen/__init__.py

import logging
import os
from logging.handlers import RotatingFileHandler
from flask import Flask, jsonify, request
from .config import config_by_name
from .extensions import cors, jwt, limiter
from .supabase_client import create_supabase_client


def create_app(config_name=None, supabase_client=None):
    app = Flask(__name__)

    # Load configuration based on FLASK_ENV
    env = config_name or os.getenv('FLASK_ENV', 'development')
    app.config.from_object(config_by_name.get(env, config_by_name['development']))

    # One Supabase client per process; handlers read it from app.extensions
    app.extensions["supabase"] = supabase_client or create_supabase_client(app.config)

    origins = [o.strip() for o in app.config["CORS_ORIGIN"].split(",") if o.strip()]
    cors.init_app(app, resources={r"/*": {"origins": origins}}, supports_credentials=True)

    # Initialize JWT and rate limiter
    jwt.init_app(app)
    limiter.init_app(app)

    from yugen.coach.routes import coach_bp
    app.register_blueprint(coach_bp, url_prefix="/coach")

    # Set up file logging outside debug/testing
    if not app.debug and not app.testing:
        log_file = app.config["LOG_FILE"]
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handler = RotatingFileHandler(log_file, maxBytes=100000, backupCount=3)
        handler.setLevel(app.config["LOG_LEVEL"])
        formatter = logging.Formatter(
            '%(asctime)s %(levelname)s %(name)s: %(message)s [in %(pathname)s:%(lineno)d]'
        )
        handler.setFormatter(formatter)
        logging.getLogger("yugen").addHandler(handler)
        app.logger.addHandler(handler)
    logging.getLogger("yugen").setLevel(app.config["LOG_LEVEL"])

    @app.route("/health")
    def health():
        return jsonify({"status": "ok"}), 200

    # Error handlers
    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"error": "Not Found"}), 404

    @app.errorhandler(500)
    def internal_error(error):
        app.logger.error(f"Server Error: {error}, Path: {request.path}")
        return jsonify({"error": "Internal Server Error"}), 500

    return app
