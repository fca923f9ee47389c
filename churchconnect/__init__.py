from flask import Flask, jsonify
from flask_cors import CORS
from dotenv import load_dotenv
from werkzeug.exceptions import HTTPException
import pydantic
import os
from churchconnect.extensions import db, migrate, jwt, limiter
from churchconnect.exceptions import ChurchConnectError
from churchconnect.features import apply_trial_headers
from churchconnect.utils.dates import utcnow
from churchconnect.utils.email import mail
from datetime import timedelta
import logging

# Load environment variables
load_dotenv()


def create_app(test_config=None):
    app = Flask(__name__)

    # Set testing mode from environment variable
    app.config["TESTING"] = os.getenv("FLASK_ENV") == "testing"

    # Configure logging
    logging.basicConfig(level=logging.INFO)
    app.logger.setLevel(logging.INFO)

    # Configure database
    app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv(
        "DATABASE_URL", "postgresql://localhost/churchconnect"
    )
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False

    # Configure JWT
    app.config["JWT_SECRET_KEY"] = os.getenv("JWT_SECRET_KEY", "your-secret-key")
    app.config["JWT_ACCESS_TOKEN_EXPIRES"] = timedelta(days=7)
    app.config["SUPER_ADMIN_TOKEN_EXPIRES"] = timedelta(hours=24)
    app.config["JWT_TOKEN_LOCATION"] = ["headers"]
    app.config["JWT_HEADER_NAME"] = "Authorization"
    app.config["JWT_HEADER_TYPE"] = "Bearer"

    # Email configuration
    app.config["MAIL_SERVER"] = os.getenv("MAIL_SERVER")
    app.config["MAIL_PORT"] = int(os.getenv("MAIL_PORT", 587))
    app.config["MAIL_USE_TLS"] = os.getenv("MAIL_USE_TLS", "true").lower() in ["true", "1", "t"]
    app.config["MAIL_USERNAME"] = os.getenv("MAIL_USERNAME")
    app.config["MAIL_PASSWORD"] = os.getenv("MAIL_PASSWORD")
    app.config["MAIL_DEFAULT_SENDER"] = os.getenv("MAIL_DEFAULT_SENDER", os.getenv("MAIL_USERNAME"))
    app.config["CLIENT_URL"] = os.getenv("CLIENT_URL", "http://localhost:3000")
    app.config["FOLLOW_UP_NOTIFY_EMAIL"] = os.getenv("FOLLOW_UP_NOTIFY_EMAIL")

    # Stripe configuration
    app.config["STRIPE_SECRET_KEY"] = os.getenv("STRIPE_SECRET_KEY")
    app.config["STRIPE_PUBLISHABLE_KEY"] = os.getenv("STRIPE_PUBLISHABLE_KEY", "")
    app.config["STRIPE_WEBHOOK_SECRET"] = os.getenv("STRIPE_WEBHOOK_SECRET")
    for plan_id in ("STARTER", "GROWTH", "ENTERPRISE"):
        key = f"STRIPE_{plan_id}_PRICE_ID"
        app.config[key] = os.getenv(key)

    app.config["TRIAL_LENGTH_DAYS"] = int(os.getenv("TRIAL_LENGTH_DAYS", 30))

    # Rate limiting
    app.config["RATELIMIT_STORAGE_URI"] = os.getenv("LIMITER_DATABASE_URL", "memory://")
    app.config["RATELIMIT_HEADERS_ENABLED"] = True

    if test_config:
        app.config.update(test_config)

    app.config["APP_START_TIME"] = utcnow()

    # Initialize Flask extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    mail.init_app(app)
    limiter.init_app(app)

    # Registers the JWT error loaders
    import churchconnect.auth  # noqa: F401
    import churchconnect.models  # noqa: F401

    register_blueprints(app)
    register_error_handlers(app)
    app.after_request(apply_trial_headers)

    # Set up CORS
    cors_origins = os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5000",
    ).split(",")
    app.logger.info(f"Initializing CORS with origins: {cors_origins}")

    CORS(
        app,
        resources={
            r"/api/*": {"origins": cors_origins},
        },
        supports_credentials=True,
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept", "Stripe-Signature"],
        expose_headers=[
            "Content-Type",
            "Content-Disposition",
            "X-Trial-Status",
            "X-Trial-Days-Remaining",
            "X-Trial-Warning",
        ],
    )

    @app.route("/api/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok"}), 200

    return app


def register_blueprints(app):
    from churchconnect.routes.church_routes import church_bp
    from churchconnect.routes.church_user_routes import church_user_bp
    from churchconnect.routes.member_routes import member_bp, fingerprint_bp
    from churchconnect.routes.attendance_routes import attendance_bp, visitor_checkin_bp
    from churchconnect.routes.visitor_routes import visitor_bp
    from churchconnect.routes.event_routes import event_bp
    from churchconnect.routes.external_checkin_routes import external_checkin_bp
    from churchconnect.routes.follow_up_routes import follow_up_bp
    from churchconnect.routes.report_routes import report_bp, report_admin_bp
    from churchconnect.routes.export_routes import export_bp
    from churchconnect.routes.subscription_routes import subscription_bp
    from churchconnect.routes.super_admin_routes import super_admin_bp

    app.register_blueprint(church_bp, url_prefix="/api/churches")
    app.register_blueprint(church_user_bp, url_prefix="/api/admin/users")
    app.register_blueprint(report_admin_bp, url_prefix="/api/admin")
    app.register_blueprint(member_bp, url_prefix="/api/members")
    app.register_blueprint(fingerprint_bp, url_prefix="/api/fingerprint")
    app.register_blueprint(attendance_bp, url_prefix="/api/attendance")
    app.register_blueprint(visitor_checkin_bp, url_prefix="/api/visitor-checkin")
    app.register_blueprint(visitor_bp, url_prefix="/api/visitors")
    app.register_blueprint(event_bp, url_prefix="/api/events")
    app.register_blueprint(external_checkin_bp, url_prefix="/api/external-checkin")
    app.register_blueprint(follow_up_bp, url_prefix="/api/follow-up")
    app.register_blueprint(report_bp, url_prefix="/api/reports")
    app.register_blueprint(export_bp, url_prefix="/api/export")
    app.register_blueprint(subscription_bp, url_prefix="/api/subscriptions")
    app.register_blueprint(super_admin_bp, url_prefix="/api/super-admin")


def register_error_handlers(app):
    @app.errorhandler(ChurchConnectError)
    def handle_app_error(e):
        db.session.rollback()
        if e.status_code >= 500:
            app.logger.error(f"{type(e).__name__}: {e.message}")
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(pydantic.ValidationError)
    def handle_schema_error(e):
        details = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        return jsonify({"error": "Validation error", "details": details}), 400

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        db.session.rollback()
        app.logger.exception(f"Unhandled error: {str(e)}")
        return jsonify({"error": "An unexpected error occurred"}), 500
