import os
import secrets
import sqlite3
from datetime import timedelta

from dotenv import load_dotenv
from flask import Flask, Response, g, jsonify, request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager
from flask_socketio import SocketIO
from flask_sqlalchemy import SQLAlchemy
from flask_wtf import CSRFProtect
from flask_wtf.csrf import CSRFError
from sqlalchemy import event
from sqlalchemy.engine import Engine
from werkzeug.exceptions import HTTPException
from werkzeug.security import generate_password_hash

load_dotenv()
db = SQLAlchemy()
login_manager = LoginManager()
login_manager.login_view = "auth.login"
storage_uri = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
limiter = Limiter(key_func=get_remote_address, storage_uri=storage_uri)
socketio = None

DEFAULT_INVOICES_PER_PAGE = 6


def _get_bool_env(var_name: str, default: bool = False) -> bool:
    """Return a boolean environment variable value."""

    value = os.getenv(var_name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(var_name: str, default: int) -> int:
    """Return a positive integer environment variable value."""

    value = os.getenv(var_name)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


DEFAULT_CSP = (
    "default-src 'self'; "
    "img-src 'self' data:; "
    "connect-src 'self' wss:; "
    "frame-ancestors 'self'; "
    "form-action 'self'; "
    "object-src 'none'; "
    "base-uri 'self'"
)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """Have SQLite enforce the invoice → customer reference."""

    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@login_manager.user_loader
def load_user(user_id):
    """Retrieve a user by ID for Flask-Login."""
    from dashboard.models import User

    return db.session.get(User, int(user_id))


def create_admin_user():
    """Ensure an admin user exists for the application."""
    from dashboard.models import User

    db.create_all()

    if User.query.count() == 0:
        admin_email = os.getenv("ADMIN_EMAIL")
        raw_password = os.getenv("ADMIN_PASS")
        if raw_password is None:
            raise RuntimeError("ADMIN_PASS environment variable not set")
        admin_user = User(
            name="Admin",
            email=admin_email,
            password=generate_password_hash(raw_password),
            active=True,
        )
        db.session.add(admin_user)
        db.session.commit()
        print("Admin user created.")


def _json_error(error: HTTPException):
    """Render HTTP errors as JSON since pages are rendered client side."""

    return jsonify({"error": error.description}), error.code


def create_app(args: list):
    """Application factory used by Flask."""
    global socketio
    app = Flask(__name__)
    app.config["SECRET_KEY"] = os.getenv("SECRET_KEY")
    default_secure_cookies = "--demo" not in args
    session_cookie_secure = _get_bool_env(
        "SESSION_COOKIE_SECURE", default=default_secure_cookies
    )
    app.config["ENFORCE_HTTPS"] = _get_bool_env("ENFORCE_HTTPS", default=False)
    app.config.update(
        SESSION_COOKIE_SECURE=session_cookie_secure,
        REMEMBER_COOKIE_SECURE=session_cookie_secure,
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE="Lax",
        PERMANENT_SESSION_LIFETIME=timedelta(minutes=30),
    )
    app.config["INVOICES_PER_PAGE"] = _get_int_env(
        "INVOICES_PER_PAGE", DEFAULT_INVOICES_PER_PAGE
    )

    # Absolute paths keep the database location stable when the working
    # directory changes after the app is created (the test suite does this).
    base_dir = os.getcwd()
    default_db_path = os.path.join(base_dir, "dashboard.db")
    db_path = os.getenv("DATABASE_PATH", default_db_path)
    if os.path.isdir(db_path):
        db_path = os.path.join(db_path, "dashboard.db")

    os.makedirs(os.path.dirname(db_path), exist_ok=True)
    app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{db_path}"
    app.config["DEMO"] = "--demo" in args

    db.init_app(app)
    from flask_migrate import Migrate

    Migrate(app, db)
    login_manager.init_app(app)
    app.config["RATELIMIT_ENABLED"] = _get_bool_env(
        "RATELIMIT_ENABLED", default=not app.config.get("TESTING", False)
    )
    limiter.init_app(app)
    socketio = SocketIO(app)

    from dashboard.signals import DEFAULT_CACHE_SIZE, init_view_invalidation

    app.config["LIST_VIEW_CACHE_SIZE"] = _get_int_env(
        "LIST_VIEW_CACHE_SIZE", DEFAULT_CACHE_SIZE
    )

    init_view_invalidation(app, socketio)

    @app.before_request
    def set_csp_nonce():
        """Generate a nonce for inline scripts allowed by the CSP."""

        g.csp_nonce = secrets.token_urlsafe(16)

    @app.after_request
    def apply_security_headers(response):
        """Attach standard security headers to every response."""
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        if request.is_secure or app.config.get("ENFORCE_HTTPS", False):
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        response.headers.setdefault(
            "Content-Security-Policy",
            app.config.get("CONTENT_SECURITY_POLICY", DEFAULT_CSP),
        )
        return response

    @app.before_request
    def block_http_options():
        """Return a 405 for HTTP OPTIONS requests to reduce information leakage."""
        if request.method == "OPTIONS":
            return Response(status=405)

    for code in (400, 401, 404, 405, 429):
        app.register_error_handler(code, _json_error)

    with app.app_context():
        # Create the schema on start so the app runs before migrations do.
        from . import models  # noqa: F401

        db.create_all()

        from dashboard.routes.auth_routes import auth
        from dashboard.routes.customer_routes import customer
        from dashboard.routes.invoice_routes import invoice
        from dashboard.routes.main_routes import main

        app.register_blueprint(auth, url_prefix="/auth")
        app.register_blueprint(main)
        app.register_blueprint(customer)
        app.register_blueprint(invoice)

        CSRFProtect(app)

        @app.errorhandler(CSRFError)
        def handle_csrf_error(error):
            """Explain CSRF failures to JSON clients."""
            return jsonify({"error": error.description}), 400

    return app, socketio
