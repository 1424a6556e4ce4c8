import click
from flask import Flask, request, g, jsonify
from flask_migrate import Migrate
from sqlalchemy import inspect
from werkzeug.exceptions import HTTPException

from config import Config
from models import db
from routes import health_bp, schedules_bp, reservations_bp
from security.csrf import require_csrf
from utils.auth_context import load_current_user
from utils.errors import BookingError
from utils.seed import seed_roles


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(schedules_bp)
    app.register_blueprint(reservations_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    with app.app_context():
        if app.config.get("TESTING"):
            db.create_all()
        # Seed default roles at startup (safe & idempotent); skipped until
        # `flask db upgrade` has created the tables
        if inspect(db.engine).has_table("roles"):
            seed_roles()

    @app.before_request
    def _load_user():
        load_current_user()

    CSRF_EXEMPT_PATHS = {
        "/health",
        "/csrf-token",
    }

    @app.before_request
    def _csrf_protect():
        # Only protect state-changing requests
        if request.method in ("POST", "PUT", "PATCH", "DELETE"):
            if request.path in CSRF_EXEMPT_PATHS:
                return None

            # Only enforce CSRF if user is already authenticated (cookie session)
            if getattr(g, "user", None) is not None:
                failure = require_csrf()
                if failure:
                    return failure

    @app.errorhandler(BookingError)
    def _booking_error(exc):
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(Exception)
    def _unexpected_error(exc):
        if isinstance(exc, HTTPException):
            return exc
        db.session.rollback()
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify(error="Internal server error"), 500

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_cli(app)

    return app

#-------------------------
from models.store import Store
from models.user import User
from security.session import create_session
from utils.seed import get_or_create_role


def _get_or_create_user(email: str) -> User:
    email = email.strip().lower()
    user = User.query.filter_by(email=email).first()
    if not user:
        user = User(email=email)
        user.roles.append(get_or_create_role("USUARIO"))
        db.session.add(user)
        db.session.flush()
    return user


def register_cli(app):
    @app.cli.command("make-store-owner")
    @click.argument("email")
    @click.argument("store_name")
    def make_store_owner(email, store_name):
        """Create (or reuse) a user and make them owner of a new store."""
        user = _get_or_create_user(email)
        if user.store is not None:
            print(f"{user.email} already owns store {user.store.name!r}")
            return

        owner_role = get_or_create_role("STORE_OWNER")
        if owner_role not in user.roles:
            user.roles.append(owner_role)
        store = Store(name=store_name.strip(), owner=user)
        db.session.add(store)
        db.session.commit()

        print(f"{user.email} now owns store {store.name!r} (id={store.id})")

    @app.cli.command("make-super-admin")
    @click.argument("email")
    def make_super_admin(email):
        """Promote a user to SUPER_ADMIN by email (bootstrap)."""
        user = _get_or_create_user(email)
        admin_role = get_or_create_role("SUPER_ADMIN")
        if admin_role not in user.roles:
            user.roles.append(admin_role)
        db.session.commit()

        print(f"{user.email} promoted to SUPER_ADMIN")

    @app.cli.command("issue-session")
    @click.argument("email")
    def issue_session(email):
        """Print a session token for an existing user (local testing)."""
        user = User.query.filter_by(email=email.strip().lower()).first()
        if not user:
            print("User not found")
            return
        token = create_session(user.id)
        print(f"{app.config['AUTH_COOKIE_NAME']}={token}")

#-------------------------


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
