import logging

import click
from flask import Flask, request, jsonify
from flask_migrate import Migrate
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from config import Config
from models import db
from models.user import User
from routes import health_bp, auth_bp, appointments_bp, customer_bp
from scheduling.errors import SchedulingError
from security.csrf import csrf_protect
from utils.auth_context import load_current_user
from utils.seed import create_admin, grant_role, seed_roles

logger = logging.getLogger(__name__)


def configure_logging(app):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger().setLevel(level)
    app.logger.setLevel(level)


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    configure_logging(app)

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(appointments_bp)
    app.register_blueprint(customer_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    with app.app_context():
        if app.config.get("AUTO_CREATE_TABLES"):
            db.create_all()
        # Seed default roles at startup (safe & idempotent)
        try:
            seed_roles()
        except SQLAlchemyError:
            # tables not migrated yet; `flask db upgrade` then `flask seed-roles`
            db.session.rollback()
            logger.warning("Could not seed roles; run migrations first")

    # user first; the CSRF guard only applies to authenticated callers
    app.before_request(load_current_user)
    app.before_request(csrf_protect)

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_error_handlers(app)
    register_cli(app)

    return app


def register_error_handlers(app):
    @app.errorhandler(SchedulingError)
    def _scheduling_error(exc: SchedulingError):
        if exc.status_code >= 500:
            logger.error("scheduling failure on %s %s: %s", request.method, request.path, exc.message)
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return jsonify(error=exc.description), exc.code

    @app.errorhandler(Exception)
    def _unexpected_error(exc: Exception):
        db.session.rollback()
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify(error="Something went wrong. Please try again."), 500


#-------------------------
def register_cli(app):
    @app.cli.command("seed-roles")
    def seed_roles_command():
        """Create the CUSTOMER and ADMIN roles if missing."""
        added = seed_roles()
        click.echo(f"Roles added: {', '.join(added)}" if added else "Roles already present")

    @app.cli.command("create-admin")
    @click.argument("email")
    @click.option("--name", "full_name", default=None, help="Display name for the back office.")
    @click.password_option()
    def create_admin_command(email, full_name, password):
        """Create a back-office account (or promote an existing one)."""
        user = create_admin(email, password, full_name=full_name)
        click.echo(f"{user.email} is an ADMIN")

    @app.cli.command("make-admin")
    @click.argument("email")
    def make_admin(email):
        """Promote an existing user to ADMIN by email (bootstrap)."""
        user = User.query.filter_by(email=email.strip().lower()).first()
        if not user:
            click.echo("User not found")
            return

        if grant_role(user, "ADMIN"):
            db.session.commit()
        click.echo(f"{user.email} promoted to ADMIN")

#-------------------------


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
