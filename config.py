import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to this file as autoshop.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "autoshop.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Tables are managed by Flask-Migrate outside of tests
    AUTO_CREATE_TABLES = False

    SHOP_NAME = os.getenv("SHOP_NAME", "Auto Shop")

    # Session cookie name for our auth token
    AUTH_COOKIE_NAME = "autoshop_session"

    # 8 hours session lifetime
    SESSION_LIFETIME_SECONDS = 8 * 60 * 60

    # Idle timeout: 30 minutes
    IDLE_TIMEOUT_SECONDS = 30 * 60

    # Session/cookie security defaults
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true"

    # Double-submit CSRF token (cookie readable by the SPA, echoed in a header)
    CSRF_COOKIE_NAME = "csrf_token"
    CSRF_HEADER_NAME = "X-CSRF-Token"

    # Appointment lifecycle: False lets admins move any status to any status
    STRICT_STATUS_TRANSITIONS = os.getenv("STRICT_STATUS_TRANSITIONS", "false").lower() == "true"

    # Admin listing pagination
    APPOINTMENTS_PAGE_SIZE = 20
    APPOINTMENTS_MAX_PAGE_SIZE = 100

    # Password rules for customer accounts
    PASSWORD_MIN_LEN = 8
    PASSWORD_MAX_LEN = 128

    # Email (SMTP)
    SMTP_HOST = os.getenv("SMTP_HOST")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME = os.getenv("SMTP_USERNAME")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
    SMTP_FROM_EMAIL = os.getenv("SMTP_FROM_EMAIL")
    SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "true").lower() == "true"

    # Shop inbox that receives new booking notices
    NOTIFY_EMAIL = os.getenv("NOTIFY_EMAIL")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Basic app settings
    DEBUG = False


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    AUTO_CREATE_TABLES = True
    SMTP_HOST = None
    NOTIFY_EMAIL = None
    STRICT_STATUS_TRANSITIONS = False
    LOG_LEVEL = "WARNING"
