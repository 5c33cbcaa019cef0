"""
SiteLedger
Configuration classes for the Flask App Factory.

Usage:
    config_name = os.getenv("APP_ENV", "development")
    app.config.from_object(config[config_name])
"""

import os
import secrets

basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))

_DEFAULT_DATA_DIR = os.path.join(basedir, "instance", "data")

# Random key for development; production MUST use a stable env var
_DEV_SECRET = secrets.token_hex(32)


class Config:
    """Base configuration shared across all environments."""

    SECRET_KEY = os.getenv("SECRET_KEY", _DEV_SECRET)
    DEBUG = False
    TESTING = False

    # Storage
    DATA_DIR = os.getenv("SITELEDGER_DATA_DIR", _DEFAULT_DATA_DIR)
    PROJECTS_FILE = "projects.json"

    # Which source owns BOQ completed quantities: "schedule" | "daily_reports"
    PROGRESS_SOURCE = os.getenv("PROGRESS_SOURCE", "schedule")
    DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "$")

    # AI
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
    AI_MODEL = os.getenv("AI_MODEL", "gemini-2.5-flash")
    AI_RATE_LIMIT = os.getenv("AI_RATE_LIMIT", "10/minute")

    # CORS
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    # Uploads (BOQ workbooks, scanned letters)
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(16 * 1024 * 1024)))

    # Flask-Limiter
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG = True


class TestingConfig(Config):
    """Testing environment configuration."""

    TESTING = True
    RATELIMIT_ENABLED = False
    AI_MODEL = "local-stub"
    GEMINI_API_KEY = ""


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG = False
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")  # Must be set explicitly in production

    def __init__(self):
        if not os.getenv("SITELEDGER_DATA_DIR"):
            raise RuntimeError("SITELEDGER_DATA_DIR environment variable is required in production")
        if not os.getenv("SECRET_KEY"):
            raise RuntimeError("SECRET_KEY environment variable must be set in production")


# Configuration mapping: environment name -> config class
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}
