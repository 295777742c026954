"""
Configuration for the storefront client.

The backend URL is required; everything else has a development default.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file early so environment variables are available for Config class
load_dotenv(override=True)

# Base directory (where this file lives)
BASE_DIR = Path(__file__).resolve().parent


class Config:
    """Default configuration for the Flask application."""

    # Flask settings
    SECRET_KEY = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
    SESSION_COOKIE_NAME = "storefront_session"
    SESSION_COOKIE_HTTPONLY = True
    ENVIRONMENT = os.environ.get("FLASK_ENV", "development")

    # Debug mode
    DEBUG = os.environ.get("FLASK_DEBUG", "1") == "1"

    # ==========================================================================
    # Storefront API
    # ==========================================================================
    # STOREFRONT_API_URL: root of the REST API (no trailing slash needed)
    # API_TIMEOUT_SECONDS: bound on every request (connect + read)
    # API_RETRY_ATTEMPTS: extra attempts for GET/PUT/DELETE on connect/read
    #   failure. POST and PATCH are never retried.
    # ==========================================================================
    STOREFRONT_API_URL = os.environ.get("STOREFRONT_API_URL", "http://localhost:8000/api")
    API_TIMEOUT_SECONDS = float(os.environ.get("API_TIMEOUT_SECONDS", "10"))
    API_RETRY_ATTEMPTS = int(os.environ.get("API_RETRY_ATTEMPTS", "1"))


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    TESTING = False
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    PERMANENT_SESSION_LIFETIME = 3600  # 1 hour


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    """Testing configuration."""
    DEBUG = False
    TESTING = True
    SECRET_KEY = "test-secret-key"
    STOREFRONT_API_URL = "http://storefront.test/api"
