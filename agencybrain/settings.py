"""
Django settings for the AgencyBrain backend.

- Loads secrets from environment variables
- Database via DATABASE_URL (postgres/supabase)
- Auth: Supabase JWT for owners, staff session tokens for the staff portal
"""

import os
from pathlib import Path

import dj_database_url
from dotenv import load_dotenv

# Load .env file if present (for local dev)
if os.environ.get("AGENCYBRAIN_TEST_MODE") != "true":
    load_dotenv()

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent


def _env_flag(name: str, default: str = "False") -> bool:
    return os.environ.get(name, default).lower() in ("true", "1", "yes", "on")


# =============================================================================
# SECURITY SETTINGS (env-driven)
# =============================================================================

SECRET_KEY = os.environ.get(
    "DJANGO_SECRET_KEY",
    "dev-insecure-key-do-not-use-in-production",
)

DEBUG = _env_flag("DJANGO_DEBUG")

ALLOWED_HOSTS = os.environ.get("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",")


# =============================================================================
# APPLICATION DEFINITION
# =============================================================================

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Third-party
    "corsheaders",
    # AgencyBrain apps
    "agencybrain.core",
    "agencybrain.sales_experience",
    "agencybrain.challenge",
    "agencybrain.call_scoring",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "corsheaders.middleware.CorsMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "agencybrain.middleware.timing.RequestTimingMiddleware",
    "agencybrain.middleware.supabase_auth.SupabaseAuthMiddleware",
]

ROOT_URLCONF = "agencybrain.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "agencybrain.wsgi.application"


# =============================================================================
# DATABASE (via DATABASE_URL)
# =============================================================================

# Default to sqlite for initial setup, but real usage requires postgres
DATABASE_URL = os.environ.get(
    "DATABASE_URL",
    f"sqlite:///{BASE_DIR / 'db.sqlite3'}",
)

DATABASES = {
    "default": dj_database_url.parse(
        DATABASE_URL,
        conn_max_age=600,
        conn_health_checks=True,
    )
}


# =============================================================================
# INTERNATIONALIZATION
# =============================================================================

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# Agencies without a configured timezone evaluate unlocks in this zone
DEFAULT_AGENCY_TIMEZONE = os.environ.get("DEFAULT_AGENCY_TIMEZONE", "America/New_York")


# =============================================================================
# STATIC FILES
# =============================================================================

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"


# =============================================================================
# CORS SETTINGS
# =============================================================================

CORS_ALLOWED_ORIGINS = os.environ.get(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:5173",
).split(",")

CORS_ALLOW_CREDENTIALS = True

CORS_ALLOW_HEADERS = [
    "accept",
    "authorization",
    "content-type",
    "x-client-info",
    "x-staff-session",
]


# =============================================================================
# AUTHENTICATION
# =============================================================================

# Supabase signs owner JWTs with the project's JWT secret (HS256)
SUPABASE_JWT_SECRET = os.environ.get("SUPABASE_JWT_SECRET", "")

# Dev-only: skip auth entirely. Views receive no principal.
AUTH_DISABLED = _env_flag("AUTH_DISABLED")

# Header carrying the custom staff-portal session token
STAFF_SESSION_HEADER = os.environ.get("STAFF_SESSION_HEADER", "X-Staff-Session")


# =============================================================================
# EMAIL (Resend)
# =============================================================================

RESEND_API_KEY = os.environ.get("RESEND_API_KEY", "")
RESEND_BASE_URL = os.environ.get("RESEND_BASE_URL", "https://api.resend.com")
EMAIL_FROM_ADDRESS = os.environ.get(
    "EMAIL_FROM_ADDRESS",
    "Agency Brain <info@agencybrain.standardplaybook.com>",
)
# Kill switch: queue rows are still written when false, nothing is sent
EMAIL_SENDING_ENABLED = _env_flag("EMAIL_SENDING_ENABLED")

APP_BASE_URL = os.environ.get("APP_BASE_URL", "https://app.agencybrain.io")


# =============================================================================
# LLM
# =============================================================================
# The LLM client reads its own configuration from the environment
# (see agencybrain.integrations.llm_client.load_config_from_env):
# LLM_DISABLED, OPENAI_API_KEY, AGENCYBRAIN_LLM_MODEL_FAST, ...


# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {module} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
        "agencybrain": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
    },
}
