"""
Test settings for AgencyBrain.

Overrides the main settings to:
1. Skip loading .env file (no external secrets needed for tests)
2. Use SQLite in-memory database (fast, no network)
3. Force LLM and email side effects off

Usage:
    pytest uses this automatically via pyproject.toml:
    [tool.pytest.ini_options]
    DJANGO_SETTINGS_MODULE = "agencybrain.settings_test"
"""

import os

# Prevent dotenv from loading external DATABASE_URL
os.environ["AGENCYBRAIN_TEST_MODE"] = "true"
os.environ["LLM_DISABLED"] = "true"

# Import everything from base settings AFTER setting test mode
from agencybrain.settings import *  # noqa: F401, F403, E402

# =============================================================================
# TEST DATABASE CONFIGURATION
# =============================================================================

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

# =============================================================================
# TEST-SPECIFIC SETTINGS
# =============================================================================

DEBUG = False

SUPABASE_JWT_SECRET = "test-jwt-secret-with-at-least-32-bytes!!"
AUTH_DISABLED = False

EMAIL_SENDING_ENABLED = False
RESEND_API_KEY = "re_test_key"

PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]
