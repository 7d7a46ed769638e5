#!/usr/bin/env python
"""
Run Django management commands for the AgencyBrain backend.

The project has no manage.py at the root; this script stands in for it and
lets values in .env win over stale shell exports for the connection and
secret settings below.

Usage:
    python scripts/run_manage.py <command> [args...]

Examples:
    python scripts/run_manage.py migrate
    python scripts/run_manage.py send_sales_lesson_reminders --no-process
    python scripts/run_manage.py process_sales_experience_emails
    python scripts/run_manage.py runserver
"""

import os
import sys
from pathlib import Path

from dotenv import dotenv_values

PROJECT_ROOT = Path(__file__).resolve().parent.parent
os.chdir(PROJECT_ROOT)
sys.path.insert(0, str(PROJECT_ROOT))

# .env always wins for these
OVERRIDE_KEYS = ("DATABASE_URL", "SUPABASE_JWT_SECRET", "RESEND_API_KEY")


def apply_env_overrides():
    env_path = PROJECT_ROOT / ".env"
    if not env_path.exists():
        return

    values = dotenv_values(env_path)
    for key in OVERRIDE_KEYS:
        value = values.get(key)
        if not value:
            continue
        current = os.environ.get(key)
        if current and current != value:
            print(f"Overriding {key} from shell with value from .env", file=sys.stderr)
        os.environ[key] = value


def main():
    apply_env_overrides()
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "agencybrain.settings")

    from django.core.management import execute_from_command_line

    execute_from_command_line(["manage.py"] + sys.argv[1:])


if __name__ == "__main__":
    main()
