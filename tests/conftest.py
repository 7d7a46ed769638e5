"""
Pytest configuration for AgencyBrain tests.

Provides the account graph most API tests need: an agency, a staff user with
a live session, an owner profile with a signed Supabase JWT, and auth header
helpers for the Django test client.
"""

import os
from datetime import timedelta
from uuid import uuid4

import django
import pytest


def pytest_configure():
    """Configure Django settings before tests run."""
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "agencybrain.settings_test")
    django.setup()


@pytest.fixture
def client():
    """Django test client fixture."""
    from django.test import Client
    return Client()


# =============================================================================
# ACCOUNTS
# =============================================================================


@pytest.fixture
def agency():
    from agencybrain.core.models import Agency

    return Agency.objects.create(name="Test Agency", timezone="America/New_York")


@pytest.fixture
def other_agency():
    from agencybrain.core.models import Agency

    return Agency.objects.create(name="Other Agency", timezone="America/Chicago")


@pytest.fixture
def team_member(agency):
    from agencybrain.core.enums import TeamMemberRole
    from agencybrain.core.models import TeamMember

    return TeamMember.objects.create(
        agency=agency,
        name="Sam Seller",
        email="sam@agency.test",
        role=TeamMemberRole.SALES,
    )


@pytest.fixture
def staff_user(agency, team_member):
    from agencybrain.core.models import StaffUser

    return StaffUser.objects.create(
        agency=agency,
        team_member=team_member,
        display_name="Sam",
        email="sam.login@agency.test",
    )


@pytest.fixture
def staff_session(staff_user):
    from django.utils import timezone

    from agencybrain.core.models import StaffSession

    return StaffSession.objects.create(
        staff_user=staff_user,
        session_token=f"staff-{uuid4().hex}",
        expires_at=timezone.now() + timedelta(hours=8),
    )


@pytest.fixture
def staff_headers(staff_session):
    return {"X-Staff-Session": staff_session.session_token}


@pytest.fixture
def owner_profile(agency):
    from agencybrain.core.enums import ProfileRole
    from agencybrain.core.models import Profile

    return Profile.objects.create(
        supabase_uid=str(uuid4()),
        email="owner@agency.test",
        full_name="Olivia Owner",
        agency=agency,
        role=ProfileRole.OWNER,
    )


@pytest.fixture
def owner_headers(owner_profile):
    from tests.fixtures import make_supabase_jwt

    token = make_supabase_jwt(owner_profile.supabase_uid, email=owner_profile.email)
    return {"Authorization": f"Bearer {token}"}


# =============================================================================
# LLM
# =============================================================================


@pytest.fixture(autouse=True)
def reset_llm_client():
    """Drop the cached default LLM client around each test."""
    from agencybrain.integrations.llm_client import reset_default_client

    reset_default_client()
    yield
    reset_default_client()
