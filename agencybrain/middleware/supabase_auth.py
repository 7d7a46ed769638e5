"""
Dual-mode authentication middleware.

The platform has two kinds of callers:

1. Owners / managers signed in with Supabase Auth. They send
   `Authorization: Bearer <supabase JWT>`. The JWT is validated with the
   project's JWT secret and its `sub` claim resolves a Profile.
2. Staff-portal users. They hold a custom session token issued by the staff
   login, sent either in the `X-Staff-Session` header or as a Bearer token
   that is not a JWT. The token resolves a valid, unexpired StaffSession.

The resolved principal is attached to the request as `request.auth_context`.

Excluded paths (no auth required):
- /health/ - Health check endpoint
- Admin paths if in dev mode
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import wraps
from typing import TYPE_CHECKING, Literal
from uuid import UUID

import jwt
from django.conf import settings
from django.http import JsonResponse
from django.utils import timezone

if TYPE_CHECKING:
    from django.http import HttpRequest, HttpResponse

    from agencybrain.core.models import Profile, StaffUser

logger = logging.getLogger(__name__)


# Paths that don't require authentication
AUTH_EXEMPT_PATHS = [
    "/health/",
]

# Paths that are exempt in development only
DEV_EXEMPT_PATHS = [
    "/admin/",
]

AuthMode = Literal["owner", "staff"]


class AuthenticationError(Exception):
    """Raised when authentication fails."""

    pass


@dataclass(frozen=True)
class AuthContext:
    """
    The authenticated principal for a request.

    Exactly one of profile / staff_user is set, matching mode.
    """

    mode: AuthMode
    agency_id: UUID | None
    profile: Profile | None = None
    staff_user: StaffUser | None = None
    staff_member_id: UUID | None = None
    is_manager: bool = False

    @property
    def is_staff(self) -> bool:
        return self.mode == "staff"

    @property
    def is_owner(self) -> bool:
        return self.mode == "owner"


def looks_like_jwt(token: str) -> bool:
    """Supabase JWTs have three dot-separated segments."""
    return token.count(".") == 2


class SupabaseAuthMiddleware:
    """
    Middleware to authenticate requests with a Supabase JWT or a staff session.

    Returns 401 for unauthenticated requests to protected endpoints.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        request.auth_context = None

        # Skip auth for exempt paths
        if self._is_exempt_path(request.path):
            return self.get_response(request)

        # Preflight requests carry no credentials
        if request.method == "OPTIONS":
            return self.get_response(request)

        # Skip auth if AUTH_DISABLED is true (dev mode)
        if getattr(settings, "AUTH_DISABLED", False):
            return self.get_response(request)

        staff_header = getattr(settings, "STAFF_SESSION_HEADER", "X-Staff-Session")
        staff_token = request.headers.get(staff_header, "").strip()
        auth_header = request.headers.get("Authorization", "")

        try:
            if staff_token:
                request.auth_context = self._authenticate_staff_session(staff_token)
            elif auth_header.startswith("Bearer "):
                token = auth_header[7:].strip()
                if looks_like_jwt(token):
                    request.auth_context = self._authenticate_jwt(token)
                else:
                    request.auth_context = self._authenticate_staff_session(token)
            else:
                return self._unauthorized_response("Missing or invalid Authorization header")
        except AuthenticationError as e:
            logger.warning("Authentication failed: %s", str(e))
            return self._unauthorized_response(str(e))

        return self.get_response(request)

    def _is_exempt_path(self, path: str) -> bool:
        """Check if the path is exempt from authentication."""
        for exempt in AUTH_EXEMPT_PATHS:
            if path.startswith(exempt):
                return True

        # Dev-only exemptions
        if settings.DEBUG:
            for exempt in DEV_EXEMPT_PATHS:
                if path.startswith(exempt):
                    return True

        return False

    def _authenticate_jwt(self, token: str) -> AuthContext:
        """
        Validate a Supabase JWT and return the owner-mode context.

        Raises AuthenticationError if validation fails.
        """
        jwt_secret = getattr(settings, "SUPABASE_JWT_SECRET", "")
        if not jwt_secret:
            raise AuthenticationError("SUPABASE_JWT_SECRET not configured")

        try:
            # Supabase uses HS256 by default
            payload = jwt.decode(
                token,
                jwt_secret,
                algorithms=["HS256"],
                audience="authenticated",
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise AuthenticationError(f"Invalid token: {e}")

        supabase_uid = payload.get("sub")
        if not supabase_uid:
            raise AuthenticationError("Token missing 'sub' claim")

        from agencybrain.core.models import Profile

        try:
            profile = Profile.objects.select_related("agency").get(supabase_uid=supabase_uid)
        except Profile.DoesNotExist:
            raise AuthenticationError("No profile for this user")

        if not profile.is_active:
            raise AuthenticationError("Profile is inactive")

        email = payload.get("email")
        if email and profile.email != email:
            # Keep email in sync with Supabase
            profile.email = email
            profile.save(update_fields=["email", "updated_at"])

        return AuthContext(
            mode="owner",
            agency_id=profile.agency_id,
            profile=profile,
            is_manager=True,
        )

    def _authenticate_staff_session(self, token: str) -> AuthContext:
        """
        Look up a staff session token and return the staff-mode context.

        Raises AuthenticationError if the session is unknown, revoked or expired.
        """
        from agencybrain.core.models import StaffSession

        session = (
            StaffSession.objects.active(now=timezone.now())
            .select_related("staff_user", "staff_user__team_member")
            .filter(session_token=token)
            .first()
        )
        if session is None:
            raise AuthenticationError("Invalid or expired session")

        staff_user = session.staff_user
        if not staff_user.is_active:
            raise AuthenticationError("Staff account is inactive")

        team_member = staff_user.team_member
        return AuthContext(
            mode="staff",
            agency_id=staff_user.effective_agency_id,
            staff_user=staff_user,
            staff_member_id=team_member.id if team_member is not None else None,
            is_manager=team_member.is_manager if team_member is not None else False,
        )

    def _unauthorized_response(self, message: str) -> JsonResponse:
        """Return a 401 Unauthorized response."""
        return JsonResponse(
            {"error": {"code": "unauthorized", "message": message}},
            status=401,
        )


# =============================================================================
# VIEW HELPERS
# =============================================================================


def get_auth_context(request: HttpRequest) -> AuthContext | None:
    """
    Get the authenticated principal from the request.

    Returns None if not authenticated or auth is disabled.
    """
    return getattr(request, "auth_context", None)


def _require(modes: tuple[AuthMode, ...], message: str):
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            ctx = get_auth_context(request)
            if ctx is None:
                return JsonResponse(
                    {"error": {"code": "unauthorized", "message": "Authentication required"}},
                    status=401,
                )
            if ctx.mode not in modes:
                return JsonResponse(
                    {"error": {"code": "forbidden", "message": message}},
                    status=403,
                )
            return view_func(request, *args, **kwargs)

        return wrapper

    return decorator


# Any authenticated principal
require_auth = _require(("owner", "staff"), "Authentication required")

# Staff-portal session only
require_staff = _require(("staff",), "Staff session required")

# Supabase-authenticated owner/manager only
require_owner = _require(("owner",), "Owner account required")
