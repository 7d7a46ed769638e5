"""
Domain exceptions shared by the service layer.

Services raise these; API views translate them to error envelopes.
"""


class ServiceError(Exception):
    """Base exception for service-layer errors."""

    code = "error"
    status = 400


class NotFoundError(ServiceError):
    """Raised when a target object does not exist or is not visible to the caller."""

    code = "not_found"
    status = 404


class ForbiddenError(ServiceError):
    """Raised when the caller may not act on an object that does exist."""

    code = "forbidden"
    status = 403


class FeatureDisabledError(ForbiddenError):
    """Raised when the agency does not have access to a gated feature."""

    code = "feature_disabled"


class ConflictError(ServiceError):
    """Raised when the object is in a state that cannot satisfy the request."""

    code = "conflict"
    status = 409
