"""Error taxonomy shared by the access core, the CRUD layer and the API.

Denials are normally returned as ``Decision`` values; these exceptions are what
``Decision.enforce()`` and the record store raise so that the API layer can map
them to HTTP status codes in one place (see ``school_api.main``).
"""


class SchoolApiError(Exception):
    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class AuthenticationError(SchoolApiError):
    """No credential, or a credential that failed verification."""

    status_code = 401
    default_detail = "Invalid or missing credentials"


class AuthorizationError(SchoolApiError):
    """The policy denied the operation."""

    status_code = 403
    default_detail = "Access denied"


class NotFoundError(SchoolApiError):
    status_code = 404
    default_detail = "Not found"


class StateConflictError(SchoolApiError):
    """The role may perform the operation, but not in the resource's current state."""

    status_code = 409
    default_detail = "Operation not allowed in the current state"


class ConflictError(SchoolApiError):
    """A store-level uniqueness constraint rejected the write."""

    status_code = 409
    default_detail = "Conflicting record already exists"


class UnavailableError(SchoolApiError):
    """The record store could not be reached or failed mid-query."""

    status_code = 503
    default_detail = "Service temporarily unavailable"


class ResolverError(UnavailableError):
    """An assignment or guardian lookup failed. Safe to retry the request."""

    default_detail = "Could not resolve access scope"
