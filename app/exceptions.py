# app/exceptions.py
"""
Domain error taxonomy.
Routers never build error responses themselves: services raise these and the
handler registered in app.main turns them into JSON with the matching status.
ProviderError is the exception: the content generator always absorbs it.
"""


class InventoryError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(InventoryError):
    """Malformed filter values, bad generation input, or a comparison of fewer than 2 vehicles."""
    status_code = 400
    code = "VALIDATION_ERROR"


class InvalidTransitionError(ValidationError):
    code = "INVALID_TRANSITION"


class TransitionConflictError(ValidationError):
    """The approval status changed between the read and the conditional update."""
    status_code = 409
    code = "TRANSITION_CONFLICT"


class NotFoundError(InventoryError):
    status_code = 404
    code = "NOT_FOUND"


class PermissionDeniedError(InventoryError):
    status_code = 403
    code = "FORBIDDEN"


class RateLimitExceededError(InventoryError):
    status_code = 429
    code = "RATE_LIMIT_EXCEEDED"

    def __init__(self, detail: str, retry_after: int):
        super().__init__(detail)
        self.retry_after = retry_after


class PersistenceError(InventoryError):
    code = "PERSISTENCE_ERROR"


class ProviderError(InventoryError):
    """Timeout, quota, credential or short-reply failure of the generation provider."""
    status_code = 502
    code = "PROVIDER_ERROR"


class AuthenticationRequiredError(InventoryError):
    """No actor was forwarded with the request."""
    status_code = 401
    code = "UNAUTHENTICATED"
