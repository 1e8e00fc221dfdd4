class ApiError(Exception):
    """Base class for errors that are reported to the caller."""

    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ApiError):
    status_code = 400


class Unauthorized(ApiError):
    status_code = 401


class TokenExpired(Unauthorized):
    pass


class InvalidToken(Unauthorized):
    pass


class NotFound(ApiError):
    status_code = 404


class InvalidOperation(ApiError):
    """Request is well formed but breaks a business rule, e.g. self-referral."""

    status_code = 400


class Conflict(ApiError):
    status_code = 409


class ExternalServiceUnavailable(ApiError):
    status_code = 503


class ReferralCodeTaken(Exception):
    """Raised by the store when a referral code collides with an existing one."""

    pass
