"""Typed errors raised below the HTTP layer.

Route handlers and services raise these; the handlers registered in
``create_app`` turn them into ``{"message": ...}`` JSON responses.
"""


class ApiError(Exception):
    status_code = 500

    def __init__(self, message, status_code=None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ValidationError(ApiError):
    status_code = 400


class AuthenticationError(ApiError):
    status_code = 401


class ForbiddenError(ApiError):
    status_code = 403


class NotFoundError(ApiError):
    status_code = 404


class ConflictError(ApiError):
    status_code = 409
