class SkillcheckError(Exception):
    """Business error surfaced to the client as ``{success: 0, message}``."""

    status_code = 400

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(SkillcheckError):
    status_code = 400


class AuthError(SkillcheckError):
    status_code = 401


class NotFoundError(SkillcheckError):
    status_code = 404


class ConflictError(SkillcheckError):
    status_code = 409


class ApiError(SkillcheckError):
    """Raised by the HTTP client when the server answers with success == 0."""
