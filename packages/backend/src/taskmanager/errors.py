"""Error kinds raised by the service layer.

The API layer translates each kind to one HTTP status in
taskmanager.api.errors. Services never build HTTP responses themselves.
"""


class TaskManagerError(Exception):
    """Base class for domain errors."""


class ValidationError(TaskManagerError):
    """Malformed or forbidden input, constraint violation, or uniqueness conflict."""

    def __init__(self, errors: list[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class AuthFailure(TaskManagerError):
    """Bad credentials or an unusable token. Deliberately carries no detail."""


class TokenError(AuthFailure):
    """Raised when token verification fails."""


class NotFoundError(TaskManagerError):
    """Resource is absent or owned by someone else."""
