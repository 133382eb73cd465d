"""Error taxonomy shared by the store, the control logic and the API layer."""


class GuardError(Exception):
    """Base class; `status_code` is the HTTP status the API answers with."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(GuardError):
    """Bad enum value or request shape. Nothing was changed."""

    status_code = 400


class NotFoundError(GuardError):
    """Unknown service or firewall rule id. Nothing was changed."""

    status_code = 404


class InternalError(GuardError):
    """The backing database failed; raised by the store in place of the driver error."""

    status_code = 500
