"""
API error hierarchy.

Services raise these exceptions; the application factory registers a
single Flask error handler that renders them as JSON with the matching
HTTP status.  Nothing between the service and the handler catches or
rewrites them.

    BadRequestError  -> 400  (malformed or out-of-range caller input)
    NotFoundError    -> 404  (referenced resource absent)
    ConflictError    -> 409  (uniqueness or state conflict)
    ServerError      -> 500  (unexpected internal failure)
"""


class ApiError(Exception):
    """Base class for errors that map directly onto an HTTP status."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict:
        """Return the JSON body sent to the client."""
        return {"message": self.message, "status": self.status_code}


class BadRequestError(ApiError):
    """Missing or invalid request parameters."""

    status_code = 400


class NotFoundError(ApiError):
    """The addressed resource does not exist."""

    status_code = 404


class ConflictError(ApiError):
    """The request conflicts with existing state (e.g. a duplicate name)."""

    status_code = 409


class ServerError(ApiError):
    """An unexpected failure in the domain or storage layer."""

    status_code = 500
