"""
Request-scoped context handed to the organization service.

Built once per request by the route layer from Flask's ``request`` and
Flask-Login's ``current_user`` so that the service itself never reads
ambient globals.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ServiceContext:
    """
    What the service needs to know about the request it is handling.

    Attributes:
        base_url:        Scheme and host the API is served from,
                         without a trailing slash.
        request_url:     The full request URL without its query string.
        query:           The request's query parameters as ordered
                         ``(name, value)`` pairs.
        current_user_id: Identifier of the authenticated caller, if any.
    """

    base_url: str
    request_url: str = ""
    query: tuple[tuple[str, str], ...] = field(default_factory=tuple)
    current_user_id: str | None = None

    @classmethod
    def from_request(cls, request, user=None) -> "ServiceContext":
        """
        Build a context from a Flask/werkzeug request.

        Args:
            request: The current request.
            user:    The Flask-Login user; anonymous users yield no id.
        """
        user_id = None
        if user is not None and getattr(user, "is_authenticated", False):
            user_id = user.get_id()
        return cls(
            base_url=request.host_url.rstrip("/"),
            request_url=request.base_url,
            query=tuple(request.args.items(multi=True)),
            current_user_id=user_id,
        )
