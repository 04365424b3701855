"""
Organization validator — structural checks on submitted organizations.

Runs before any create or update reaches the organization manager and
reports the first defect it finds as a ``BadRequestError``.
"""

import re

from orgapi.validation import check_argument

# Letters and digits, optionally separated by single hyphens.
NAME_PATTERN = re.compile(r"^[a-zA-Z0-9]+(?:-[a-zA-Z0-9]+)*$")

DEFAULT_MAX_NAME_LENGTH = 20


class OrganizationValidator:
    """
    Validates organization representations submitted by clients.

    Args:
        reserved_names:  Names that may not be used (compared
                         case-insensitively).
        max_name_length: Longest accepted organization name.
    """

    def __init__(
        self,
        reserved_names=(),
        max_name_length: int = DEFAULT_MAX_NAME_LENGTH,
    ):
        self.reserved_names = frozenset(name.lower() for name in reserved_names)
        self.max_name_length = max_name_length

    def check_organization(self, organization) -> None:
        """
        Check that ``organization`` is a well-formed representation.

        Raises:
            BadRequestError: Describing the first structural defect.
        """
        check_argument(isinstance(organization, dict), "Organization required")

        name = organization.get("name")
        check_argument(name is not None and name != "", "Organization name required")
        check_argument(isinstance(name, str), "Organization name must be a string")
        self.check_name(name)

        parent = organization.get("parent")
        check_argument(
            parent is None or (isinstance(parent, str) and parent != ""),
            "Organization parent must be a non-empty organization id",
        )

    def check_name(self, name: str) -> None:
        """Check the name format, its length, and the reserved list."""
        check_argument(
            NAME_PATTERN.match(name) is not None,
            "Organization name may only contain letters and digits, "
            "separated by single hyphens",
        )
        check_argument(
            len(name) <= self.max_name_length,
            f"The name of organization can't contain more than "
            f"{self.max_name_length} characters",
        )
        check_argument(
            name.lower() not in self.reserved_names,
            f"The name '{name}' is reserved and can't be used",
        )
