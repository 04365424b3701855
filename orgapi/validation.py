"""
Precondition checks for inbound request parameters.

These run before any domain call is made so that a bad request never
reaches the organization manager.
"""

import re
from collections.abc import Mapping

from orgapi.errors import BadRequestError

_INTEGER_PATTERN = re.compile(r"-?\d+", re.ASCII)

# Query integers share the range of a signed 32-bit int.
INT_MIN = -(2**31)
INT_MAX = 2**31 - 1


def check_argument(expression: bool, error_message: str) -> None:
    """
    Ensure the truth of an expression involving request parameters.

    Args:
        expression:    A boolean expression.
        error_message: The message to report if the check fails.

    Raises:
        BadRequestError: If ``expression`` is false.
    """
    if not expression:
        raise BadRequestError(error_message)


def int_arg(args: Mapping[str, str], name: str, default: int | None) -> int | None:
    """
    Read an integer query parameter, falling back to ``default``.

    Accepts an optional minus sign followed by ASCII digits, within
    ``INT_MIN``..``INT_MAX``.  Sign rules belong to the caller via
    ``check_argument``.

    Raises:
        BadRequestError: If the parameter is present but not an integer
                         in range.
    """
    raw = args.get(name)
    if raw is None or raw == "":
        return default
    if not isinstance(raw, str) or not _INTEGER_PATTERN.fullmatch(raw):
        raise BadRequestError(
            f"Query parameter '{name}' must be an integer, got '{raw}'."
        )
    # Longer digit strings are out of range; skip converting them.
    digits = raw.lstrip("-").lstrip("0")
    if len(digits) > len(str(INT_MAX)) or not INT_MIN <= int(raw) <= INT_MAX:
        raise BadRequestError(
            f"Query parameter '{name}' must be between {INT_MIN} and {INT_MAX}."
        )
    return int(raw)


def check_page_window(max_items: int, skip_count: int) -> None:
    """Validate the ``maxItems``/``skipCount`` pair of a list request."""
    check_argument(max_items >= 0, "The number of items to return can't be negative.")
    check_argument(skip_count >= 0, "The number of items to skip can't be negative.")
