"""Error hierarchy for the timetable composer and its REST collaborator.

Two families live here:

- Composer errors raised synchronously by the editing session (invalid cell,
  special period, nothing to save). These are user-facing and never retried.
- API errors raised by the HTTP client. ``TransientError`` lets tenacity
  classify failures that may succeed on retry; ``PermanentError`` fails fast.

Example usage with tenacity:
    Retrying(retry=retry_if_exception_type(TransientError), stop=stop_after_attempt(3))
"""


class ComposerError(Exception):
    """Base exception for all timetable composer errors."""

    pass


class InvalidCellError(ComposerError):
    """Cell identity does not address an editable grid position.

    Examples: unknown day or time slot, class not currently displayed.
    """

    pass


class SpecialPeriodError(InvalidCellError):
    """Special periods (break, lunch, ...) cannot be assigned or cleared."""

    pass


class UnknownContentError(ComposerError):
    """Content id is neither a known subject nor a known activity."""

    pass


class TimetableValidationError(ComposerError):
    """Save-time validation failure reported to the user, not a crash."""

    pass


class EmptyTimetableError(TimetableValidationError):
    """No persistable entries - nothing meaningful to save."""

    pass


class MissingSectionError(TimetableValidationError):
    """A section must be selected before the timetable can be saved."""

    pass


class ApiError(ComposerError):
    """Base exception for REST API collaborator failures."""

    pass


class TransientError(ApiError):
    """Temporary failure that may succeed on retry.

    Examples: network timeouts, connection resets, 503 Service Unavailable.
    """

    pass


class RateLimitError(TransientError):
    """Rate limit exceeded (HTTP 429).

    Inherits from TransientError so tenacity will retry it.
    """

    pass


class PermanentError(ApiError):
    """Failure that won't succeed on retry.

    Examples: 400 Bad Request, 404 Not Found, malformed response body.
    """

    pass


class AuthenticationError(PermanentError):
    """Access token missing, expired or rejected (HTTP 401/403).

    Requires a fresh token, cannot be fixed by retry.
    """

    pass


class MergeInvariantError(AssertionError):
    """Merge Index is in a state the merge/clear algorithms never produce.

    Treated as a programming error, not a recoverable runtime case.
    """

    pass
