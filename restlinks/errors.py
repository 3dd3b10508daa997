"""Error taxonomy for restlinks.

Every runtime failure raised by the core derives from ``ResourceError`` and
carries the HTTP status it should be reported with.  The request dispatcher is
the only place that turns these into responses (a plain-text line plus the
status code); nothing in the link or payload layers writes responses itself.

Status conventions:
- 406 Not Acceptable for request-shape problems: unparsable id, malformed
  update body, unknown field, wrong value type, broken reference configuration.
- 500 for everything without an explicit status: missing accessor, marshal
  failure, accessor exceptions that do not carry a status.

Configuration-time problems (duplicate identifier markers, duplicate resource
names, registering into a frozen registry) raise ``RegistrationError`` instead;
they surface at startup and never reach the HTTP layer.
"""

from __future__ import annotations

import enum


class ErrorKind(str, enum.Enum):
    """Classification of core failures."""

    NOT_ALLOWED = "not_allowed"
    NOT_FOUND = "not_found"
    INVALID_ID = "invalid_id"
    UNKNOWN_FIELD = "unknown_field"
    INVALID_FIELD_VALUE = "invalid_field_value"
    INVALID_BODY = "invalid_body"
    INVALID_REFERENCE = "invalid_reference"
    UNKNOWN_RESOURCE = "unknown_resource"
    MARSHAL_FAILURE = "marshal_failure"
    ACCESSOR = "accessor"


class ResourceError(Exception):
    """Base class for errors that translate into an HTTP error response."""

    kind: ErrorKind = ErrorKind.ACCESSOR
    default_status: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code if status_code is not None else self.default_status

    def __str__(self) -> str:
        return self.message


class ApiError(ResourceError):
    """Error raised by accessors to report a failure with an explicit status.

    The message is built from ``items`` joined by spaces, so accessors can
    write ``raise ApiError(404, "Could not find book with id:", book_id)``.
    """

    def __init__(self, status_code: int, *items: object) -> None:
        super().__init__(" ".join(str(item) for item in items), status_code)
        self.kind = ErrorKind.NOT_FOUND if status_code == 404 else ErrorKind.ACCESSOR


class AccessorError(ResourceError):
    """Wraps an arbitrary exception raised inside an accessor."""

    kind = ErrorKind.ACCESSOR


class NotAllowedError(ResourceError):
    kind = ErrorKind.NOT_ALLOWED


class InvalidIdError(ResourceError):
    kind = ErrorKind.INVALID_ID
    default_status = 406


class InvalidBodyError(ResourceError):
    kind = ErrorKind.INVALID_BODY
    default_status = 406


class UnknownFieldError(ResourceError):
    kind = ErrorKind.UNKNOWN_FIELD
    default_status = 406


class InvalidFieldValueError(ResourceError):
    kind = ErrorKind.INVALID_FIELD_VALUE
    default_status = 406


class InvalidReferenceError(ResourceError):
    """A reference-annotated field holds a non-integral value."""

    kind = ErrorKind.INVALID_REFERENCE
    default_status = 406


class UnknownResourceError(ResourceError):
    """A reference names a resource that is not registered."""

    kind = ErrorKind.UNKNOWN_RESOURCE
    default_status = 406


class MarshalError(ResourceError):
    kind = ErrorKind.MARSHAL_FAILURE


class RegistrationError(ValueError):
    """Invalid resource configuration detected at registration time."""
