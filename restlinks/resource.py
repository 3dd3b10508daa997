"""Resource descriptors: a record shape bound to its accessor functions.

A descriptor is a capability record.  Each of the five accessor slots is
independently optional; an empty slot means the matching HTTP operation answers
with a "not allowed" error.  Slots are checked once per request by the
dispatcher, never by inspecting the accessor itself.

Accessors may be plain functions or ``async def`` coroutine functions:

- ``create() -> record``
- ``read(id: int) -> record``
- ``list() -> Iterable[record]``
- ``update(record) -> None``
- ``delete(id: int) -> None``

Failures are reported by raising, ideally ``restlinks.ApiError`` with the
status the client should see (404 for a missing id).
"""

from __future__ import annotations

import dataclasses
import re
from typing import Any, Awaitable, Callable, Iterable, Union

from restlinks.errors import RegistrationError
from restlinks.introspect import RecordAdapter, adapter_for

Creator = Callable[[], Union[Any, Awaitable[Any]]]
Reader = Callable[[int], Union[Any, Awaitable[Any]]]
Lister = Callable[[], Union[Iterable[Any], Awaitable[Iterable[Any]]]]
Updater = Callable[[Any], Union[None, Awaitable[None]]]
Deleter = Callable[[int], Union[None, Awaitable[None]]]

_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9_.-]*$")


@dataclasses.dataclass(frozen=True)
class ResourceDescriptor:
    """Immutable description of one REST resource."""

    name: str
    adapter: RecordAdapter
    create: Creator | None = None
    read: Reader | None = None
    list: Lister | None = None
    update: Updater | None = None
    delete: Deleter | None = None

    @property
    def operations(self) -> dict[str, bool]:
        """Which of the five operations this resource permits."""
        return {
            "list": self.list is not None,
            "create": self.create is not None,
            "read": self.read is not None,
            "update": self.update is not None,
            "delete": self.delete is not None,
        }


def register(
    shape: Any,
    create: Creator | None = None,
    read: Reader | None = None,
    list: Lister | None = None,  # noqa: A002
    update: Updater | None = None,
    delete: Deleter | None = None,
    *,
    name: str | None = None,
) -> ResourceDescriptor:
    """Describe ``shape`` as a resource.

    Args:
        shape:  A pydantic model class, a dataclass, or a ``RecordAdapter``.
        create, read, list, update, delete: Optional accessor functions.
        name:   Resource name used in URLs.  Defaults to the shape's class
                name; always lower-cased.

    Returns:
        The frozen ``ResourceDescriptor``.  Add it to a ``Registry`` to serve it.

    Raises:
        RegistrationError: The shape cannot be described (unsupported type or
            more than one identifier field) or the name cannot be used in a URL.
    """
    adapter = adapter_for(shape)
    resource_name = (name or adapter.shape_name).lower()
    if not _NAME_RE.match(resource_name):
        raise RegistrationError(f"Resource name {resource_name!r} cannot be used as a URL segment.")
    return ResourceDescriptor(
        name=resource_name,
        adapter=adapter,
        create=create,
        read=read,
        list=list,
        update=update,
        delete=delete,
    )
