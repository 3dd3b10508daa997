"""Ordered collection of the resources served by one application.

The registry is filled during configuration and frozen when the HTTP app is
built.  After that it is only read, so request handlers share it without
locking.
"""

from __future__ import annotations

import logging
from typing import Iterator

from restlinks.errors import RegistrationError, UnknownResourceError
from restlinks.resource import ResourceDescriptor, register

logger = logging.getLogger(__name__)


class Registry:
    """Registered ``ResourceDescriptor``s in registration order."""

    def __init__(self) -> None:
        self._resources: list[ResourceDescriptor] = []
        self._by_name: dict[str, ResourceDescriptor] = {}
        self._frozen = False

    def add(self, resource: ResourceDescriptor) -> ResourceDescriptor:
        """Add a descriptor.  Names must be unique (case-insensitively)."""
        if self._frozen:
            raise RegistrationError(
                f"Cannot add {resource.name!r}: the registry is already serving requests."
            )
        key = resource.name.lower()
        if key in self._by_name:
            raise RegistrationError(f"A resource named {resource.name!r} is already registered.")
        self._resources.append(resource)
        self._by_name[key] = resource
        logger.info(
            "Registered resource %s (operations: %s)",
            resource.name,
            ", ".join(op for op, allowed in resource.operations.items() if allowed) or "none",
        )
        return resource

    def register(self, shape, *args, **kwargs) -> ResourceDescriptor:
        """Shortcut for ``registry.add(restlinks.register(shape, ...))``."""
        return self.add(register(shape, *args, **kwargs))

    def get(self, name: str) -> ResourceDescriptor | None:
        return self._by_name.get(name.lower())

    def lookup(self, name: str) -> ResourceDescriptor:
        """Return the resource called ``name`` or raise ``UnknownResourceError``."""
        resource = self.get(name)
        if resource is None:
            raise UnknownResourceError(f"No resource exists named {name}")
        return resource

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __iter__(self) -> Iterator[ResourceDescriptor]:
        return iter(tuple(self._resources))

    def __len__(self) -> int:
        return len(self._resources)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._by_name
