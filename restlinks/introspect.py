"""Record introspection: identifier and reference fields of a record shape.

Record shapes declare their REST semantics with ``typing.Annotated`` markers:

    class Book(BaseModel):
        Id: Annotated[int, Identifier()]
        Name: str = ""
        LibraryId: Annotated[int, Reference("library", label="owner")] = 0

The markers are read once, when a ``RecordAdapter`` is built for the shape.
From then on the adapter answers every per-request question (identifier value,
reference ids, JSON encoding, typed field updates) without walking the class
again.  Two adapters ship with the library:

- ``ModelAdapter`` for pydantic ``BaseModel`` subclasses
- ``DataclassAdapter`` for standard-library dataclasses

Any other object implementing the ``RecordAdapter`` protocol can be registered
directly, which is how record types that are neither get exposed.

Failure modes differ on purpose:
- A non-integral identifier value degrades to "no identifier" (no self link).
- A non-integral reference value raises ``InvalidReferenceError``.
- More than one ``Identifier`` marker on a shape raises ``RegistrationError``
  when the adapter is built.
"""

from __future__ import annotations

import dataclasses
import functools
import logging
import typing
from typing import Any, Iterable, Mapping, NamedTuple, Protocol, runtime_checkable

from pydantic import BaseModel, TypeAdapter, ValidationError

from restlinks.errors import (
    InvalidFieldValueError,
    InvalidReferenceError,
    RegistrationError,
    UnknownFieldError,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Field markers
# ---------------------------------------------------------------------------


@dataclasses.dataclass(frozen=True)
class Identifier:
    """Marks the field holding the record's unique integer id."""


@dataclasses.dataclass(frozen=True)
class Reference:
    """Marks a field holding the integer id of another resource's record.

    Args:
        target: Name of the referenced resource (case-insensitive).
        label:  Key of the generated link; defaults to ``target``.
    """

    target: str
    label: str | None = None

    @property
    def link_label(self) -> str:
        return self.label or self.target


class ReferenceField(NamedTuple):
    """A reference declared on a shape."""

    target: str
    label: str
    field_name: str


class ReferenceLink(NamedTuple):
    """A reference resolved against one record instance."""

    target: str
    label: str
    id: int


def is_integral(value: Any) -> bool:
    """Return True for ints that are not bools."""
    return isinstance(value, int) and not isinstance(value, bool)


# ---------------------------------------------------------------------------
# Adapter protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class RecordAdapter(Protocol):
    """Per-record-type view used by the link and payload layers."""

    shape_name: str

    def identifier_field(self) -> str | None: ...

    def identifier_value(self, instance: Any) -> tuple[int, bool]: ...

    def declared_references(self) -> list[ReferenceField]: ...

    def reference_fields(self, instance: Any) -> list[ReferenceLink]: ...

    def encode(self, instance: Any) -> bytes: ...

    def apply_update(self, instance: Any, values: Mapping[str, Any]) -> Any: ...


@dataclasses.dataclass
class _FieldSpec:
    name: str
    alias: str | None
    validator: TypeAdapter


class _AnnotatedAdapter:
    """Shared marker scanning and update logic for class-based shapes."""

    def __init__(self, shape: type) -> None:
        self.shape = shape
        self.shape_name = shape.__name__
        self._fields: dict[str, _FieldSpec] = {}
        self._aliases: dict[str, str] = {}
        self._identifier: str | None = None
        self._references: list[ReferenceField] = []

        for name, alias, annotation, metadata in self._iter_fields():
            self._fields[name] = _FieldSpec(name, alias, TypeAdapter(annotation))
            if alias and alias != name:
                self._aliases[alias] = name
            self._scan_markers(name, metadata)

    def _iter_fields(self) -> Iterable[tuple[str, str | None, Any, tuple]]:
        raise NotImplementedError

    def _scan_markers(self, name: str, metadata: Iterable[Any]) -> None:
        for marker in metadata:
            if isinstance(marker, Identifier):
                if self._identifier is not None:
                    raise RegistrationError(
                        f"{self.shape_name} marks both {self._identifier!r} and "
                        f"{name!r} as the identifier; only one field may carry it."
                    )
                self._identifier = name
            elif isinstance(marker, Reference):
                self._references.append(ReferenceField(marker.target, marker.link_label, name))

    # -- identifier / references --------------------------------------------

    def identifier_field(self) -> str | None:
        return self._identifier

    def identifier_value(self, instance: Any) -> tuple[int, bool]:
        if self._identifier is None:
            return 0, False
        value = getattr(instance, self._identifier, None)
        if not is_integral(value):
            logger.debug(
                "Identifier %s.%s holds %r; omitting self link",
                self.shape_name,
                self._identifier,
                value,
            )
            return 0, False
        return int(value), True

    def declared_references(self) -> list[ReferenceField]:
        return list(self._references)

    def reference_fields(self, instance: Any) -> list[ReferenceLink]:
        links: list[ReferenceLink] = []
        for ref in self._references:
            value = getattr(instance, ref.field_name, None)
            if not is_integral(value):
                raise InvalidReferenceError(
                    f"Reference of non-integer type: {self.shape_name}.{ref.field_name}. "
                    "Check to be sure your API models are defined correctly."
                )
            links.append(ReferenceLink(ref.target, ref.label, int(value)))
        return links

    # -- updates --------------------------------------------------------------

    def field_name(self, key: str) -> str | None:
        """Resolve a body key (field name or alias) to a field name."""
        if key in self._fields:
            return key
        return self._aliases.get(key)

    def validate_update(self, values: Mapping[str, Any]) -> dict[str, Any]:
        """Check and coerce every value before anything is written.

        Raises:
            UnknownFieldError: a key names no field of the shape.
            InvalidFieldValueError: a value does not fit the field's type.
        """
        validated: dict[str, Any] = {}
        for key, value in values.items():
            name = self.field_name(key)
            if name is None:
                raise UnknownFieldError(f"Could not find {self.shape_name} field {key}")
            try:
                validated[name] = self._fields[name].validator.validate_python(value)
            except ValidationError as exc:
                raise InvalidFieldValueError(
                    f"Invalid value for {self.shape_name} field {key}: "
                    f"{exc.errors()[0]['msg']}"
                ) from exc
        return validated

    def _is_frozen(self) -> bool:
        raise NotImplementedError

    def _replace(self, instance: Any, values: dict[str, Any]) -> Any:
        raise NotImplementedError

    def apply_update(self, instance: Any, values: Mapping[str, Any]) -> Any:
        """Overwrite the supplied fields; omitted fields keep their values.

        Mutates ``instance`` in place and returns it.  Frozen shapes cannot be
        mutated, so a copy carrying the new values is returned instead.
        """
        validated = self.validate_update(values)
        if self._is_frozen():
            return self._replace(instance, validated)
        for name, value in validated.items():
            setattr(instance, name, value)
        return instance


# ---------------------------------------------------------------------------
# Concrete adapters
# ---------------------------------------------------------------------------


class ModelAdapter(_AnnotatedAdapter):
    """Adapter for pydantic models."""

    def _iter_fields(self):
        for name, info in self.shape.model_fields.items():
            metadata = tuple(info.metadata)
            annotation = (
                typing.Annotated[(info.annotation, *metadata)] if metadata else info.annotation
            )
            yield name, info.alias, annotation, metadata

    def encode(self, instance: Any) -> bytes:
        return instance.model_dump_json(by_alias=True).encode()

    def _is_frozen(self) -> bool:
        return bool(self.shape.model_config.get("frozen"))

    def _replace(self, instance: Any, values: dict[str, Any]) -> Any:
        return instance.model_copy(update=values)


class DataclassAdapter(_AnnotatedAdapter):
    """Adapter for standard-library dataclasses."""

    def __init__(self, shape: type) -> None:
        self._encoder = TypeAdapter(shape)
        super().__init__(shape)

    def _iter_fields(self):
        hints = typing.get_type_hints(self.shape, include_extras=True)
        for fld in dataclasses.fields(self.shape):
            hint = hints.get(fld.name, Any)
            metadata = getattr(hint, "__metadata__", ())
            yield fld.name, None, hint, tuple(metadata)

    def encode(self, instance: Any) -> bytes:
        return self._encoder.dump_json(instance)

    def _is_frozen(self) -> bool:
        return self.shape.__dataclass_params__.frozen

    def _replace(self, instance: Any, values: dict[str, Any]) -> Any:
        return dataclasses.replace(instance, **values)


@functools.lru_cache(maxsize=None)
def _class_adapter(shape: type) -> RecordAdapter:
    if issubclass(shape, BaseModel):
        return ModelAdapter(shape)
    if dataclasses.is_dataclass(shape):
        return DataclassAdapter(shape)
    raise RegistrationError(
        f"Cannot describe {shape.__name__}: expected a pydantic model, a dataclass, "
        "or a RecordAdapter instance."
    )


def adapter_for(shape: Any) -> RecordAdapter:
    """Return the adapter for a record class, or ``shape`` if it already is one."""
    if isinstance(shape, type):
        return _class_adapter(shape)
    if isinstance(shape, RecordAdapter):
        return shape
    raise RegistrationError(f"Cannot describe {shape!r} as a record shape.")


# ---------------------------------------------------------------------------
# Shape-level helpers
# ---------------------------------------------------------------------------


def find_identifier_field(shape: Any) -> str | None:
    """Return the name of the identifier field, or None."""
    return adapter_for(shape).identifier_field()


def find_identifier_value(shape: Any, instance: Any) -> tuple[int, bool]:
    """Return ``(id, True)`` or ``(0, False)`` when no usable id exists."""
    return adapter_for(shape).identifier_value(instance)


def find_reference_fields(shape: Any) -> list[ReferenceField]:
    """Return the reference fields of ``shape`` in declaration order."""
    return adapter_for(shape).declared_references()
