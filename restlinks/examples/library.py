"""Demo resources: books held by libraries.

``book`` supports all five operations and links to its owning library through
the ``owner`` reference; ``library`` is read-only.  Records live in
``InMemoryStore`` instances, which also show the locking an accessor needs when
requests run concurrently.

Serve it with:
    restlinks serve
"""

from __future__ import annotations

import threading
from typing import Annotated, Callable, Generic, TypeVar

from pydantic import BaseModel

from restlinks.errors import ApiError
from restlinks.introspect import Identifier, Reference
from restlinks.registry import Registry

RecordT = TypeVar("RecordT", bound=BaseModel)


class Book(BaseModel):
    Id: Annotated[int, Identifier()]
    Name: str = ""
    ISBN: str = ""
    Author: str = ""
    LibraryId: Annotated[int, Reference("Library", label="owner")] = 0


class Library(BaseModel):
    Id: Annotated[int, Identifier()]
    Name: str = ""
    Location: str = ""


class InMemoryStore(Generic[RecordT]):
    """Thread-safe id → record map with sequential id allocation."""

    def __init__(self, kind: str, records: list[RecordT] | None = None) -> None:
        self.kind = kind
        self._lock = threading.Lock()
        self._records: dict[int, RecordT] = {}
        for record in records or []:
            self._records[record.Id] = record
        self._next_id = max(self._records, default=-1) + 1

    def create(self, factory: Callable[[int], RecordT]) -> RecordT:
        with self._lock:
            record = factory(self._next_id)
            self._records[record.Id] = record
            self._next_id += 1
            return record.model_copy()

    def read(self, id: int) -> RecordT:  # noqa: A002
        with self._lock:
            record = self._records.get(id)
        if record is None:
            raise ApiError(404, f"Could not find {self.kind} with id:", id)
        # Handlers mutate what they read; hand out copies so only update() writes.
        return record.model_copy()

    def list(self) -> list[RecordT]:
        with self._lock:
            return [self._records[key].model_copy() for key in sorted(self._records)]

    def update(self, record: RecordT) -> None:
        with self._lock:
            if record.Id not in self._records:
                raise ApiError(404, f"Could not find {self.kind} with id:", record.Id)
            self._records[record.Id] = record.model_copy()

    def delete(self, id: int) -> None:  # noqa: A002
        with self._lock:
            if self._records.pop(id, None) is None:
                raise ApiError(404, f"Could not find {self.kind} with id", id)


def build_registry() -> Registry:
    """Return a fresh registry with the demo data loaded."""
    books: InMemoryStore[Book] = InMemoryStore(
        "book",
        [
            Book(Id=0, Name="Great Expectations", ISBN="345678", Author="Charles Dickens", LibraryId=0),
            Book(Id=1, Name="Robinson Crusoe", ISBN="234567", Author="Daniel Defoe", LibraryId=0),
            Book(Id=2, Name="Henry V", ISBN="123456", Author="William Shakespeare", LibraryId=1),
        ],
    )
    libraries: InMemoryStore[Library] = InMemoryStore(
        "library",
        [
            Library(Id=0, Name="Mountain View Public Library", Location="Mountain View"),
            Library(Id=1, Name="Cupertino Public Library", Location="Cupertino"),
        ],
    )

    registry = Registry()
    registry.register(
        Book,
        create=lambda: books.create(lambda id_: Book(Id=id_)),
        read=books.read,
        list=books.list,
        update=books.update,
        delete=books.delete,
    )
    registry.register(Library, read=libraries.read, list=libraries.list)
    return registry
