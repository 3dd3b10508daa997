"""
Pytest configuration for restlinks tests.

Provides the book/library records used across the suite, a registry whose
accessors hand out the stored objects themselves (so tests can observe
in-place mutation), and FastAPI test clients for it and for the demo API.
"""

from typing import Annotated

import pytest
from fastapi.testclient import TestClient
from pydantic import BaseModel

from restlinks import ApiError, Identifier, Reference, Registry, create_app
from restlinks.examples.library import build_registry


class Book(BaseModel):
    Id: Annotated[int, Identifier()]
    Name: str = ""
    LibraryId: Annotated[int, Reference("library", label="owner")] = 0


class Library(BaseModel):
    Id: Annotated[int, Identifier()]


@pytest.fixture
def books():
    return {0: Book(Id=0, Name="Dune", LibraryId=1)}


@pytest.fixture
def libraries():
    return {1: Library(Id=1)}


@pytest.fixture
def registry(books, libraries):
    """book: read/list/update/delete (no create); library: read/list."""

    def read_book(id):
        if id not in books:
            raise ApiError(404, "Could not find book with id:", id)
        return books[id]

    def update_book(book):
        books[book.Id] = book

    def delete_book(id):
        if books.pop(id, None) is None:
            raise ApiError(404, "Could not find book with id", id)

    def read_library(id):
        if id not in libraries:
            raise ApiError(404, "Could not find library with id:", id)
        return libraries[id]

    registry = Registry()
    registry.register(
        Book,
        read=read_book,
        list=lambda: list(books.values()),
        update=update_book,
        delete=delete_book,
    )
    registry.register(Library, read=read_library, list=lambda: list(libraries.values()))
    return registry


@pytest.fixture
def client(registry):
    return TestClient(create_app(registry))


@pytest.fixture
def demo_client():
    return TestClient(create_app(build_registry()))
