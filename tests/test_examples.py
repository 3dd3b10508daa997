"""Tests for the demo book/library resources and the CLI."""

import json
import threading

import pytest
from typer.testing import CliRunner

from restlinks.cli import app
from restlinks.config import Settings
from restlinks.errors import ApiError
from restlinks.examples.library import Book, InMemoryStore, build_registry


class TestInMemoryStore:
    """Tests for the demo store."""

    def test_read_returns_copy(self):
        """Mutating a read record does not touch the store."""
        store = InMemoryStore("book", [Book(Id=0, Name="Dune")])
        record = store.read(0)
        record.Name = "changed"
        assert store.read(0).Name == "Dune"

    def test_read_missing(self):
        """Missing ids raise a 404 ApiError."""
        store = InMemoryStore("book")
        with pytest.raises(ApiError) as excinfo:
            store.read(3)
        assert excinfo.value.status_code == 404
        assert str(excinfo.value) == "Could not find book with id: 3"

    def test_ids_continue_after_seed(self):
        """New ids follow the highest seeded id."""
        store = InMemoryStore("book", [Book(Id=4)])
        assert store.create(lambda id_: Book(Id=id_)).Id == 5

    def test_concurrent_creates_get_unique_ids(self):
        """Id allocation is safe across threads."""
        store = InMemoryStore("book")
        threads = [
            threading.Thread(target=store.create, args=(lambda id_: Book(Id=id_),))
            for _ in range(20)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert [b.Id for b in store.list()] == list(range(20))

    def test_update_and_delete(self):
        """Updates replace records; deletes remove them."""
        store = InMemoryStore("book", [Book(Id=0)])
        store.update(Book(Id=0, Name="Dune"))
        assert store.read(0).Name == "Dune"
        store.delete(0)
        with pytest.raises(ApiError):
            store.delete(0)


class TestDemoRegistry:
    """Tests for the demo registry."""

    def test_resources(self):
        """Book is fully writable, library is read-only."""
        registry = build_registry()
        assert [r.name for r in registry] == ["book", "library"]
        assert all(registry.lookup("book").operations.values())
        assert registry.lookup("library").operations == {
            "list": True,
            "create": False,
            "read": True,
            "update": False,
            "delete": False,
        }

    def test_owner_link(self, demo_client):
        """Henry V belongs to the Cupertino library."""
        owner = demo_client.get("/book/2").json()["links"]["owner"]
        assert owner == "http://testserver/library/1"
        assert demo_client.get(owner).json()["Location"] == "Cupertino"

    def test_update_persists(self, demo_client):
        """Updates go through the store."""
        demo_client.put("/book/1", json={"Author": "Daniel Defoe", "ISBN": "999"})
        stored = demo_client.get("/book/1").json()
        assert stored["ISBN"] == "999"
        assert stored["Name"] == "Robinson Crusoe"


class TestCli:
    """Tests for the typer CLI."""

    def test_routes(self):
        """The route table lists every resource route."""
        result = CliRunner().invoke(app, ["routes"])
        assert result.exit_code == 0
        assert "/book/{id}" in result.output
        assert "/library" in result.output
        assert "book-read_book" in result.output

    def test_openapi_writes_document(self, tmp_path):
        """openapi writes the demo document to the requested path."""
        output = tmp_path / "out" / "api.json"
        result = CliRunner().invoke(app, ["openapi", "--output", str(output)])
        assert result.exit_code == 0
        document = json.loads(output.read_text(encoding="utf-8"))
        assert "/book/{id}" in document["paths"]
        assert set(document["paths"]["/book/{id}"]) == {"get", "put", "delete"}

    def test_serve_uses_uvicorn(self, monkeypatch):
        """serve hands the demo app to uvicorn with the given options."""
        calls = {}

        def fake_run(app, **kwargs):
            calls.update(kwargs)

        monkeypatch.setattr("restlinks.cli.demo.uvicorn.run", fake_run)
        result = CliRunner().invoke(app, ["serve", "--port", "9123"])
        assert result.exit_code == 0
        assert calls["port"] == 9123
        assert "host" in calls


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        """Defaults apply without environment overrides."""
        monkeypatch.delenv("RESTLINKS_PORT", raising=False)
        assert Settings(_env_file=None).port == 8080

    def test_env_override(self, monkeypatch):
        """RESTLINKS_ variables override defaults."""
        monkeypatch.setenv("RESTLINKS_PORT", "9000")
        monkeypatch.setenv("RESTLINKS_URL_SCHEME", "https")
        settings = Settings(_env_file=None)
        assert settings.port == 9000
        assert settings.url_scheme == "https"
