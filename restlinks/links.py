"""Hyperlink derivation for resources and records.

URL scheme:
    index URL   /<name>
    object URL  /<name>/<id>

Relative URLs are lower-cased and then qualified with the requesting host, so
the same service answers correctly behind any hostname or port.  A
``LinkManager`` is therefore built per request and every method returns a new
dict; no link map outlives the request that produced it.
"""

from __future__ import annotations

import logging
from typing import Any

from restlinks.registry import Registry
from restlinks.resource import ResourceDescriptor

logger = logging.getLogger(__name__)

ROOT_URL = "/"


def qualify(url: str, host: str, scheme: str = "http") -> str:
    """Make ``url`` absolute.  Already-absolute URLs are returned unchanged."""
    if "://" in url:
        return url
    return f"{scheme}://{host}{url}"


class LinkManager:
    """Builds link maps for one request.

    Args:
        registry: Registered resources, used to resolve reference targets.
        host:     Value of the request's Host header (``hostname[:port]``).
        scheme:   URL scheme for absolute links.
    """

    def __init__(self, registry: Registry, host: str, scheme: str = "http") -> None:
        self.registry = registry
        self.host = host
        self.scheme = scheme

    # -- relative URLs --------------------------------------------------------

    @staticmethod
    def index_url(resource: ResourceDescriptor) -> str:
        return ("/" + resource.name).lower()

    @classmethod
    def object_url(cls, resource: ResourceDescriptor, id: int) -> str:  # noqa: A002
        return f"{cls.index_url(resource)}/{id:d}"

    def link(self, url: str) -> str:
        return qualify(url, self.host, self.scheme)

    # -- absolute links -------------------------------------------------------

    def index_link(self, resource: ResourceDescriptor) -> str:
        return self.link(self.index_url(resource))

    def object_link(self, resource: ResourceDescriptor, id: int) -> str:  # noqa: A002
        return self.link(self.object_url(resource, id))

    def self_link(self, resource: ResourceDescriptor, instance: Any) -> tuple[str, bool]:
        """Return ``(url, True)``, or ``("", False)`` if the record has no id."""
        id_, found = resource.adapter.identifier_value(instance)
        if not found:
            return "", False
        return self.object_link(resource, id_), True

    def specific_link(self, name: str, id: int) -> str:  # noqa: A002
        """Absolute URL of record ``id`` of the resource called ``name``.

        Raises:
            UnknownResourceError: No resource called ``name`` is registered.
        """
        return self.object_link(self.registry.lookup(name), id)

    # -- link maps ------------------------------------------------------------

    def root_links(self) -> dict[str, str]:
        """Discovery links: every resource index plus root and self.

        Index links are absolute; ``root`` and ``self`` stay the bare ``/``.
        """
        links = {f"{r.name} index": self.index_link(r) for r in self.registry}
        links["root"] = ROOT_URL
        links["self"] = ROOT_URL
        return links

    def all_links_for(self, resource: ResourceDescriptor, instance: Any) -> dict[str, str]:
        """Full link map for one record.

        Always contains ``root`` and ``<name> index``; ``self`` when the record
        has an identifier; one entry per reference field, keyed by its label.

        Raises:
            InvalidReferenceError: A reference field holds a non-integer.
            UnknownResourceError: A reference names an unregistered resource.
        """
        links = {
            "root": self.link(ROOT_URL),
            f"{resource.name} index": self.index_link(resource),
        }
        self_url, found = self.self_link(resource, instance)
        if found:
            links["self"] = self_url
        for ref in resource.adapter.reference_fields(instance):
            links[ref.label] = self.specific_link(ref.target, ref.id)
        return links
