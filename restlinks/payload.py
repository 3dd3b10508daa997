"""Assemble JSON response bodies with embedded ``links`` maps."""

from __future__ import annotations

import json
from typing import Any, Iterable

from pydantic_core import PydanticSerializationError

from restlinks.errors import MarshalError
from restlinks.links import LinkManager
from restlinks.resource import ResourceDescriptor


def marshal_one(links: LinkManager, resource: ResourceDescriptor, instance: Any) -> bytes:
    """Encode one record with its link map merged in under ``links``.

    The record is encoded by its adapter, decoded back into a plain dict (field
    order preserved) so the link map can be injected whatever the record's
    shape, and encoded again.

    Raises:
        MarshalError: The record cannot be encoded or is not a JSON object.
        InvalidReferenceError, UnknownResourceError: from link derivation.
    """
    link_map = links.all_links_for(resource, instance)
    try:
        document = json.loads(resource.adapter.encode(instance))
    except (PydanticSerializationError, TypeError, ValueError) as exc:
        raise MarshalError(f"Could not marshal {resource.name} as JSON: {exc}") from exc
    if not isinstance(document, dict):
        raise MarshalError(f"Could not marshal {resource.name}: record is not a JSON object.")
    document["links"] = link_map
    return json.dumps(document, separators=(",", ":")).encode()


def marshal_many(
    links: LinkManager, resource: ResourceDescriptor, instances: Iterable[Any]
) -> bytes:
    """Encode records as a JSON array.

    All-or-nothing: the first record that fails aborts the whole list.
    """
    return b"[" + b",".join(marshal_one(links, resource, obj) for obj in instances) + b"]"
