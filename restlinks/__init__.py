"""restlinks: expose in-memory records as hyperlinked REST resources.

Register a record shape with its accessor functions and serve the registry
with FastAPI.  Every JSON response carries a ``links`` map with absolute URLs
for the record itself, its resource index, the API root, and every record it
references.
"""

from restlinks.api.server import create_app
from restlinks.errors import ApiError, ErrorKind, RegistrationError, ResourceError
from restlinks.introspect import Identifier, RecordAdapter, Reference, ReferenceLink
from restlinks.links import LinkManager
from restlinks.registry import Registry
from restlinks.resource import ResourceDescriptor, register

__all__ = [
    "ApiError",
    "ErrorKind",
    "Identifier",
    "LinkManager",
    "RecordAdapter",
    "Reference",
    "ReferenceLink",
    "RegistrationError",
    "Registry",
    "ResourceDescriptor",
    "ResourceError",
    "create_app",
    "register",
]
