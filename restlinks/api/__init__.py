"""HTTP layer for restlinks.

Turns a ``Registry`` into a FastAPI application: a root discovery document,
a health probe, and five REST routes per registered resource.

Entry point:
    from restlinks.api import create_app
"""

from restlinks.api.server import build_router, create_app

__all__ = ["build_router", "create_app"]
