"""Allow ``python -m restlinks``."""

from restlinks.cli import app

app()
