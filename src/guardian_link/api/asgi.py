"""ASGI entrypoint for the guardian service."""

from guardian_link.api.app import create_app
from guardian_link.containers import build_container

app = create_app(build_container())
