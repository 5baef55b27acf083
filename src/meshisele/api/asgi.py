"""ASGI entrypoint for the MeshiSele API."""

from meshisele.api.app import create_app
from meshisele.containers import build_container

app = create_app(build_container())
