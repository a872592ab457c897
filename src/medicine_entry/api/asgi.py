"""ASGI entrypoint for the medicine entry API."""

from medicine_entry.api.app import create_app
from medicine_entry.containers import build_container

app = create_app(build_container())
