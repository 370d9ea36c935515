"""ASGI entrypoint for the food tracker API."""

from food_tracker.api.app import create_app
from food_tracker.containers import build_container

app = create_app(build_container())
