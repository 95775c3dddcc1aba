"""ASGI entrypoint for the meal plan validation API."""

from nutrition_validator.api.app import create_app
from nutrition_validator.containers import build_container

app = create_app(build_container())
