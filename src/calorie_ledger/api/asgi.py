"""ASGI entrypoint for the calorie ledger API."""

from calorie_ledger.api.app import create_app
from calorie_ledger.containers import build_container

app = create_app(build_container())
