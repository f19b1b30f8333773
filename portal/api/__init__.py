"""API routers."""

from portal.api import achievements, api_keys, apps, lists, players

__all__ = [
    "achievements",
    "api_keys",
    "apps",
    "lists",
    "players",
]
