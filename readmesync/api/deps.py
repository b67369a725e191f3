"""Request dependencies -- hand the startup settings to route handlers."""

from fastapi import Request

from readmesync.config import Settings


def get_settings(request: Request) -> Settings:
    """Return the settings the app was created with."""
    return request.app.state.settings
