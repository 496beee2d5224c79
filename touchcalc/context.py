"""Helpers for finding the active configuration and per-context globals."""

import os
from typing import Any, Mapping, Optional

from flask import current_app, g, has_app_context


def get_application_config(app: Optional[Any] = None) -> Mapping:
    """
    Get the configuration for an application.

    Parameters
    ----------
    app : :class:`flask.Flask` or None
        If not provided, the application bound to the current context is
        used. Outside of an application context, falls back to the process
        environment.

    Returns
    -------
    dict-like

    """
    if app is not None:
        return app.config
    if has_app_context():
        return current_app.config
    return os.environ


def get_application_global() -> Optional[Any]:
    """Get the application-context global object, if there is one."""
    if has_app_context():
        return g
    return None
