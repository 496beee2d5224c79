"""
User accounts.

Each account is one record in the path store at ``home/users/<email>``.
See :class:`.service.AccountService` for the operations on accounts.
"""

from typing import Any

from ..context import get_application_config, get_application_global
from ..storage import current_store, get_store
from . import domain, exceptions, passwords
from .domain import User
from .service import AccountService, validate_email


def init_app(app: Any = None) -> None:
    """Set default configuration parameters for an application instance."""
    config = get_application_config(app)
    config.setdefault('PASSWORD_HASH_ITERATIONS',
                      str(passwords.DEFAULT_ITERATIONS))


def get_service(app: Any = None) -> AccountService:
    """Build an :class:`.AccountService` on the configured store."""
    config = get_application_config(app)
    iterations = int(config.get('PASSWORD_HASH_ITERATIONS',
                                passwords.DEFAULT_ITERATIONS))
    store = get_store(app) if app is not None else current_store()
    return AccountService(store, password_iterations=iterations)


def current_service() -> AccountService:
    """Get/create the :class:`.AccountService` for this context."""
    g = get_application_global()
    if g is None:
        return get_service()
    if 'account_service' not in g:
        g.account_service = get_service()
    service: AccountService = g.account_service
    return service
