"""
Command-line access to user accounts.

The storage backend is taken from the environment, in the same way as the
application (see :mod:`touchcalc.config`).

.. code-block:: bash

   $ STORAGE_BACKEND=filesystem STORAGE_ROOT=./data \\
       touchcalc-accounts create-user --email joe@bloggs.com
   Password:
   Repeat for confirmation:
   Created joe@bloggs.com
   $ touchcalc-accounts confirm-user joe@bloggs.com
   Confirmed joe@bloggs.com

"""

from typing import Callable, Optional

import click

from . import config
from .app_logging import setup_logger
from .accounts import get_service, AccountService
from .accounts.exceptions import AccountError, InvalidEmail, InvalidPassword
from .storage import StorageError


def _service() -> AccountService:
    try:
        return get_service()
    except (StorageError, ValueError) as e:
        raise click.ClickException(f'Cannot open storage: {e}')


def _run(action: Callable[[AccountService], Optional[str]]) -> None:
    """Run an account operation, turning its failures into exit codes."""
    service = _service()
    try:
        message = action(service)
    except (AccountError, InvalidEmail, InvalidPassword) as e:
        raise click.ClickException(f'{type(e).__name__}: {e}')
    except StorageError as e:
        raise click.ClickException(f'Storage failed: {e}')
    if message is not None:
        click.echo(message)


@click.group()
@click.version_option(version=config.VERSION)
@click.option('--loglevel', type=str, default=config.LOGLEVEL,
              show_default=True,
              help='Log level for JSON log output on stderr.')
def cli(loglevel: str) -> None:
    """Manage TouchCalc user accounts."""
    setup_logger(loglevel)


@cli.command('create-user')
@click.option('--email', prompt='Email address')
@click.password_option()
def create_user(email: str, password: str) -> None:
    """Register a new, unconfirmed account."""
    _run(lambda s: f'Created {s.create_user(email, password).email}')


@cli.command('confirm-user')
@click.argument('email')
def confirm_user(email: str) -> None:
    """Confirm an account so that it can log in."""
    def _confirm(service: AccountService) -> str:
        service.confirm_user(email)
        return f'Confirmed {email}'
    _run(_confirm)


@cli.command('authenticate')
@click.argument('email')
@click.option('--password', prompt=True, hide_input=True)
def authenticate(email: str, password: str) -> None:
    """Check a password. Exits non-zero if it is wrong."""
    def _authenticate(service: AccountService) -> str:
        if not service.authenticate_user(email, password):
            raise click.ClickException('Incorrect password')
        return 'OK'
    _run(_authenticate)


@cli.command('set-password')
@click.argument('email')
@click.password_option()
def set_password(email: str, password: str) -> None:
    """Replace the password of an account."""
    def _update(service: AccountService) -> str:
        service.update_password(email, password)
        return f'Updated password for {email}'
    _run(_update)


@cli.command('set-dongle')
@click.argument('email')
@click.argument('token')
def set_dongle(email: str, token: str) -> None:
    """Bind an account to a device token."""
    def _set(service: AccountService) -> str:
        service.set_dongle(email, token)
        return f'Updated dongle for {email}'
    _run(_set)


@cli.command('get-dongle')
@click.argument('email')
def get_dongle(email: str) -> None:
    """Print the device token of an account."""
    _run(lambda s: s.get_dongle(email) or '')


@cli.command('exists')
@click.argument('email')
def exists(email: str) -> None:
    """Print whether an account exists."""
    _run(lambda s: 'yes' if s.user_exists(email) else 'no')


@cli.command('delete-user')
@click.argument('email')
@click.confirmation_option(prompt='Delete this account?')
def delete_user(email: str) -> None:
    """Remove an account."""
    def _delete(service: AccountService) -> str:
        service.delete_user(email)
        return f'Deleted {email}'
    _run(_delete)


if __name__ == '__main__':
    cli()
