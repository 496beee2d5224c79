"""Provide methods for working with user accounts."""

import logging
from typing import Any, Optional, Tuple

from ..storage import PathStore, NotFound, AlreadyExists, InvalidPath
from ..storage.domain import Path, to_path, has_control_character
from . import domain, passwords
from .domain import User
from .exceptions import UserNotFound, UserDoesNotExist, UserAlreadyExists, \
    UserCreationFailed, InvalidUserData, UserNotConfirmed, InvalidEmail, \
    InvalidPassword

logger = logging.getLogger(__name__)

HOME_DIR: Path = ('home',)
USER_DIR: Path = ('home', 'users')
"""Accounts live at ``home/users/<email>``."""

MAX_EMAIL_LENGTH = 254


def validate_email(email: Any) -> bool:
    """
    Cheap syntactic check of an e-mail address.

    Requires exactly one ``@``, between four and :data:`MAX_EMAIL_LENGTH`
    characters, and nothing that would break the address out of its path
    segment: no separator, whitespace or control characters. This is not
    RFC 5322 validation.
    """
    return (isinstance(email, str)
            and 3 < len(email) <= MAX_EMAIL_LENGTH
            and email.count('@') == 1
            and '/' not in email
            and not any(char.isspace() for char in email)
            and not has_control_character(email))


def _valid_password(password: Any) -> bool:
    return isinstance(password, str) and len(password) > 0


class AccountService(object):
    """
    User accounts on top of a :class:`.PathStore`.

    Holds no account state of its own: every call reads what it needs from
    the store and writes its result back before returning. Updates carry
    the version that was read, so two callers racing to change the same
    account get a :class:`.Conflict` instead of silently losing a write.
    """

    def __init__(self, store: PathStore,
                 password_iterations: int = passwords.DEFAULT_ITERATIONS) \
            -> None:
        self.store = store
        self.password_iterations = password_iterations

    def _user_path(self, email: str) -> Path:
        if not isinstance(email, str) or len(email) > MAX_EMAIL_LENGTH:
            raise InvalidEmail(f'Not usable as an account key: {email!r}')
        try:
            return to_path(USER_DIR + (email,))
        except InvalidPath as e:
            raise InvalidEmail(f'Not usable as an account key: {email!r}') \
                from e

    def _load(self, email: str) -> Tuple[User, int]:
        """Read the account and the version it was stored at."""
        item = self.store.get_file(self._user_path(email))
        if item is None:
            raise UserNotFound(f'No such user: {email}')
        try:
            user = domain.from_json(item.data)
        except InvalidUserData as e:
            logger.error('Unreadable account record for %s: %s', email, e)
            raise
        if user.email != email:
            logger.error('Account record for %s names %s', email, user.email)
            raise InvalidUserData(f'Record at {email} belongs to {user.email}')
        return user, item.version

    def _save(self, user: User, version: int) -> None:
        self.store.update_file(self._user_path(user.email),
                               domain.to_json(user),
                               expected_version=version)

    def user_exists(self, email: str) -> bool:
        """
        Determine whether an account is stored for ``email``.

        Parameters
        ----------
        email : str

        Returns
        -------
        bool

        """
        return self.store.get_file(self._user_path(email)) is not None

    def get_user(self, email: str) -> User:
        """
        Load the account stored for ``email``.

        Raises
        ------
        :class:`.UserNotFound`
        :class:`.InvalidUserData`
            If the stored record cannot be read as an account.

        """
        user, _ = self._load(email)
        return user

    def create_user(self, email: str, password: str) -> User:
        """
        Register a new, unconfirmed account.

        Parameters
        ----------
        email : str
        password : str
            Hashed before it is stored.

        Returns
        -------
        :class:`.User`

        Raises
        ------
        :class:`.UserCreationFailed`
            If ``email`` or ``password`` is not acceptable.
        :class:`.UserAlreadyExists`

        """
        if not validate_email(email):
            raise UserCreationFailed(f'Invalid e-mail address: {email!r}')
        try:
            path = self._user_path(email)
        except InvalidEmail as e:
            raise UserCreationFailed(f'Invalid e-mail address: {email!r}') \
                from e
        if self.user_exists(email):
            raise UserAlreadyExists(f'User already exists: {email}')
        if not _valid_password(password):
            raise UserCreationFailed('Password must be a non-empty string')
        try:
            user = domain.new_user(email, password, self.password_iterations)
        except (TypeError, ValueError) as e:
            raise UserCreationFailed(f'Could not create user: {e}') from e

        self.store.create_directory(HOME_DIR)
        self.store.create_directory(USER_DIR)
        try:
            self.store.create_file(path, domain.to_json(user))
        except AlreadyExists as e:
            raise UserAlreadyExists(f'User already exists: {email}') from e
        logger.info('Created user %s', email)
        return user

    def authenticate_user(self, email: str, password: str) -> bool:
        """
        Check a password for a confirmed account.

        Returns
        -------
        bool
            Whether the password is correct.

        Raises
        ------
        :class:`.UserNotFound`
        :class:`.UserNotConfirmed`
            If the account is not confirmed, whatever the password.

        """
        user, _ = self._load(email)
        if not user.confirmed:
            logger.debug('Refused login for unconfirmed user %s', email)
            raise UserNotConfirmed(f'User not confirmed: {email}')
        return user.authenticate(password)

    def update_password(self, email: str, new_password: str) -> None:
        """Replace the password of an existing account."""
        if not _valid_password(new_password):
            raise InvalidPassword('Password must be a non-empty string')
        user, version = self._load(email)
        self._save(user.with_password(new_password,
                                      self.password_iterations), version)
        logger.info('Updated password for %s', email)

    def set_dongle(self, email: str, dongle: Optional[str]) -> None:
        """Bind an account to a device token."""
        user, version = self._load(email)
        self._save(user.with_dongle(dongle), version)
        logger.info('Updated dongle for %s', email)

    def get_dongle(self, email: str) -> Optional[str]:
        """Get the device token an account is bound to."""
        user, _ = self._load(email)
        return user.dongle

    def confirm_user(self, email: str) -> None:
        """Mark an account as confirmed. Confirmation is never undone."""
        user, version = self._load(email)
        self._save(user.as_confirmed(), version)
        logger.info('Confirmed user %s', email)

    def delete_user(self, email: str) -> None:
        """
        Remove an account.

        Raises
        ------
        :class:`.UserDoesNotExist`

        """
        if not self.user_exists(email):
            raise UserDoesNotExist(f'User does not exist: {email}')
        try:
            self.store.delete_file(self._user_path(email))
        except NotFound as e:
            raise UserDoesNotExist(f'User does not exist: {email}') from e
        logger.info('Deleted user %s', email)
