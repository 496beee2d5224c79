"""Defines the user account as it is kept in the path store."""

import json
from typing import Any, Dict, NamedTuple, Optional

from . import passwords
from .exceptions import InvalidUserData, PasswordAuthenticationFailed


class User(NamedTuple):
    """A user account."""

    email: str
    """The address the account is registered under. Never changes."""

    password_hash: str
    """Output of :func:`.passwords.hash_password`; never the password."""

    confirmed: bool = False
    """Whether the address has been confirmed. Once set, stays set."""

    dongle: Optional[str] = None
    """Opaque device-binding token."""

    def authenticate(self, password: str) -> bool:
        """Whether ``password`` matches the stored hash."""
        try:
            return passwords.check_password(password, self.password_hash)
        except PasswordAuthenticationFailed:
            return False

    def with_password(self, password: str,
                      iterations: int = passwords.DEFAULT_ITERATIONS) \
            -> 'User':
        """Get a copy of this account with a new password."""
        return self._replace(
            password_hash=passwords.hash_password(password, iterations)
        )

    def with_dongle(self, dongle: Optional[str]) -> 'User':
        """Get a copy of this account bound to a different device token."""
        return self._replace(dongle=dongle)

    def as_confirmed(self) -> 'User':
        """Get a confirmed copy of this account."""
        return self._replace(confirmed=True)


def new_user(email: str, password: str,
             iterations: int = passwords.DEFAULT_ITERATIONS) -> User:
    """Create an unconfirmed account with a freshly hashed password."""
    return User(email=email,
                password_hash=passwords.hash_password(password, iterations))


def to_dict(user: User) -> Dict[str, Any]:
    """Generate a dict representation of a :class:`.User`."""
    return dict(user._asdict())


def from_dict(data: Any) -> User:
    """
    Instantiate a :class:`.User` from its dict representation.

    Raises
    ------
    :class:`.InvalidUserData`
        If ``data`` is not a dict with correctly typed fields.

    """
    if not isinstance(data, dict):
        raise InvalidUserData(f'Expected an object, got {type(data).__name__}')
    expected = {'email': str, 'password_hash': str, 'confirmed': bool}
    for field, field_type in expected.items():
        if not isinstance(data.get(field), field_type):
            raise InvalidUserData(f'Missing or invalid field {field!r}')
    dongle = data.get('dongle')
    if dongle is not None and not isinstance(dongle, str):
        raise InvalidUserData("Invalid field 'dongle'")
    return User(email=data['email'], password_hash=data['password_hash'],
                confirmed=data['confirmed'], dongle=dongle)


def to_json(user: User) -> str:
    """Serialize a :class:`.User` for storage."""
    return json.dumps(to_dict(user), sort_keys=True)


def from_json(raw: Any) -> User:
    """Deserialize a stored :class:`.User`."""
    if not isinstance(raw, str):
        raise InvalidUserData('Stored account is not a text record')
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise InvalidUserData(f'Stored account is not JSON: {e}') from e
    return from_dict(data)
