"""Exceptions."""


class AccountError(RuntimeError):
    """Base class for account failures."""


class UserNotFound(AccountError):
    """No account is stored for the address."""


class UserDoesNotExist(AccountError):
    """Tried to delete an account that is not there."""


class UserAlreadyExists(AccountError):
    """An account is already stored for the address."""


class UserCreationFailed(AccountError):
    """Could not build a new account from the data provided."""


class InvalidUserData(AccountError):
    """A stored account record cannot be read."""


class AuthenticationFailed(AccountError):
    """Failed to authenticate user with provided credentials."""


class UserNotConfirmed(AuthenticationFailed):
    """The account has not been confirmed, so it may not log in."""


class PasswordAuthenticationFailed(RuntimeError):
    """Password is not correct."""


class InvalidEmail(ValueError):
    """The address cannot be used to locate an account."""


class InvalidPassword(ValueError):
    """The password cannot be used for an account."""
