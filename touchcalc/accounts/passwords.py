"""Salted password hashes."""

import hashlib
import secrets
from base64 import b64encode, b64decode
import binascii

from .exceptions import PasswordAuthenticationFailed

ALGORITHM = 'pbkdf2_sha256'
SALT_BYTES = 16
DEFAULT_ITERATIONS = 260000


def _hash_salt_and_password(salt: bytes, password: str,
                            iterations: int) -> bytes:
    encoded = password.encode('utf-8', 'surrogatepass')
    return hashlib.pbkdf2_hmac('sha256', encoded, salt, iterations)


def hash_password(password: str, iterations: int = DEFAULT_ITERATIONS) -> str:
    """
    Generate a secure hash of a password.

    The result looks like ``pbkdf2_sha256$<iterations>$<base64>``, where the
    base64 part is the salt followed by the digest.
    """
    salt = secrets.token_bytes(SALT_BYTES)
    hashed = _hash_salt_and_password(salt, password, iterations)
    encoded = b64encode(salt + hashed).decode('ascii')
    return f'{ALGORITHM}${iterations}${encoded}'


def check_password(password: str, encrypted: str) -> bool:
    """
    Check a password against an encrypted hash.

    Returns
    -------
    bool
        Always ``True``; a mismatch raises instead.

    Raises
    ------
    :class:`.PasswordAuthenticationFailed`
        If the password does not match, or ``encrypted`` is not a hash
        produced by :func:`hash_password`.

    """
    try:
        algorithm, iterations, encoded = encrypted.split('$')
        rounds = int(iterations)
        decoded = b64decode(encoded.encode('ascii'), validate=True)
    except (AttributeError, ValueError, binascii.Error) as e:
        raise PasswordAuthenticationFailed('Malformed password hash') from e
    if algorithm != ALGORITHM or rounds < 1 or len(decoded) <= SALT_BYTES:
        raise PasswordAuthenticationFailed('Unsupported password hash')
    salt = decoded[:SALT_BYTES]
    enc_hashed = decoded[SALT_BYTES:]
    pass_hashed = _hash_salt_and_password(salt, password, rounds)
    if not secrets.compare_digest(pass_hashed, enc_hashed):
        raise PasswordAuthenticationFailed('Incorrect password')
    return True
