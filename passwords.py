"""Password hashing and verification (bcrypt through pwdlib)."""
from functools import lru_cache

from pwdlib import PasswordHash
from pwdlib.exceptions import UnknownHashError
from pwdlib.hashers.bcrypt import BcryptHasher

DEFAULT_ROUNDS = 10

# bcrypt only ever looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


@lru_cache
def get_password_hasher(rounds: int = DEFAULT_ROUNDS) -> PasswordHash:
    return PasswordHash((BcryptHasher(rounds=rounds),))


def _bcrypt_input(password: str) -> bytes:
    # Applied identically when hashing and verifying, so long passwords keep working
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Return a salted bcrypt hash suitable for storing on ``User.password_hash``.

    Passwords longer than 72 bytes are truncated, as bcrypt itself always did.
    """
    return get_password_hasher(rounds).hash(_bcrypt_input(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plaintext password against a stored hash.

    A stored value that is not a recognised hash never matches.
    """
    try:
        return get_password_hasher().verify(_bcrypt_input(plain_password), hashed_password)
    except UnknownHashError:
        return False
