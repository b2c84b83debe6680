"""Password hashing capability."""

from typing import Protocol

from pwdlib import PasswordHash


class CredentialHasher(Protocol):
    """Turns plaintext passwords into stored hashes and checks them back."""

    def hash(self, password: str) -> str: ...

    def verify(self, password: str, password_hash: str) -> bool: ...


class Argon2CredentialHasher:
    """Salted Argon2 hashing through pwdlib.

    Salt is generated per hash and embedded in the returned string, so two
    users with the same password never share a stored hash.
    """

    def __init__(self, password_hash: PasswordHash | None = None):
        self._password_hash = password_hash or PasswordHash.recommended()

    def hash(self, password: str) -> str:
        return self._password_hash.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        return self._password_hash.verify(password, password_hash)


default_hasher = Argon2CredentialHasher()
