from __future__ import annotations

from passlib.context import CryptContext
from passlib.exc import MissingBackendError

from authcore.application.ports.password_hasher_port import PasswordHasherPort


class PasswordHasher(PasswordHasherPort):
    """argon2 for new hashes; bcrypt hashes from older accounts still verify."""

    def __init__(self, *, schemes: tuple[str, ...] = ("argon2", "bcrypt")):
        self._ctx = CryptContext(
            schemes=list(schemes),
            deprecated="auto",
        )

    def hash(self, plain_password: str) -> str:
        return self._ctx.hash(plain_password)

    def verify(self, plain_password: str, password_hash: str) -> bool:
        # Mismatch returns False; an empty, unrecognized or unverifiable hash raises ValueError.
        if not password_hash:
            raise ValueError("password hash is empty.")
        try:
            return bool(self._ctx.verify(plain_password, password_hash))
        except MissingBackendError as exc:
            raise ValueError("no backend available for this password hash scheme.") from exc

    def needs_rehash(self, password_hash: str) -> bool:
        return bool(self._ctx.needs_update(password_hash))
