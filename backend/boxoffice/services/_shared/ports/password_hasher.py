from __future__ import annotations

from typing import Protocol


class PasswordHasher(Protocol):
    """Port for one-way password hashing."""

    def hash(self, raw: str) -> str: ...

    def verify(self, raw: str, hashed: str) -> bool:
        """Return ``True`` on match; malformed hashes MUST yield ``False``."""
