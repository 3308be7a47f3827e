"""bcrypt adapter for the :class:`PasswordHasher` port."""

from __future__ import annotations

from dataclasses import dataclass

import bcrypt

from boxoffice.services._shared.ports import PasswordHasher

# bcrypt only looks at the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72


def _encode(raw: str) -> bytes:
    # Truncate explicitly: recent bcrypt releases reject longer inputs.
    return raw.encode("utf-8")[:BCRYPT_MAX_BYTES]


@dataclass(slots=True)
class BcryptPasswordHasher(PasswordHasher):
    """
    Salted bcrypt hashing with a configurable work factor.

    :param rounds: Cost factor (log2 of iterations), 4..31.
    """

    rounds: int = 10

    def hash(self, raw: str) -> str:
        return bcrypt.hashpw(_encode(raw), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, raw: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(_encode(raw), hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False
