"""Password hashing (bcrypt) and the pre-hash entropy gate.

Policy values are carried by :class:`PasswordPolicy` and handed to
:class:`PasswordVerifier` at construction; nothing here reads global state.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import bcrypt

from subtrack.auth.errors import InputTooLongError, WeakPasswordError

log = logging.getLogger(__name__)

#: bcrypt only looks at the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72

# Character classes used to estimate the search space of a password.
_REPLACE_CHARS = "!@$&*"
_SEP_CHARS = "_-., "
_OTHER_SPECIAL_CHARS = "\"#%'()+/:;<=>?[\\]^{|}~"
_LOWER_CHARS = "abcdefghijklmnopqrstuvwxyz"
_UPPER_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_DIGIT_CHARS = "0123456789"

_CHAR_CLASSES = (
    _REPLACE_CHARS,
    _SEP_CHARS,
    _OTHER_SPECIAL_CHARS,
    _LOWER_CHARS,
    _UPPER_CHARS,
    _DIGIT_CHARS,
)

# Keyboard and alphabet runs that add little entropy ("abcdef", "12345", "qwerty").
_SEQUENCES = (
    "0123456789",
    "qwertyuiop",
    "asdfghjkl",
    "zxcvbnm",
    "abcdefghijklmnopqrstuvwxyz",
)


@dataclass(frozen=True, slots=True)
class PasswordPolicy:
    """
    Hashing cost and entropy threshold for credential secrets.

    :param hash_cost: bcrypt work factor (log2 rounds, 4..31).
    :type hash_cost: int
    :param min_length: Minimum length assumed by the entropy threshold.
    :type min_length: int
    :param alphabet_size: Alphabet size assumed by the entropy threshold.
    :type alphabet_size: int
    """

    hash_cost: int = 12
    min_length: int = 12
    alphabet_size: int = 89

    @property
    def min_entropy_bits(self) -> float:
        """Return ``log2(alphabet_size ** min_length)``."""
        return self.min_length * math.log2(self.alphabet_size)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> PasswordPolicy:
        """Build a policy from a Flask config mapping."""
        return cls(
            hash_cost=int(config.get("PASSWORD_HASH_COST", cls.hash_cost)),
            min_length=int(config.get("PASSWORD_MIN_LENGTH", cls.min_length)),
            alphabet_size=int(config.get("PASSWORD_ALPHABET_SIZE", cls.alphabet_size)),
        )


# --------------------------------------------------------------------------- #
# Entropy estimation
# --------------------------------------------------------------------------- #


def _base(password: str) -> int:
    """Sum the sizes of the character classes present in ``password``."""
    seen_classes: set[str] = set()
    unclassified = 0
    for char in set(password):
        for char_class in _CHAR_CLASSES:
            if char in char_class:
                seen_classes.add(char_class)
                break
        else:
            unclassified += 1
    return unclassified + sum(len(c) for c in seen_classes)


def _drop_sequence_runs(password: str, sequence: str) -> str:
    kept: list[str] = []
    run = 0
    prev = ""
    for char in password:
        if (
            prev
            and prev in sequence
            and char in sequence
            and sequence.index(char) == sequence.index(prev) + 1
        ):
            run += 1
        else:
            run = 1
        if run <= 2:
            kept.append(char)
        prev = char
    return "".join(kept)


def _drop_repeats(password: str) -> str:
    kept: list[str] = []
    for char in password:
        if len(kept) >= 2 and kept[-1] == char and kept[-2] == char:
            continue
        kept.append(char)
    return "".join(kept)


def _effective_length(password: str) -> int:
    for sequence in _SEQUENCES:
        password = _drop_sequence_runs(password, sequence)
    return len(_drop_repeats(password))


def estimate_entropy(password: str) -> float:
    """
    Estimate the entropy of ``password`` in bits.

    The estimate is ``log2(base ** length)`` where ``base`` is the size of the
    union of character classes used and ``length`` ignores characters repeated
    more than twice in a row and runs longer than two along common sequences.

    :param password: Plaintext candidate.
    :type password: str
    :returns: Estimated entropy in bits (``0.0`` for an empty string).
    :rtype: float
    """
    base = _base(password)
    length = _effective_length(password)
    if base == 0 or length == 0:
        return 0.0
    return length * math.log2(base)


# --------------------------------------------------------------------------- #
# Verifier
# --------------------------------------------------------------------------- #


class PasswordVerifier:
    """Hash and check credential secrets according to a :class:`PasswordPolicy`."""

    def __init__(self, policy: PasswordPolicy | None = None) -> None:
        self.policy = policy or PasswordPolicy()

    def check_strength(self, password: str) -> float:
        """
        Reject passwords below the policy's entropy threshold.

        Callers run this before :meth:`create_hash`; hashing itself does not
        enforce strength.

        :param password: Plaintext candidate.
        :type password: str
        :returns: The estimated entropy in bits.
        :rtype: float
        :raises WeakPasswordError: When the estimate is below the threshold.
        """
        bits = estimate_entropy(password)
        if bits < self.policy.min_entropy_bits:
            raise WeakPasswordError(self.policy.min_entropy_bits)
        return bits

    def create_hash(self, password: str) -> str:
        """
        Hash ``password`` with bcrypt using the configured cost.

        :param password: Plaintext secret.
        :type password: str
        :returns: Modular-crypt bcrypt hash.
        :rtype: str
        :raises InputTooLongError: If the UTF-8 encoding exceeds 72 bytes.
        """
        raw = password.encode("utf-8")
        if len(raw) > BCRYPT_MAX_BYTES:
            raise InputTooLongError(BCRYPT_MAX_BYTES)
        salt = bcrypt.gensalt(rounds=self.policy.hash_cost)
        return bcrypt.hashpw(raw, salt).decode("utf-8")

    def is_valid(self, password: str, password_hash: str) -> bool:
        """
        Return ``True`` when ``password`` matches ``password_hash``.

        Mismatches, over-long input and malformed hashes all yield ``False``.
        """
        raw = password.encode("utf-8")
        if len(raw) > BCRYPT_MAX_BYTES or not password_hash:
            return False
        try:
            return bcrypt.checkpw(raw, password_hash.encode("utf-8"))
        except ValueError:
            log.warning("password.malformed_hash")
            return False


__all__ = [
    "BCRYPT_MAX_BYTES",
    "PasswordPolicy",
    "PasswordVerifier",
    "estimate_entropy",
]
