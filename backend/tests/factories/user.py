"""Factory Boy definition for :class:`subtrack.models.user.User`."""

from __future__ import annotations

import factory

from subtrack.auth.password import PasswordPolicy, PasswordVerifier
from subtrack.models.user import User
from tests.factories import BaseFactory
from tests.helpers.auth import DEFAULT_PASSWORD

# Low cost keeps hashing fast; the hash format is the same as production.
_verifier = PasswordVerifier(PasswordPolicy(hash_cost=4))


class UserFactory(BaseFactory):
    """
    Build persisted :class:`subtrack.models.user.User` instances.

    Pass ``password=...`` to hash a specific plaintext; it is never stored.
    """

    class Meta:
        model = User

    class Params:
        password = DEFAULT_PASSWORD

    email = factory.Sequence(lambda n: f"user{n}@example.com")
    password_hash = factory.LazyAttribute(lambda o: _verifier.create_hash(o.password))
