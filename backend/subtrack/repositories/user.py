"""User repository: lookups and inserts for :class:`User`."""

from __future__ import annotations

from subtrack.models.user import User
from subtrack.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    It never hashes or verifies passwords; it stores what the service hands it.
    """

    model = User

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        return self.find_one_by(User.email, email.strip().lower())

    def create(self, *, email: str, password_hash: str) -> User:
        return self.add(User(email=email, password_hash=password_hash))
