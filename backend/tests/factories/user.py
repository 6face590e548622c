"""Factory Boy definition for :class:`sessionauth.models.user.User`."""

from __future__ import annotations

import factory
from sessionauth.models.user import User

from tests.factories import BaseFactory

DEFAULT_PASSWORD = "Passw0rd!"


class UserFactory(BaseFactory):
    """
    Build persisted :class:`sessionauth.models.user.User` instances.

    Notes
    -----
    - Users are verified by default; pass ``is_verified=False`` for the
      pending-verification state.
    - The raw password is :data:`DEFAULT_PASSWORD` unless given.
    """

    class Meta:
        model = User

    id = None  # let autoincrement handle it
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    name = factory.Faker("name")
    is_verified = True
    password_hash = factory.LazyFunction(lambda: "")  # set via postgen

    @factory.post_generation
    def password(obj, create, extracted, **kwargs):
        """Set password using model setter (ensures hashing)."""
        obj.password = extracted or DEFAULT_PASSWORD
