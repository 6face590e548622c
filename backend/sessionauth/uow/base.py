"""
Transaction boundary used by the account service and the identity store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sessionauth.repositories import UserRepository


class UnitOfWork(ABC):
    """
    One transaction over the ``users`` table.

    Writes made through :attr:`users` become visible together on ``commit``;
    a raised exception inside the ``with`` block discards all of them.
    """

    users: UserRepository

    def __enter__(self) -> UnitOfWork:
        return self

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
