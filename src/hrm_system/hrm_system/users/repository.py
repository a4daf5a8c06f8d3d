from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import HrmUser


class UserRepository(Protocol):
    """Repository interface for HrmUser.

    Services depend on this interface, never on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[HrmUser]:
        raise NotImplementedError

    def get_many(self, user_ids: Sequence[int]) -> dict[int, HrmUser]:
        raise NotImplementedError
