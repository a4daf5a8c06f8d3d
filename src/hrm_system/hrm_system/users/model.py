from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import HrmRole


@dataclass(frozen=True)
class HrmUser:
    """Domain entity: a person known to the HRM module.

    Subjects (people being evaluated) and markers (admins scoring them) are
    both HrmUsers; the role decides what they may do.
    """

    user_id: int
    full_name: str
    email: str
    hrm_role: HrmRole
    is_active: bool = True
