# peoplehub/auth.py
#
# Authentication happens upstream. The backend only consumes the caller's
# role and turns it into the three facts the analytics core gates on.

from dataclasses import dataclass
from typing import Optional

ROLES = ("user", "manager", "super_admin")


@dataclass(frozen=True)
class AccessContext:
    signed_in:      bool = False
    is_manager:     bool = False
    is_super_admin: bool = False

    @classmethod
    def from_role(cls, role: Optional[str]) -> "AccessContext":
        """None → signed out. Super admins are managers too."""
        if role is None:
            return cls()
        role = role.strip().lower()
        if role not in ROLES:
            raise ValueError(f"Unknown role: {role}. Options: {list(ROLES)}")
        return cls(
            signed_in=True,
            is_manager=role in ("manager", "super_admin"),
            is_super_admin=role == "super_admin",
        )
