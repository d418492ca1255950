"""Repository permission levels and their ordering.

GitHub reports a collaborator's access as one of six roles. Slash commands
declare a floor (``read`` for both built-in commands) and the dispatcher
admits an actor whose role ranks at or above it.

Examples
--------
>>> PermissionLevel.WRITE.at_least(PermissionLevel.READ)
True
>>> PermissionLevel.parse("Triage")
<PermissionLevel.TRIAGE: 'triage'>

"""

from __future__ import annotations

import enum


class PermissionLevel(enum.StrEnum):
    """Repository roles in ascending order of privilege."""

    NONE = "none"
    READ = "read"
    TRIAGE = "triage"
    WRITE = "write"
    MAINTAIN = "maintain"
    ADMIN = "admin"

    @property
    def rank(self) -> int:
        """Return the position of this level in the privilege order."""
        return _RANKS[self]

    def at_least(self, required: PermissionLevel) -> bool:
        """Return True when this level satisfies the *required* floor."""
        return self.rank >= required.rank

    @classmethod
    def parse(cls, raw: str) -> PermissionLevel:
        """Parse a case-insensitive role name.

        Raises
        ------
        ValueError
            If *raw* does not name a known role.

        """
        return cls(raw.strip().lower())


_RANKS: dict[PermissionLevel, int] = {
    level: index for index, level in enumerate(PermissionLevel)
}

__all__ = ["PermissionLevel"]
