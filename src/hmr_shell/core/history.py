"""
Command history for the shell.

History is a fixed-capacity ring buffer of raw command strings, read
most-recent-first, with a recall cursor for Up/Down navigation.
"""

from __future__ import annotations

DEFAULT_MAX_HISTORY = 100


class CommandHistory:
    """Fixed-capacity, most-recent-first command history."""

    def __init__(self, max_size: int = DEFAULT_MAX_HISTORY):
        if max_size < 1:
            raise ValueError(f"History size must be positive, got {max_size}")
        self.max_size = max_size
        self._slots: list[str | None] = [None] * max_size
        self._head = -1  # slot of the most recent entry
        self._count = 0
        self.index = -1  # recall cursor, -1 = not navigating

    def __len__(self) -> int:
        return self._count

    def __getitem__(self, i: int) -> str:
        """Entry by age: 0 is the most recent."""
        if i < 0:
            i += self._count
        if not 0 <= i < self._count:
            raise IndexError("history index out of range")
        return self._slots[(self._head - i) % self.max_size]

    def __iter__(self):
        for i in range(self._count):
            yield self[i]

    @property
    def latest(self) -> str | None:
        return self[0] if self._count else None

    def add(self, command: str) -> bool:
        """Append a command unless it repeats the most recent one.

        Always resets the recall cursor. Returns True if stored.
        """
        self.index = -1
        if self.latest == command:
            return False
        self._head = (self._head + 1) % self.max_size
        self._slots[self._head] = command
        self._count = min(self._count + 1, self.max_size)
        return True

    def reset_cursor(self) -> None:
        self.index = -1

    def navigate(self, direction: str) -> str | None:
        """Move the recall cursor.

        "up" goes to older entries and returns the entry, or None when
        already at the oldest. "down" goes toward the present; stepping past
        the most recent entry returns "" once, after which it returns None.
        """
        if direction == "up":
            if self.index < self._count - 1:
                self.index += 1
                return self[self.index]
            return None
        if direction == "down":
            if self.index > 0:
                self.index -= 1
                return self[self.index]
            if self.index == 0:
                self.index = -1
                return ""
            return None
        raise ValueError(f"Unknown history direction: {direction!r}")

    def entries(self) -> list[str]:
        """All entries, most recent first."""
        return list(self)

    def clear(self) -> None:
        self._slots = [None] * self.max_size
        self._head = -1
        self._count = 0
        self.index = -1
