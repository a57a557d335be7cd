"""Undo/redo stack for edit commands.

Provides functionality for:
- Recording commands after a successful execute
- Stepping the undo/redo cursor
- Summarizing the stack for history UIs
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from cliptiming.commands.base import EditCommand
from cliptiming.schemas.operation import HistoryResponse, OperationSummary

logger = logging.getLogger(__name__)


@dataclass
class HistoryEntry:
    command: EditCommand
    executed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class CommandHistory:
    """Linear history with a cursor; pushing a command drops the redo tail."""

    def __init__(self, limit: int = 100):
        self.limit = limit
        self._entries: list[HistoryEntry] = []
        # Index of the last applied entry, -1 when nothing is applied
        self._index = -1

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def can_undo(self) -> bool:
        return self._index >= 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._entries) - 1

    def push(self, command: EditCommand) -> None:
        dropped = len(self._entries) - (self._index + 1)
        if dropped:
            logger.debug(f"Dropping {dropped} redoable commands")
        del self._entries[self._index + 1:]
        self._entries.append(HistoryEntry(command=command))

        if self.limit > 0 and len(self._entries) > self.limit:
            del self._entries[: len(self._entries) - self.limit]
        self._index = len(self._entries) - 1

    def peek_undo(self) -> EditCommand | None:
        return self._entries[self._index].command if self.can_undo else None

    def peek_redo(self) -> EditCommand | None:
        return self._entries[self._index + 1].command if self.can_redo else None

    def mark_undone(self) -> None:
        if self.can_undo:
            self._index -= 1

    def mark_redone(self) -> None:
        if self.can_redo:
            self._index += 1

    def clear(self) -> None:
        self._entries = []
        self._index = -1

    def summary(self) -> HistoryResponse:
        return HistoryResponse(
            operations=[
                OperationSummary(
                    index=i,
                    command=entry.command.name,
                    state="applied" if i <= self._index else "undone",
                    executed_at=entry.executed_at,
                )
                for i, entry in enumerate(self._entries)
            ],
            can_undo=self.can_undo,
            can_redo=self.can_redo,
        )
