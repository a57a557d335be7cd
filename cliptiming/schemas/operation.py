"""Schemas for command history.

These records summarize what the undo/redo stack holds so a host can
render an Edit menu or a history panel without touching command objects.
"""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OperationSummary(BaseModel):
    """Summary of one command on the history stack."""

    index: int
    command: str
    state: Literal["applied", "undone"]
    executed_at: datetime = Field(default_factory=_utcnow)


class HistoryResponse(BaseModel):
    """Snapshot of the history stack."""

    operations: list[OperationSummary] = Field(default_factory=list)
    can_undo: bool = False
    can_redo: bool = False
