"""Clip timing and command engine for timeline-based video editing."""

from cliptiming.commands import (
    AddClipCommand,
    AddTrackCommand,
    CommandContext,
    CreateTrackAndMoveClipCommand,
    DeleteClipCommand,
    DeleteTrackCommand,
    EditCommand,
    MoveClipCommand,
    ResizeClipCommand,
    SetUpdatedClipCommand,
    SplitClipCommand,
    UpdateClipPositionCommand,
    UpdateClipTimingCommand,
)
from cliptiming.exceptions import (
    AliasNotFoundError,
    AliasResolutionError,
    CircularAliasReferenceError,
    CliptimingError,
    InvalidClipIndexError,
    InvalidTrackIndexError,
    StructuralError,
    UnresolvedAliasTargetError,
)
from cliptiming.services.edit_session import EditSession

__version__ = "0.1.0"

__all__ = [
    "EditSession",
    "EditCommand",
    "CommandContext",
    "AddClipCommand",
    "AddTrackCommand",
    "CreateTrackAndMoveClipCommand",
    "DeleteClipCommand",
    "DeleteTrackCommand",
    "MoveClipCommand",
    "ResizeClipCommand",
    "SetUpdatedClipCommand",
    "SplitClipCommand",
    "UpdateClipPositionCommand",
    "UpdateClipTimingCommand",
    "CliptimingError",
    "StructuralError",
    "InvalidTrackIndexError",
    "InvalidClipIndexError",
    "AliasResolutionError",
    "CircularAliasReferenceError",
    "AliasNotFoundError",
    "UnresolvedAliasTargetError",
]
