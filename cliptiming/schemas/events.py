"""Lifecycle event names and payloads emitted to the host."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class EditEvent(str, Enum):
    """Named lifecycle events on every timing-relevant mutation."""

    # Timeline structure
    TIMELINE_UPDATED = "timeline:updated"
    DURATION_CHANGED = "duration:changed"

    # Clip lifecycle
    CLIP_ADDED = "clip:added"
    CLIP_DELETED = "clip:deleted"
    CLIP_RESTORED = "clip:restored"
    CLIP_UPDATED = "clip:updated"
    CLIP_SPLIT = "clip:split"

    # Track
    TRACK_ADDED = "track:added"
    TRACK_REMOVED = "track:removed"

    # History
    EDIT_UNDO = "edit:undo"
    EDIT_REDO = "edit:redo"


class ClipReference(BaseModel):
    """A clip configuration at a track/clip position."""

    track_index: int
    clip_index: int
    clip: dict[str, Any] | None = None


class ClipEventPayload(BaseModel):
    """Payload for clip:added / clip:deleted / clip:restored."""

    track_index: int
    clip_index: int
    clip: dict[str, Any] | None = None


class ClipUpdatedPayload(BaseModel):
    """Payload for clip:updated, carrying before/after configuration."""

    previous: ClipReference
    current: ClipReference


class ClipSplitPayload(BaseModel):
    track_index: int
    original_clip_index: int
    new_clip_index: int


class TrackEventPayload(BaseModel):
    track_index: int
    total_tracks: int


class DurationChangedPayload(BaseModel):
    previous_ms: int
    duration_ms: int


class TimelineUpdatedPayload(BaseModel):
    """Resolved snapshot of the whole edit after a change."""

    current: dict[str, Any] = Field(default_factory=dict)


class HistoryEventPayload(BaseModel):
    command: str
