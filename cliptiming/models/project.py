"""Runtime project state: clips, tracks and the end-length registry.

ProjectState is the single owned aggregate every command and resolver
receives by reference. Resolvers only read/write clip timing fields;
structure (tracks, clip order) changes only through commands.
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from cliptiming.exceptions import InvalidClipIndexError, InvalidTrackIndexError
from cliptiming.schemas.clip import ClipConfig, EditDocument
from cliptiming.schemas.timing import ResolvedTiming, TimingIntent
from cliptiming.utils.timing import (
    intent_value_to_document,
    parse_timing_intent,
    to_ms,
    to_sec,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClipSnapshot:
    """Everything needed to put a clip's configuration and timing back."""

    config: ClipConfig
    intent: TimingIntent
    resolved: ResolvedTiming
    layer: int


@dataclass(eq=False)
class Clip:
    """A timed unit referencing one asset.

    `config` always mirrors `intent` for start/length, so dumping the config
    yields the clip's declared (document) form.
    """

    config: ClipConfig
    intent: TimingIntent
    resolved: ResolvedTiming = field(default_factory=ResolvedTiming)
    layer: int = 0
    id: str = field(default_factory=lambda: uuid4().hex)
    disposed: bool = False

    @classmethod
    def from_config(cls, config: ClipConfig, layer: int = 0) -> "Clip":
        """Create a clip; literal timing resolves immediately, smart timing starts at 0."""
        intent = parse_timing_intent(config.start, config.length)
        start = to_ms(intent.start) if isinstance(intent.start, float) else 0
        length = to_ms(intent.length) if isinstance(intent.length, float) else 0
        return cls(
            config=config.model_copy(deep=True),
            intent=intent,
            resolved=ResolvedTiming(start=start, length=length),
            layer=layer,
        )

    # -- identity / payload -------------------------------------------------

    @property
    def alias(self) -> str | None:
        return self.config.alias

    @property
    def asset(self):
        return self.config.asset

    # -- resolved timing ----------------------------------------------------

    @property
    def start_ms(self) -> int:
        return self.resolved.start

    @property
    def length_ms(self) -> int:
        return self.resolved.length

    @property
    def end_ms(self) -> int:
        return self.resolved.end

    @property
    def cursor_end_ms(self) -> int:
        """Where the next "auto"-start clip on the same track begins.

        An "end"-length clip contributes only its start: its length depends on
        the whole timeline and must not feed back into track sequencing.
        """
        if self.intent.length == "end":
            return self.resolved.start
        return self.resolved.end

    def set_resolved(self, start: int | None = None, length: int | None = None) -> None:
        self.resolved = ResolvedTiming(
            start=self.resolved.start if start is None else max(0, start),
            length=self.resolved.length if length is None else max(0, length),
        )

    # -- intent -------------------------------------------------------------

    def set_intent(self, intent: TimingIntent) -> None:
        """Replace the declared timing and mirror it into the config."""
        self.intent = intent
        self.config = self.config.model_copy(
            update={
                "start": intent_value_to_document(intent.start),
                "length": intent_value_to_document(intent.length),
            }
        )

    def convert_to_fixed_timing(self) -> None:
        """Freeze the current resolved timing as literal seconds."""
        self.set_intent(
            TimingIntent(start=to_sec(self.resolved.start), length=to_sec(self.resolved.length))
        )

    def apply_config(self, config: ClipConfig) -> None:
        """Replace the whole configuration, re-deriving the timing intent."""
        self.config = config.model_copy(deep=True)
        self.intent = parse_timing_intent(config.start, config.length)

    # -- snapshots ----------------------------------------------------------

    def snapshot(self) -> ClipSnapshot:
        return ClipSnapshot(
            config=self.config.model_copy(deep=True),
            intent=self.intent,
            resolved=self.resolved,
            layer=self.layer,
        )

    def restore(self, snapshot: ClipSnapshot) -> None:
        self.config = snapshot.config.model_copy(deep=True)
        self.intent = snapshot.intent
        self.resolved = snapshot.resolved
        self.layer = snapshot.layer

    def to_document(self) -> dict[str, Any]:
        """Declared form: timing as the user wrote it."""
        return self.config.model_dump(mode="json", exclude_none=True)

    def to_resolved_document(self) -> dict[str, Any]:
        """Resolved form: numeric seconds for start and length."""
        data = self.to_document()
        data["start"] = to_sec(self.resolved.start)
        data["length"] = to_sec(self.resolved.length)
        return data


class EndLengthRegistry:
    """The set of clips whose length intent is "end".

    Membership is kept by explicit track/untrack calls from timing commands
    and re-derived from intents by sync() after every mutation; after sync a
    clip is a member iff its length intent is "end".
    """

    def __init__(self) -> None:
        self._clips: dict[str, Clip] = {}

    def track(self, clip: Clip) -> None:
        self._clips[clip.id] = clip

    def untrack(self, clip: Clip) -> None:
        self._clips.pop(clip.id, None)

    def sync(self, clips: Iterable[Clip]) -> None:
        """Rebuild membership from the current length intents, in clip order."""
        rebuilt = {clip.id: clip for clip in clips if clip.intent.length == "end"}
        if rebuilt.keys() != self._clips.keys():
            logger.debug(
                f"End-length registry drift corrected: {len(self._clips)} -> {len(rebuilt)} clips"
            )
        self._clips = rebuilt

    def __contains__(self, clip: object) -> bool:
        return isinstance(clip, Clip) and clip.id in self._clips

    def __iter__(self) -> Iterator[Clip]:
        return iter(list(self._clips.values()))

    def __len__(self) -> int:
        return len(self._clips)


class ProjectState:
    """Tracks of clips plus the derived state commands keep consistent."""

    def __init__(self, tracks: list[list[Clip]] | None = None) -> None:
        self.tracks: list[list[Clip]] = tracks if tracks is not None else []
        self.end_length_clips = EndLengthRegistry()
        self.total_duration_ms = 0
        self.background: str | None = None
        self.output: dict[str, Any] | None = None
        self._timeline_extra: dict[str, Any] = {}
        self._dispose_queue: list[Clip] = []
        for track_index, track in enumerate(self.tracks):
            for clip in track:
                clip.layer = track_index + 1
        self.end_length_clips.sync(self.clips)

    @classmethod
    def from_document(cls, document: EditDocument) -> "ProjectState":
        tracks = [
            [Clip.from_config(clip_config) for clip_config in track.clips]
            for track in document.timeline.tracks
        ]
        state = cls(tracks)
        state.background = document.timeline.background
        state.output = document.output
        state._timeline_extra = dict(document.timeline.model_extra or {})
        return state

    # -- lookup -------------------------------------------------------------

    @property
    def track_count(self) -> int:
        return len(self.tracks)

    @property
    def clips(self) -> list[Clip]:
        """All live clips in deterministic order (track order, then clip order)."""
        return [clip for _, _, clip in self.iter_clips()]

    def iter_clips(self) -> Iterator[tuple[int, int, Clip]]:
        for track_index, track in enumerate(self.tracks):
            for clip_index, clip in enumerate(track):
                if not clip.disposed:
                    yield track_index, clip_index, clip

    def get_track(self, track_index: int) -> list[Clip] | None:
        if 0 <= track_index < len(self.tracks):
            return self.tracks[track_index]
        return None

    def require_track(self, track_index: int) -> list[Clip]:
        track = self.get_track(track_index)
        if track is None:
            raise InvalidTrackIndexError(track_index, len(self.tracks))
        return track

    def clip_at(self, track_index: int, clip_index: int) -> Clip | None:
        track = self.get_track(track_index)
        if track is None or not 0 <= clip_index < len(track):
            return None
        return track[clip_index]

    def require_clip(self, track_index: int, clip_index: int) -> Clip:
        track = self.require_track(track_index)
        if not 0 <= clip_index < len(track):
            raise InvalidClipIndexError(track_index, clip_index)
        return track[clip_index]

    def find_clip_by_id(self, clip_id: str) -> tuple[int, int, Clip] | None:
        for track_index, clip_index, clip in self.iter_clips():
            if clip.id == clip_id:
                return track_index, clip_index, clip
        return None

    def find_clip_indices(self, clip: Clip) -> tuple[int, int] | None:
        for track_index, track in enumerate(self.tracks):
            for clip_index, candidate in enumerate(track):
                if candidate is clip:
                    return track_index, clip_index
        return None

    # -- structure ----------------------------------------------------------

    def insert_track(self, track_index: int, clips: list[Clip] | None = None) -> list[Clip]:
        """Insert a track; clips passed in (a restored track) are revived."""
        track = clips if clips is not None else []
        self.tracks.insert(track_index, track)
        for clip in track:
            clip.disposed = False
            if clip in self._dispose_queue:
                self._dispose_queue.remove(clip)
        return track

    def remove_track(self, track_index: int) -> list[Clip]:
        return self.tracks.pop(track_index)

    def insert_clip(self, track_index: int, clip: Clip, clip_index: int | None = None) -> int:
        """Insert a clip (appending when clip_index is None) and return its index."""
        track = self.require_track(track_index)
        index = len(track) if clip_index is None else max(0, min(clip_index, len(track)))
        track.insert(index, clip)
        clip.layer = track_index + 1
        clip.disposed = False
        if clip in self._dispose_queue:
            self._dispose_queue.remove(clip)
        return index

    def remove_clip(self, clip: Clip) -> tuple[int, int] | None:
        indices = self.find_clip_indices(clip)
        if indices is None:
            return None
        track_index, clip_index = indices
        self.tracks[track_index].pop(clip_index)
        self.end_length_clips.untrack(clip)
        return indices

    def queue_dispose(self, clip: Clip) -> None:
        """Mark a clip for disposal; it leaves any track on dispose_queued()."""
        if clip not in self._dispose_queue:
            self._dispose_queue.append(clip)
        clip.disposed = True
        self.end_length_clips.untrack(clip)

    def dispose_queued(self) -> list[Clip]:
        """Drain the disposal queue, detaching clips still on a track."""
        disposed = list(self._dispose_queue)
        for clip in disposed:
            self.remove_clip(clip)
        self._dispose_queue = []
        return disposed

    # -- timing aggregates --------------------------------------------------

    def timeline_end(self, exclude_end_length: bool = True) -> int:
        """Max clip end in ms; "end"-length clips are skipped by default."""
        ends = [
            clip.end_ms
            for clip in self.clips
            if not (exclude_end_length and clip.intent.length == "end")
        ]
        return max(ends, default=0)

    def update_duration(self) -> tuple[int, int]:
        """Recompute total duration; returns (previous, current)."""
        previous = self.total_duration_ms
        self.total_duration_ms = self.timeline_end(exclude_end_length=False)
        return previous, self.total_duration_ms

    # -- snapshots ----------------------------------------------------------

    def to_document(self, resolved: bool = False) -> dict[str, Any]:
        tracks = [
            {
                "clips": [
                    clip.to_resolved_document() if resolved else clip.to_document()
                    for clip in track
                    if not clip.disposed
                ]
            }
            for track in self.tracks
        ]
        timeline: dict[str, Any] = {**self._timeline_extra, "tracks": tracks}
        if self.background is not None:
            timeline["background"] = self.background
        document: dict[str, Any] = {"timeline": timeline}
        if self.output is not None:
            document["output"] = self.output
        return document
