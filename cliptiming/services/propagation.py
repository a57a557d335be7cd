"""Propagation of derived timing after a mutation.

After a command changes clip composition or timing, the coordinator
re-derives everything that depends on it: alias dependents, "auto"-start
clips following the change on the same track, "end"-length clips and the
total duration. Literal starts are never moved.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from cliptiming.models.project import Clip, ProjectState
from cliptiming.schemas.events import DurationChangedPayload, EditEvent, TimelineUpdatedPayload
from cliptiming.schemas.timing import ResolvedTiming
from cliptiming.services.alias_resolver import AliasResolver
from cliptiming.services.event_manager import EditEventEmitter
from cliptiming.services.smart_clip_resolver import SmartClipResolver

logger = logging.getLogger(__name__)


class PropagationState(str, Enum):
    IDLE = "idle"
    PROPAGATING = "propagating"


@dataclass
class PropagationReport:
    """Outcome of one propagation pass."""

    changed_clip_ids: list[str] = field(default_factory=list)
    previous_duration_ms: int = 0
    duration_ms: int = 0
    skipped: bool = False

    @property
    def duration_changed(self) -> bool:
        return self.previous_duration_ms != self.duration_ms


class PropagationCoordinator:
    """Keeps derived timing consistent: idle -> propagating -> idle."""

    def __init__(
        self,
        alias_resolver: AliasResolver,
        smart_resolver: SmartClipResolver,
        events: EditEventEmitter | None = None,
    ):
        self.alias_resolver = alias_resolver
        self.smart_resolver = smart_resolver
        self.events = events
        self._state = PropagationState.IDLE

    @property
    def state(self) -> PropagationState:
        return self._state

    async def propagate(
        self,
        project: ProjectState,
        track_index: int | None = None,
        from_clip_index: int = -1,
        extra_anchors: Iterable[tuple[int, int]] = (),
    ) -> PropagationReport:
        """
        Re-derive dependent timing after a change.

        Args:
            project: Project to update in place
            track_index: Track where the change happened, if any
            from_clip_index: Index of the changed clip; "auto"-start clips
                after it on the same track are re-sequenced
            extra_anchors: Further (track, clip) positions to cascade from,
                for changes that touch two tracks

        Raises:
            AliasResolutionError: the change left an invalid alias reference
        """
        if self._state is PropagationState.PROPAGATING:
            logger.warning("Propagation requested while already propagating; ignored")
            return PropagationReport(
                previous_duration_ms=project.total_duration_ms,
                duration_ms=project.total_duration_ms,
                skipped=True,
            )

        self._state = PropagationState.PROPAGATING
        anchors = list(extra_anchors)
        if track_index is not None:
            anchors.insert(0, (track_index, from_clip_index))
        try:
            return self._run(project, anchors)
        finally:
            self._state = PropagationState.IDLE

    async def refresh_auto_length(self, project: ProjectState, clip: Clip) -> PropagationReport:
        """Re-probe an "auto"-length clip, then propagate from its position."""
        await self.smart_resolver.resolve_clip_auto_length(clip)
        indices = project.find_clip_indices(clip)
        if indices is None:
            return await self.propagate(project)
        return await self.propagate(project, *indices)

    def _run(self, project: ProjectState, anchors: list[tuple[int, int]]) -> PropagationReport:
        before: dict[str, ResolvedTiming] = {clip.id: clip.resolved for clip in project.clips}

        # Alias dependents that moved re-sequence the "auto" starts after them
        for dependent in self.alias_resolver.resolve(project):
            indices = project.find_clip_indices(dependent)
            if indices is not None and indices not in anchors:
                anchors.append(indices)

        for track_index, from_clip_index in anchors:
            self._cascade_auto_starts(project, track_index, from_clip_index)

        project.end_length_clips.sync(project.clips)
        self.smart_resolver.resolve_end_lengths(project)

        previous, current = project.update_duration()
        if previous != current and self.events:
            self.events.emit(
                EditEvent.DURATION_CHANGED,
                DurationChangedPayload(previous_ms=previous, duration_ms=current),
            )

        changed = [
            clip.id
            for clip in project.clips
            if clip.id not in before or before[clip.id] != clip.resolved
        ]
        if self.events:
            self.events.emit(
                EditEvent.TIMELINE_UPDATED,
                TimelineUpdatedPayload(current=project.to_document(resolved=True)),
            )

        logger.debug(
            f"Propagation from {anchors or 'project'}: "
            f"{len(changed)} clips changed, duration {previous}ms -> {current}ms"
        )
        return PropagationReport(
            changed_clip_ids=changed,
            previous_duration_ms=previous,
            duration_ms=current,
        )

    def _cascade_auto_starts(
        self, project: ProjectState, track_index: int, from_clip_index: int
    ) -> None:
        track = project.get_track(track_index)
        if track is None:
            return

        live = [clip for clip in track if not clip.disposed]
        anchor = min(from_clip_index, len(live) - 1)
        cursor = live[anchor].cursor_end_ms if anchor >= 0 else 0
        for clip in live[anchor + 1:]:
            if clip.intent.start == "auto":
                clip.set_resolved(start=cursor)
            cursor = clip.cursor_end_ms
