import logging

from cliptiming.commands.base import CommandContext, EditCommand, clip_updated_payload
from cliptiming.commands.delete_track import DeleteTrackCommand
from cliptiming.exceptions import InvalidTimingValueError
from cliptiming.models.project import Clip, ClipSnapshot
from cliptiming.schemas.events import EditEvent
from cliptiming.schemas.timing import TimingIntent, TimingKind
from cliptiming.utils.timing import classify_timing_value, to_ms

logger = logging.getLogger(__name__)


class MoveClipCommand(EditCommand):
    """
    Move a clip to a new start, possibly on another track.

    The clip's start becomes fixed at `new_start` (seconds) and it is
    reinserted in start order on the target track. A source track left
    empty by a cross-track move is deleted through an inner
    DeleteTrackCommand, undone first.
    """

    name = "move_clip"

    def __init__(self, from_track: int, from_clip: int, to_track: int, new_start: float):
        self.from_track = from_track
        self.from_clip = from_clip
        self.to_track = to_track
        self.new_start = new_start
        self.clip: Clip | None = None
        self.delete_track_command: DeleteTrackCommand | None = None
        self._snapshot: ClipSnapshot | None = None
        self._moved = False

    async def execute(self, context: CommandContext) -> None:
        project = context.project
        clip = project.require_clip(self.from_track, self.from_clip)
        project.require_track(self.to_track)
        if classify_timing_value(self.new_start, "start") is not TimingKind.LITERAL:
            raise InvalidTimingValueError(self.new_start, "start")

        self.clip = clip
        self.delete_track_command = None
        self._snapshot = clip.snapshot()
        previous = clip.to_document()
        from_layer = clip.layer

        project.tracks[self.from_track].pop(self.from_clip)
        self._moved = True
        clip.set_intent(TimingIntent(start=float(self.new_start), length=clip.intent.length))
        clip.set_resolved(start=to_ms(self.new_start))

        target = project.tracks[self.to_track]
        new_index = next(
            (i for i, other in enumerate(target) if other.start_ms > clip.start_ms),
            len(target),
        )
        project.insert_clip(self.to_track, clip, new_index)
        if clip.layer != from_layer:
            context.reparent_clip(clip, from_layer, clip.layer)

        to_track = self.to_track
        anchor = new_index - 1
        anchors: list[tuple[int, int]] = []
        if self.from_track == self.to_track:
            anchor = min(self.from_clip, new_index) - 1
        elif not project.tracks[self.from_track]:
            self.delete_track_command = DeleteTrackCommand(self.from_track)
            await self.delete_track_command.execute(context)
            if to_track > self.from_track:
                to_track -= 1
        else:
            anchors.append((self.from_track, self.from_clip - 1))

        context.rebuild_clip(clip)
        await context.propagate(to_track, anchor, extra_anchors=anchors)
        logger.debug(
            f"Moved clip {clip.id} from {self.from_track}:{self.from_clip} to {to_track}:{new_index}"
        )
        context.emit(
            EditEvent.CLIP_UPDATED,
            clip_updated_payload(
                (self.from_track, self.from_clip, previous),
                (to_track, new_index, clip),
            ),
        )

    async def undo(self, context: CommandContext) -> None:
        if self.clip is None or self._snapshot is None or not self._moved:
            return
        project = context.project
        clip = self.clip

        if self.delete_track_command is not None:
            await self.delete_track_command.undo(context)
            self.delete_track_command = None

        indices = project.remove_clip(clip)
        current = indices or (self.to_track, 0)
        previous = clip.to_document()
        from_layer = clip.layer

        clip.restore(self._snapshot)
        project.insert_clip(self.from_track, clip, self.from_clip)
        self._moved = False
        self._snapshot = None
        if clip.layer != from_layer:
            context.reparent_clip(clip, from_layer, clip.layer)

        context.rebuild_clip(clip)
        anchor = self.from_clip - 1
        anchors: list[tuple[int, int]] = []
        if current[0] == self.from_track:
            anchor = min(self.from_clip, current[1]) - 1
        else:
            anchors.append((current[0], current[1] - 1))
        await context.propagate(self.from_track, anchor, extra_anchors=anchors)
        context.emit(
            EditEvent.CLIP_UPDATED,
            clip_updated_payload(
                (current[0], current[1], previous),
                (self.from_track, self.from_clip, clip),
            ),
        )
