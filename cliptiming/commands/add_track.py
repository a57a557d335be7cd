import logging

from cliptiming.commands.base import CommandContext, EditCommand, sync_layers
from cliptiming.exceptions import InvalidTrackIndexError
from cliptiming.schemas.events import EditEvent, TrackEventPayload

logger = logging.getLogger(__name__)


class AddTrackCommand(EditCommand):
    """
    Insert an empty track.

    Execute: insert at `track_index`; clips on tracks above move up one layer.
    Undo: remove the track again; those clips move back down.
    """

    name = "add_track"

    def __init__(self, track_index: int):
        self.track_index = track_index
        self._added = False

    async def execute(self, context: CommandContext) -> None:
        project = context.project
        if not 0 <= self.track_index <= project.track_count:
            raise InvalidTrackIndexError(self.track_index, project.track_count)

        project.insert_track(self.track_index)
        self._added = True
        sync_layers(context, self.track_index)
        context.emit(
            EditEvent.TRACK_ADDED,
            TrackEventPayload(track_index=self.track_index, total_tracks=project.track_count),
        )
        await context.propagate()

    async def undo(self, context: CommandContext) -> None:
        if not self._added:
            return
        project = context.project
        removed = project.remove_track(self.track_index)
        if removed:
            logger.warning(
                f"Undoing add_track at {self.track_index} dropped {len(removed)} clips"
            )
            for clip in removed:
                context.dispose_clip(clip)
        self._added = False
        sync_layers(context, self.track_index)
        context.emit(
            EditEvent.TRACK_REMOVED,
            TrackEventPayload(track_index=self.track_index, total_tracks=project.track_count),
        )
        await context.propagate()
