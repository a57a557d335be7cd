from cliptiming.commands.base import CommandContext, EditCommand, sync_layers
from cliptiming.models.project import Clip
from cliptiming.schemas.events import EditEvent, TrackEventPayload


class DeleteTrackCommand(EditCommand):
    """
    Remove a track and every clip on it.

    Execute: queue the track's clips for disposal, remove the track and move
    clips on tracks above it down one layer.
    Undo: reinsert the same track (same clip instances) at its index and
    rebuild its clips.
    """

    name = "delete_track"

    def __init__(self, track_index: int):
        self.track_index = track_index
        self._removed: list[Clip] | None = None

    async def execute(self, context: CommandContext) -> None:
        project = context.project
        project.require_track(self.track_index)

        self._removed = project.remove_track(self.track_index)
        for clip in self._removed:
            context.dispose_clip(clip)

        sync_layers(context, self.track_index)
        context.emit(
            EditEvent.TRACK_REMOVED,
            TrackEventPayload(track_index=self.track_index, total_tracks=project.track_count),
        )
        await context.propagate()

    async def undo(self, context: CommandContext) -> None:
        if self._removed is None:
            return
        project = context.project
        project.insert_track(self.track_index, self._removed)
        self._removed = None

        sync_layers(context, self.track_index)
        for clip in project.tracks[self.track_index]:
            context.rebuild_clip(clip)

        context.emit(
            EditEvent.TRACK_ADDED,
            TrackEventPayload(track_index=self.track_index, total_tracks=project.track_count),
        )
        await context.propagate()
