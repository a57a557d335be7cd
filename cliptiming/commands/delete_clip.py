import logging

from cliptiming.commands.base import CommandContext, EditCommand, clip_payload
from cliptiming.commands.delete_track import DeleteTrackCommand
from cliptiming.models.project import Clip
from cliptiming.schemas.events import EditEvent

logger = logging.getLogger(__name__)


class DeleteClipCommand(EditCommand):
    """
    Delete a clip; a track left empty is deleted with it.

    Execute: queue the clip for disposal, take it off its track and, when
    the track is now empty, run an inner DeleteTrackCommand.
    Undo: undo the inner track deletion first, then put the same clip back
    at its original slot.
    """

    name = "delete_clip"

    def __init__(self, track_index: int, clip_index: int):
        self.track_index = track_index
        self.clip_index = clip_index
        self.clip: Clip | None = None
        self.delete_track_command: DeleteTrackCommand | None = None
        self._removed = False

    async def execute(self, context: CommandContext) -> None:
        project = context.project
        clip = project.require_clip(self.track_index, self.clip_index)
        self.clip = clip
        self.delete_track_command = None

        track = project.tracks[self.track_index]
        track.pop(self.clip_index)
        project.end_length_clips.untrack(clip)
        context.dispose_clip(clip)
        self._removed = True

        if not track:
            logger.debug(f"Track {self.track_index} is empty; deleting it")
            self.delete_track_command = DeleteTrackCommand(self.track_index)
            await self.delete_track_command.execute(context)
        else:
            await context.propagate(self.track_index, self.clip_index - 1)

        context.emit(EditEvent.CLIP_DELETED, clip_payload(self.track_index, self.clip_index, clip))

    async def undo(self, context: CommandContext) -> None:
        if self.clip is None or not self._removed:
            return

        if self.delete_track_command is not None:
            await self.delete_track_command.undo(context)
            self.delete_track_command = None

        context.project.insert_clip(self.track_index, self.clip, self.clip_index)
        self._removed = False
        context.rebuild_clip(self.clip)

        await context.propagate(self.track_index, self.clip_index - 1)
        context.emit(
            EditEvent.CLIP_RESTORED, clip_payload(self.track_index, self.clip_index, self.clip)
        )
