from cliptiming.commands.add_track import AddTrackCommand
from cliptiming.commands.base import CommandContext, EditCommand
from cliptiming.commands.move_clip import MoveClipCommand
from cliptiming.exceptions import InvalidTrackIndexError


class CreateTrackAndMoveClipCommand(EditCommand):
    """Insert a new track and move a clip onto it, as one undo step.

    Composed of AddTrackCommand then MoveClipCommand; undo runs them in
    reverse order.
    """

    name = "create_track_and_move_clip"

    def __init__(self, insert_index: int, from_track: int, from_clip: int, new_start: float):
        self.insert_index = insert_index
        self.from_track = from_track
        self.from_clip = from_clip
        self.new_start = new_start
        self.add_track_command: AddTrackCommand | None = None
        self.move_clip_command: MoveClipCommand | None = None

    async def execute(self, context: CommandContext) -> None:
        project = context.project
        project.require_clip(self.from_track, self.from_clip)
        if not 0 <= self.insert_index <= project.track_count:
            raise InvalidTrackIndexError(self.insert_index, project.track_count)

        self.add_track_command = AddTrackCommand(self.insert_index)
        self.move_clip_command = None
        await self.add_track_command.execute(context)

        # The source track shifts up when the new track lands at or below it
        from_track = self.from_track + 1 if self.insert_index <= self.from_track else self.from_track
        self.move_clip_command = MoveClipCommand(
            from_track, self.from_clip, self.insert_index, self.new_start
        )
        await self.move_clip_command.execute(context)

    async def undo(self, context: CommandContext) -> None:
        if self.move_clip_command is not None:
            await self.move_clip_command.undo(context)
            self.move_clip_command = None
        if self.add_track_command is not None:
            await self.add_track_command.undo(context)
            self.add_track_command = None
