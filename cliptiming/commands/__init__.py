from cliptiming.commands.base import CommandContext, EditCommand
from cliptiming.commands.add_clip import AddClipCommand
from cliptiming.commands.add_track import AddTrackCommand
from cliptiming.commands.create_track_and_move_clip import CreateTrackAndMoveClipCommand
from cliptiming.commands.delete_clip import DeleteClipCommand
from cliptiming.commands.delete_track import DeleteTrackCommand
from cliptiming.commands.move_clip import MoveClipCommand
from cliptiming.commands.resize_clip import ResizeClipCommand
from cliptiming.commands.set_updated_clip import SetUpdatedClipCommand
from cliptiming.commands.split_clip import SplitClipCommand
from cliptiming.commands.update_clip_position import UpdateClipPositionCommand
from cliptiming.commands.update_clip_timing import UpdateClipTimingCommand

__all__ = [
    "CommandContext",
    "EditCommand",
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
]
