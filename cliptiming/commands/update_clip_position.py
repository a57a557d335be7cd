from typing import Any

from cliptiming.commands.set_updated_clip import SetUpdatedClipCommand
from cliptiming.models.project import Clip
from cliptiming.schemas.clip import ClipConfig


class UpdateClipPositionCommand(SetUpdatedClipCommand):
    """Patch part of a clip's configuration (offset, position, timing...).

    The patch is merged over the clip's current document form at execute
    time, so untouched fields keep their declared values.
    """

    name = "update_clip_position"

    def __init__(self, track_index: int, clip_index: int, updates: dict[str, Any]):
        super().__init__(track_index, clip_index, config=updates)
        self.updates = updates

    def build_config(self, clip: Clip) -> ClipConfig:
        merged = {**clip.to_document(), **self.updates}
        return ClipConfig.model_validate(merged)
