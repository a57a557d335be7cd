import logging
from typing import Any

from cliptiming.commands.base import CommandContext, EditCommand, clip_payload
from cliptiming.models.project import Clip
from cliptiming.schemas.clip import ClipConfig
from cliptiming.schemas.events import EditEvent
from cliptiming.utils.timing import clamp_length

logger = logging.getLogger(__name__)


class AddClipCommand(EditCommand):
    """
    Add a clip to a track.

    Execute: build the clip (first run only), insert it, resolve an "auto"
    length, then propagate.
    Undo: remove the same clip instance and propagate.
    """

    name = "add_clip"

    def __init__(
        self,
        track_index: int,
        clip_config: ClipConfig | dict[str, Any],
        clip_index: int | None = None,
    ):
        self.track_index = track_index
        self.clip_config = (
            clip_config
            if isinstance(clip_config, ClipConfig)
            else ClipConfig.model_validate(clip_config)
        )
        self.clip_index = clip_index
        self.clip: Clip | None = None
        self._inserted_at: int | None = None

    async def execute(self, context: CommandContext) -> None:
        project = context.project
        project.require_track(self.track_index)

        restoring = self.clip is not None
        if self.clip is None:
            self.clip = Clip.from_config(self.clip_config)
            if isinstance(self.clip.intent.length, float):
                self.clip.set_resolved(
                    length=clamp_length(
                        self.clip.length_ms, context.settings.min_clip_length_ms
                    )
                )

        self._inserted_at = project.insert_clip(self.track_index, self.clip, self.clip_index)
        if restoring:
            context.rebuild_clip(self.clip)
        elif self.clip.intent.length == "auto":
            await context.smart_resolver.resolve_clip_auto_length(self.clip)

        await context.propagate(self.track_index, self._inserted_at - 1)
        context.emit(
            EditEvent.CLIP_ADDED, clip_payload(self.track_index, self._inserted_at, self.clip)
        )
        logger.debug(f"Added clip {self.clip.id} at {self.track_index}:{self._inserted_at}")

    async def undo(self, context: CommandContext) -> None:
        if self.clip is None or self._inserted_at is None:
            return
        project = context.project
        indices = project.remove_clip(self.clip)
        self._inserted_at = None
        if indices is None:
            logger.warning(f"Clip {self.clip.id} was not on any track during undo")
            return
        context.dispose_clip(self.clip)

        track_index, clip_index = indices
        await context.propagate(track_index, clip_index - 1)
        context.emit(EditEvent.CLIP_DELETED, clip_payload(track_index, clip_index, self.clip))
