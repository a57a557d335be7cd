import logging
from typing import Any

from cliptiming.commands.base import CommandContext, EditCommand, clip_updated_payload
from cliptiming.models.project import Clip, ClipSnapshot
from cliptiming.schemas.clip import ClipConfig
from cliptiming.schemas.events import EditEvent
from cliptiming.utils.timing import clamp_length, to_ms

logger = logging.getLogger(__name__)


def _as_config(config: ClipConfig | dict[str, Any]) -> ClipConfig:
    if isinstance(config, ClipConfig):
        return config
    return ClipConfig.model_validate(config)


class SetUpdatedClipCommand(EditCommand):
    """
    Replace a clip's whole configuration.

    When the asset source changes (or the length newly becomes "auto") an
    "auto"-length clip is re-probed before the command completes. Undo
    restores `previous_config` when given, else the captured state.
    """

    name = "set_updated_clip"

    def __init__(
        self,
        track_index: int,
        clip_index: int,
        config: ClipConfig | dict[str, Any],
        previous_config: ClipConfig | dict[str, Any] | None = None,
    ):
        self.track_index = track_index
        self.clip_index = clip_index
        self.config = config
        self.previous_config = previous_config
        self.clip: Clip | None = None
        self._snapshot: ClipSnapshot | None = None

    def build_config(self, clip: Clip) -> ClipConfig:
        return _as_config(self.config)

    async def execute(self, context: CommandContext) -> None:
        clip = context.project.require_clip(self.track_index, self.clip_index)
        new_config = self.build_config(clip)

        self.clip = clip
        self._snapshot = clip.snapshot()
        previous = clip.to_document()

        await self._apply(context, clip, new_config)
        context.emit(
            EditEvent.CLIP_UPDATED,
            clip_updated_payload(
                (self.track_index, self.clip_index, previous),
                (self.track_index, self.clip_index, clip),
            ),
        )

    async def undo(self, context: CommandContext) -> None:
        if self.clip is None or self._snapshot is None:
            return
        clip = self.clip
        previous = clip.to_document()

        if self.previous_config is not None:
            await self._apply(context, clip, _as_config(self.previous_config))
        else:
            clip.restore(self._snapshot)
            context.rebuild_clip(clip)
            await context.propagate(self.track_index, self.clip_index - 1)
        self._snapshot = None

        context.emit(
            EditEvent.CLIP_UPDATED,
            clip_updated_payload(
                (self.track_index, self.clip_index, previous),
                (self.track_index, self.clip_index, clip),
            ),
        )

    async def _apply(self, context: CommandContext, clip: Clip, config: ClipConfig) -> None:
        old_src = getattr(clip.asset, "src", None)
        was_auto = clip.intent.length == "auto"

        clip.apply_config(config)
        if isinstance(clip.intent.start, float):
            clip.set_resolved(start=to_ms(clip.intent.start))
        if isinstance(clip.intent.length, float):
            clip.set_resolved(
                length=clamp_length(to_ms(clip.intent.length), context.settings.min_clip_length_ms)
            )

        if clip.intent.length == "end":
            context.project.end_length_clips.track(clip)
        else:
            context.project.end_length_clips.untrack(clip)

        src_changed = getattr(clip.asset, "src", None) != old_src
        if clip.intent.length == "auto" and (src_changed or not was_auto):
            logger.debug(f"Re-resolving auto length of clip {clip.id} after config change")
            await context.smart_resolver.resolve_clip_auto_length(clip)

        context.rebuild_clip(clip)
        await context.propagate(self.track_index, self.clip_index - 1)
