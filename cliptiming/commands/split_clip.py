import logging

from cliptiming.commands.base import (
    CommandContext,
    EditCommand,
    clip_payload,
    clip_updated_payload,
)
from cliptiming.exceptions import InvalidSplitPointError
from cliptiming.models.project import Clip, ClipSnapshot
from cliptiming.schemas.asset import TRIMMABLE_ASSET_TYPES
from cliptiming.schemas.events import ClipSplitPayload, EditEvent
from cliptiming.schemas.timing import TimingIntent
from cliptiming.utils.timing import to_ms, to_sec

logger = logging.getLogger(__name__)


class SplitClipCommand(EditCommand):
    """
    Split a clip in two at an absolute time (seconds).

    Both halves get fixed timing. The right half drops the alias (aliases
    are unique) and, for trimmable media, starts its trim where the left
    half ends.
    """

    name = "split_clip"

    def __init__(self, track_index: int, clip_index: int, split_time: float):
        self.track_index = track_index
        self.clip_index = clip_index
        self.split_time = split_time
        self.clip: Clip | None = None
        self.right_clip: Clip | None = None
        self._snapshot: ClipSnapshot | None = None
        self._inserted = False

    async def execute(self, context: CommandContext) -> None:
        project = context.project
        clip = project.require_clip(self.track_index, self.clip_index)

        floor = context.settings.min_clip_length_ms
        offset = to_ms(self.split_time) - clip.start_ms
        right_length = clip.length_ms - offset
        if offset < floor or right_length < floor:
            raise InvalidSplitPointError(self.track_index, self.clip_index, self.split_time)

        self.clip = clip
        self._snapshot = clip.snapshot()

        if self.right_clip is None:
            self.right_clip = Clip.from_config(self._right_config(clip, offset, right_length))

        clip.convert_to_fixed_timing()
        clip.set_intent(TimingIntent(start=clip.intent.start, length=to_sec(offset)))
        clip.set_resolved(length=offset)
        project.end_length_clips.untrack(clip)

        project.insert_clip(self.track_index, self.right_clip, self.clip_index + 1)
        self._inserted = True

        context.rebuild_clip(clip)
        context.rebuild_clip(self.right_clip)
        await context.propagate(self.track_index, self.clip_index)
        logger.debug(
            f"Split clip {clip.id} at {self.split_time}s into {clip.id} + {self.right_clip.id}"
        )
        context.emit(
            EditEvent.CLIP_SPLIT,
            ClipSplitPayload(
                track_index=self.track_index,
                original_clip_index=self.clip_index,
                new_clip_index=self.clip_index + 1,
            ),
        )

    def _right_config(self, clip: Clip, offset: int, right_length: int):
        asset = clip.asset
        if asset.type in TRIMMABLE_ASSET_TYPES:
            asset = asset.model_copy(update={"trim": (asset.trim or 0) + to_sec(offset)})
        return clip.config.model_copy(
            update={
                "asset": asset,
                "start": to_sec(clip.start_ms + offset),
                "length": to_sec(right_length),
                "alias": None,
            },
            deep=True,
        )

    async def undo(self, context: CommandContext) -> None:
        if self.clip is None or self._snapshot is None:
            return
        project = context.project

        if self._inserted and self.right_clip is not None:
            indices = project.remove_clip(self.right_clip)
            context.dispose_clip(self.right_clip)
            self._inserted = False
            if indices is not None:
                context.emit(
                    EditEvent.CLIP_DELETED, clip_payload(indices[0], indices[1], self.right_clip)
                )

        previous = self.clip.to_document()
        self.clip.restore(self._snapshot)
        self._snapshot = None
        if self.clip.intent.length == "end":
            project.end_length_clips.track(self.clip)

        context.rebuild_clip(self.clip)
        await context.propagate(self.track_index, self.clip_index)
        context.emit(
            EditEvent.CLIP_UPDATED,
            clip_updated_payload(
                (self.track_index, self.clip_index, previous),
                (self.track_index, self.clip_index, self.clip),
            ),
        )
