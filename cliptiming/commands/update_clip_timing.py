import logging
from typing import Any

from cliptiming.commands.base import CommandContext, EditCommand, clip_updated_payload
from cliptiming.exceptions import CommandExecutionError
from cliptiming.models.project import Clip, ClipSnapshot
from cliptiming.schemas.events import EditEvent
from cliptiming.schemas.timing import AliasRef, TimingField, TimingIntent, TimingKind
from cliptiming.utils.timing import (
    clamp_length,
    classify_timing_value,
    parse_alias_reference,
    to_sec,
)

logger = logging.getLogger(__name__)


def _intent_from_ms(value: Any, field: TimingField):
    """Turn a timing update (milliseconds or a keyword) into an intent value."""
    kind = classify_timing_value(value, field)
    if kind is TimingKind.LITERAL:
        return to_sec(value)
    if kind is TimingKind.ALIAS:
        return AliasRef(name=parse_alias_reference(value), field=field)
    return value


class UpdateClipTimingCommand(EditCommand):
    """
    Change a clip's declared start and/or length.

    Numeric values are milliseconds; "auto", "end" (length only) and
    "alias://<name>" are accepted as well. Omitted fields keep their intent.
    An "auto" length is re-resolved against the asset before the command
    completes.
    """

    name = "update_clip_timing"

    def __init__(
        self,
        track_index: int,
        clip_index: int,
        start: int | str | None = None,
        length: int | str | None = None,
    ):
        self.track_index = track_index
        self.clip_index = clip_index
        self.start = start
        self.length = length
        self.clip: Clip | None = None
        self._snapshot: ClipSnapshot | None = None

    async def execute(self, context: CommandContext) -> None:
        project = context.project
        clip = project.require_clip(self.track_index, self.clip_index)
        if self.start is None and self.length is None:
            raise CommandExecutionError(self.name, "no timing fields to update")

        new_start = clip.intent.start if self.start is None else _intent_from_ms(self.start, "start")
        new_length = (
            clip.intent.length if self.length is None else _intent_from_ms(self.length, "length")
        )

        self.clip = clip
        self._snapshot = clip.snapshot()
        previous = clip.to_document()

        clip.set_intent(TimingIntent(start=new_start, length=new_length))
        if self.start is not None and isinstance(new_start, float):
            clip.set_resolved(start=round(self.start))
        if self.length is not None and isinstance(new_length, float):
            clip.set_resolved(
                length=clamp_length(round(self.length), context.settings.min_clip_length_ms)
            )

        if new_length == "end":
            project.end_length_clips.track(clip)
        else:
            project.end_length_clips.untrack(clip)

        if self.length == "auto":
            await context.smart_resolver.resolve_clip_auto_length(clip)

        context.rebuild_clip(clip)
        await context.propagate(self.track_index, self.clip_index - 1)
        logger.debug(f"Updated timing of clip {clip.id}: start={new_start!r} length={new_length!r}")
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
        clip.restore(self._snapshot)
        self._snapshot = None
        if clip.intent.length == "end":
            context.project.end_length_clips.track(clip)
        else:
            context.project.end_length_clips.untrack(clip)

        context.rebuild_clip(clip)
        await context.propagate(self.track_index, self.clip_index - 1)
        context.emit(
            EditEvent.CLIP_UPDATED,
            clip_updated_payload(
                (self.track_index, self.clip_index, previous),
                (self.track_index, self.clip_index, clip),
            ),
        )
