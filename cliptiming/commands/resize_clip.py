from cliptiming.commands.base import CommandContext, EditCommand, clip_updated_payload
from cliptiming.exceptions import InvalidTimingValueError
from cliptiming.models.project import Clip, ClipSnapshot
from cliptiming.schemas.events import EditEvent
from cliptiming.schemas.timing import TimingIntent, TimingKind
from cliptiming.utils.timing import clamp_length, classify_timing_value, to_ms


class ResizeClipCommand(EditCommand):
    """
    Set a clip's length from a user drag.

    A manual resize always wins: the clip is first frozen to fixed timing,
    whatever its intent was ("auto", "end" or alias), and the prior intent
    is kept verbatim for undo.
    """

    name = "resize_clip"

    def __init__(self, track_index: int, clip_index: int, new_length: float):
        self.track_index = track_index
        self.clip_index = clip_index
        self.new_length = new_length
        self.clip: Clip | None = None
        self._snapshot: ClipSnapshot | None = None

    async def execute(self, context: CommandContext) -> None:
        project = context.project
        clip = project.require_clip(self.track_index, self.clip_index)
        if classify_timing_value(self.new_length, "length") is not TimingKind.LITERAL:
            raise InvalidTimingValueError(self.new_length, "length")

        self.clip = clip
        self._snapshot = clip.snapshot()
        previous = clip.to_document()

        clip.convert_to_fixed_timing()
        clip.set_intent(TimingIntent(start=clip.intent.start, length=float(self.new_length)))
        clip.set_resolved(
            length=clamp_length(to_ms(self.new_length), context.settings.min_clip_length_ms)
        )
        project.end_length_clips.untrack(clip)

        context.rebuild_clip(clip)
        await context.propagate(self.track_index, self.clip_index)
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

        context.rebuild_clip(clip)
        await context.propagate(self.track_index, self.clip_index)
        context.emit(
            EditEvent.CLIP_UPDATED,
            clip_updated_payload(
                (self.track_index, self.clip_index, previous),
                (self.track_index, self.clip_index, clip),
            ),
        )
