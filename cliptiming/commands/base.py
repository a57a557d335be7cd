"""
Base command class and the context every command runs against.

Every edit to a project goes through an EditCommand:

1. Validate indices first and raise a StructuralError before mutating
   anything; the session treats that as a logged no-op.
2. Capture whatever undo needs on the first execute() and reuse it on
   redo, so clip identities survive undo/redo cycles.
3. undo() restores resolved timing, track structure and layers exactly.
4. Commands composed of other commands undo the inner command first.

Commands never touch rendering objects; visual work goes through the
context's render-host callbacks.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any, Protocol

from pydantic import BaseModel

from cliptiming.config import Settings
from cliptiming.models.project import Clip, ProjectState
from cliptiming.schemas.events import (
    ClipEventPayload,
    ClipReference,
    ClipUpdatedPayload,
    EditEvent,
)
from cliptiming.services.propagation import PropagationReport
from cliptiming.services.smart_clip_resolver import SmartClipResolver


class CommandContext(Protocol):
    """What a command may use from the session it runs in."""

    project: ProjectState
    settings: Settings
    smart_resolver: SmartClipResolver

    def emit(self, event: EditEvent, payload: BaseModel | dict[str, Any] | None = None) -> None:
        ...

    def dispose_clip(self, clip: Clip) -> None:
        """Queue a clip for disposal after the command completes."""
        ...

    def rebuild_clip(self, clip: Clip) -> None:
        ...

    def reparent_clip(self, clip: Clip, from_layer: int, to_layer: int) -> None:
        ...

    async def propagate(
        self,
        track_index: int | None = None,
        from_clip_index: int = -1,
        extra_anchors: Iterable[tuple[int, int]] = (),
    ) -> PropagationReport:
        ...


class EditCommand(ABC):
    """
    Base class for all undoable edit commands.

    Subclasses implement execute() and undo(); redo re-runs execute().
    """

    name: str = "command"

    @abstractmethod
    async def execute(self, context: CommandContext) -> None:
        """Apply the command."""

    @abstractmethod
    async def undo(self, context: CommandContext) -> None:
        """Reverse a successful execute()."""

    async def redo(self, context: CommandContext) -> None:
        await self.execute(context)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"


def clip_payload(track_index: int, clip_index: int, clip: Clip | None) -> ClipEventPayload:
    return ClipEventPayload(
        track_index=track_index,
        clip_index=clip_index,
        clip=clip.to_document() if clip is not None else None,
    )


def clip_updated_payload(
    previous: tuple[int, int, dict[str, Any]],
    current: tuple[int, int, Clip],
) -> ClipUpdatedPayload:
    """Before/after payload; `previous` carries an already-dumped configuration."""
    return ClipUpdatedPayload(
        previous=ClipReference(
            track_index=previous[0], clip_index=previous[1], clip=previous[2]
        ),
        current=ClipReference(
            track_index=current[0], clip_index=current[1], clip=current[2].to_document()
        ),
    )


def sync_layers(context: CommandContext, from_track_index: int = 0) -> None:
    """Re-derive layers for tracks at or after `from_track_index` (layer = index + 1).

    After a track is inserted or removed this shifts every clip above it by
    one layer and asks the host to reparent the moved clips.
    """
    for track_index, track in enumerate(context.project.tracks):
        if track_index < from_track_index:
            continue
        for clip in track:
            from_layer = clip.layer
            clip.layer = track_index + 1
            if clip.layer != from_layer:
                context.reparent_clip(clip, from_layer, clip.layer)
