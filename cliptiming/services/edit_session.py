"""Edit session: the host's entry point into the timing engine.

The session owns the project state, runs every command against it one at
a time, and implements the CommandContext commands rely on. Rendering is
reached only through the RenderHost callbacks.
"""

import asyncio
import logging
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel

from cliptiming.commands.add_clip import AddClipCommand
from cliptiming.commands.add_track import AddTrackCommand
from cliptiming.commands.base import EditCommand
from cliptiming.commands.delete_clip import DeleteClipCommand
from cliptiming.commands.delete_track import DeleteTrackCommand
from cliptiming.commands.move_clip import MoveClipCommand
from cliptiming.commands.resize_clip import ResizeClipCommand
from cliptiming.commands.set_updated_clip import SetUpdatedClipCommand
from cliptiming.commands.split_clip import SplitClipCommand
from cliptiming.commands.update_clip_timing import UpdateClipTimingCommand
from cliptiming.config import Settings, get_settings
from cliptiming.exceptions import CliptimingError, CommandExecutionError, StructuralError
from cliptiming.interfaces import DurationProber, NullRenderHost, RenderHost
from cliptiming.models.project import Clip, ProjectState
from cliptiming.schemas.clip import ClipConfig, EditDocument
from cliptiming.schemas.envelope import CommandResult
from cliptiming.schemas.events import (
    DurationChangedPayload,
    EditEvent,
    HistoryEventPayload,
    TimelineUpdatedPayload,
)
from cliptiming.schemas.operation import HistoryResponse
from cliptiming.services.alias_resolver import AliasResolver
from cliptiming.services.command_history import CommandHistory
from cliptiming.services.event_manager import EditEventEmitter
from cliptiming.services.propagation import PropagationCoordinator, PropagationReport
from cliptiming.services.smart_clip_resolver import SmartClipResolver

logger = logging.getLogger(__name__)


class EditSession:
    """Owns one project and serializes every mutation of it."""

    def __init__(
        self,
        prober: DurationProber | None = None,
        render_host: RenderHost | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.render_host = render_host or NullRenderHost()
        self.events = EditEventEmitter()
        self.alias_resolver = AliasResolver(self.settings)
        self.smart_resolver = SmartClipResolver(prober, self.settings)
        self.propagation = PropagationCoordinator(
            self.alias_resolver, self.smart_resolver, self.events
        )
        self.history = CommandHistory(self.settings.history_limit)
        self.project = ProjectState()
        self._lock = asyncio.Lock()

    # =========================================================================
    # Loading
    # =========================================================================

    async def load_edit(self, document: EditDocument | dict[str, Any]) -> None:
        """
        Load a project document and resolve all timing.

        The new project replaces the current one only when resolution
        succeeds; on failure the previous project stays loaded.

        Raises:
            pydantic.ValidationError: the document is malformed
            AliasResolutionError: alias cycle, unknown alias or unresolved target
        """
        if not isinstance(document, EditDocument):
            document = EditDocument.model_validate(document)

        async with self._lock:
            project = ProjectState.from_document(document)
            try:
                self.alias_resolver.resolve(project)
            except CliptimingError as e:
                logger.warning(f"Edit rejected during alias resolution: {e.message}")
                raise
            await self.smart_resolver.resolve(project)
            project.end_length_clips.sync(project.clips)
            project.update_duration()

            for clip in self.project.clips:
                self._dispose_on_host(clip)
            previous_duration = self.project.total_duration_ms
            self.project = project
            self.history.clear()

            logger.info(
                f"Loaded edit: {project.track_count} tracks, {len(project.clips)} clips, "
                f"duration {project.total_duration_ms}ms"
            )
            if previous_duration != project.total_duration_ms:
                self.emit(
                    EditEvent.DURATION_CHANGED,
                    DurationChangedPayload(
                        previous_ms=previous_duration, duration_ms=project.total_duration_ms
                    ),
                )
            self.emit(
                EditEvent.TIMELINE_UPDATED,
                TimelineUpdatedPayload(current=project.to_document(resolved=True)),
            )

    # =========================================================================
    # Command execution
    # =========================================================================

    async def execute_command(self, command: EditCommand) -> CommandResult:
        """
        Execute a command and record it for undo.

        Invalid indices make the command a logged no-op; any other failure
        is rolled back through the command's own undo. Neither is recorded.
        """
        async with self._lock:
            try:
                await command.execute(self)
            except StructuralError as e:
                logger.warning(f"Ignoring {command.name}: {e.message}")
                return CommandResult(command=command.name, success=False, error=e.to_error_info())
            except Exception as e:
                logger.exception(f"Command {command.name} failed; rolling back")
                await self._rollback(command)
                self._flush_disposals()
                if not isinstance(e, CliptimingError):
                    e = CommandExecutionError(command.name, str(e))
                return CommandResult(command=command.name, success=False, error=e.to_error_info())

            self.history.push(command)
            self._flush_disposals()
            logger.info(f"Executed {command.name}")
            return CommandResult(command=command.name, success=True)

    async def undo(self) -> bool:
        async with self._lock:
            command = self.history.peek_undo()
            if command is None:
                return False
            try:
                await command.undo(self)
            except Exception:
                logger.exception(f"Undo of {command.name} failed")
                return False
            self.history.mark_undone()
            self._flush_disposals()
            logger.info(f"Undid {command.name}")
            self.emit(EditEvent.EDIT_UNDO, HistoryEventPayload(command=command.name))
            return True

    async def redo(self) -> bool:
        async with self._lock:
            command = self.history.peek_redo()
            if command is None:
                return False
            try:
                await command.redo(self)
            except Exception:
                logger.exception(f"Redo of {command.name} failed; rolling back")
                await self._rollback(command)
                self._flush_disposals()
                return False
            self.history.mark_redone()
            self._flush_disposals()
            logger.info(f"Redid {command.name}")
            self.emit(EditEvent.EDIT_REDO, HistoryEventPayload(command=command.name))
            return True

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def get_history(self) -> HistoryResponse:
        return self.history.summary()

    async def _rollback(self, command: EditCommand) -> None:
        try:
            await command.undo(self)
        except Exception:
            logger.exception(f"Rollback of {command.name} failed")

    # =========================================================================
    # Convenience wrappers
    # =========================================================================

    async def add_clip(
        self,
        track_index: int,
        clip: ClipConfig | dict[str, Any],
        clip_index: int | None = None,
    ) -> CommandResult:
        return await self.execute_command(AddClipCommand(track_index, clip, clip_index))

    async def delete_clip(self, track_index: int, clip_index: int) -> CommandResult:
        return await self.execute_command(DeleteClipCommand(track_index, clip_index))

    async def add_track(self, track_index: int) -> CommandResult:
        return await self.execute_command(AddTrackCommand(track_index))

    async def delete_track(self, track_index: int) -> CommandResult:
        return await self.execute_command(DeleteTrackCommand(track_index))

    async def resize_clip(
        self, track_index: int, clip_index: int, new_length: float
    ) -> CommandResult:
        return await self.execute_command(ResizeClipCommand(track_index, clip_index, new_length))

    async def update_clip_timing(
        self,
        track_index: int,
        clip_index: int,
        start: int | str | None = None,
        length: int | str | None = None,
    ) -> CommandResult:
        return await self.execute_command(
            UpdateClipTimingCommand(track_index, clip_index, start=start, length=length)
        )

    async def update_clip(
        self, track_index: int, clip_index: int, config: ClipConfig | dict[str, Any]
    ) -> CommandResult:
        return await self.execute_command(SetUpdatedClipCommand(track_index, clip_index, config))

    async def move_clip(
        self, from_track: int, from_clip: int, to_track: int, new_start: float
    ) -> CommandResult:
        return await self.execute_command(
            MoveClipCommand(from_track, from_clip, to_track, new_start)
        )

    async def split_clip(
        self, track_index: int, clip_index: int, split_time: float
    ) -> CommandResult:
        return await self.execute_command(SplitClipCommand(track_index, clip_index, split_time))

    # =========================================================================
    # Snapshots
    # =========================================================================

    def get_edit(self) -> dict[str, Any]:
        """The project as declared (smart timing kept symbolic)."""
        return self.project.to_document()

    def get_resolved_edit(self) -> dict[str, Any]:
        """The project with every start/length as numeric seconds."""
        return self.project.to_document(resolved=True)

    @property
    def total_duration_ms(self) -> int:
        return self.project.total_duration_ms

    def get_clip(self, track_index: int, clip_index: int) -> Clip | None:
        return self.project.clip_at(track_index, clip_index)

    def find_clip(self, clip_id: str) -> tuple[int, int, Clip] | None:
        return self.project.find_clip_by_id(clip_id)

    # =========================================================================
    # CommandContext
    # =========================================================================

    @property
    def tracks(self) -> list[list[Clip]]:
        return self.project.tracks

    def emit(self, event: EditEvent, payload: BaseModel | dict[str, Any] | None = None) -> None:
        self.events.emit(event, payload)

    def dispose_clip(self, clip: Clip) -> None:
        self.project.queue_dispose(clip)

    def rebuild_clip(self, clip: Clip) -> None:
        try:
            self.render_host.rebuild_clip(clip)
        except Exception:
            logger.exception(f"Render host failed to rebuild clip {clip.id}")

    def reparent_clip(self, clip: Clip, from_layer: int, to_layer: int) -> None:
        try:
            self.render_host.reparent_clip(clip, from_layer, to_layer)
        except Exception:
            logger.exception(
                f"Render host failed to reparent clip {clip.id} from layer {from_layer} to {to_layer}"
            )

    async def propagate(
        self,
        track_index: int | None = None,
        from_clip_index: int = -1,
        extra_anchors: Iterable[tuple[int, int]] = (),
    ) -> PropagationReport:
        return await self.propagation.propagate(
            self.project, track_index, from_clip_index, extra_anchors=extra_anchors
        )

    def _dispose_on_host(self, clip: Clip) -> None:
        try:
            self.render_host.dispose_clip(clip)
        except Exception:
            logger.exception(f"Render host failed to dispose clip {clip.id}")

    def _flush_disposals(self) -> None:
        for clip in self.project.dispose_queued():
            self._dispose_on_host(clip)
