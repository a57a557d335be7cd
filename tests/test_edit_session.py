"""Tests for EditSession: loading, command execution, rollback and history."""

import asyncio

import pytest
from pydantic import ValidationError

from builders import clip, edit, resolved, video
from cliptiming.commands.base import CommandContext, EditCommand
from cliptiming.config import Settings
from cliptiming.exceptions import CircularAliasReferenceError
from cliptiming.schemas.events import EditEvent
from cliptiming.schemas.timing import TimingIntent
from cliptiming.services.edit_session import EditSession

SRC = "https://cdn.example.com/a.mp4"


class ExplodingCommand(EditCommand):
    """Mutates a clip, then fails."""

    name = "exploding"

    def __init__(self):
        self.undone = False
        self._previous = None

    async def execute(self, context: CommandContext) -> None:
        target = context.project.require_clip(0, 0)
        self._previous = target.intent
        target.set_intent(TimingIntent(start=9.0, length=target.intent.length))
        target.set_resolved(start=9000)
        raise RuntimeError("asset failed to load")

    async def undo(self, context: CommandContext) -> None:
        self.undone = True
        target = context.project.require_clip(0, 0)
        target.set_intent(self._previous)
        target.set_resolved(start=0)


class TestLoadEdit:
    """Loading and resolving a project document."""

    @pytest.mark.asyncio
    async def test_load_resolves_everything(self, session, prober):
        prober.durations[SRC] = 10.0
        updates = []
        session.events.on(EditEvent.TIMELINE_UPDATED, updates.append)

        await session.load_edit(
            edit(
                [clip(0, "auto", asset=video(SRC, trim=1), alias="intro"), clip("auto", 2)],
                [clip("alias://intro", "end")],
            )
        )

        assert resolved(session) == [[(0, 9000), (9000, 2000)], [(0, 11000)]]
        assert session.total_duration_ms == 11000
        assert len(updates) == 1

    @pytest.mark.asyncio
    async def test_snapshots(self, session):
        await session.load_edit(edit([clip(0, 2, alias="a"), clip("auto", "end")]))

        declared = session.get_edit()["timeline"]["tracks"][0]["clips"]
        numeric = session.get_resolved_edit()["timeline"]["tracks"][0]["clips"]

        assert (declared[1]["start"], declared[1]["length"]) == ("auto", "end")
        assert (numeric[1]["start"], numeric[1]["length"]) == (2.0, 0.1)
        assert numeric[0]["alias"] == "a"

    @pytest.mark.asyncio
    async def test_document_extras_round_trip(self, session):
        document = edit([clip(0, 1)])
        document["timeline"]["background"] = "#000000"
        document["timeline"]["fonts"] = [{"src": "font.ttf"}]
        document["output"] = {"format": "mp4"}

        await session.load_edit(document)
        snapshot = session.get_edit()

        assert snapshot["timeline"]["background"] == "#000000"
        assert snapshot["timeline"]["fonts"] == [{"src": "font.ttf"}]
        assert snapshot["output"] == {"format": "mp4"}

    @pytest.mark.asyncio
    async def test_alias_failure_keeps_previous_project(self, session):
        await session.load_edit(edit([clip(0, 2)]))
        before = session.get_edit()

        with pytest.raises(CircularAliasReferenceError):
            await session.load_edit(
                edit([clip("alias://b", 1, alias="a")], [clip("alias://a", 1, alias="b")])
            )

        assert session.get_edit() == before

    @pytest.mark.asyncio
    async def test_invalid_document_keeps_previous_project(self, session):
        await session.load_edit(edit([clip(0, 2)]))

        with pytest.raises(ValidationError):
            await session.load_edit(edit([clip("end", 1)]))

        assert resolved(session) == [[(0, 2000)]]

    @pytest.mark.asyncio
    async def test_reload_disposes_previous_clips_and_history(self, session, render_host):
        await session.load_edit(edit([clip(0, 2)]))
        old_clip = session.get_clip(0, 0)
        await session.add_track(1)

        await session.load_edit(edit([clip(0, 1)]))

        render_host.dispose_clip.assert_called_with(old_clip)
        assert not session.can_undo


class TestExecuteCommand:
    """Command execution, rollback and serialization."""

    @pytest.mark.asyncio
    async def test_failure_rolls_back(self, session):
        await session.load_edit(edit([clip(0, 2)]))
        command = ExplodingCommand()

        result = await session.execute_command(command)

        assert not result.success
        assert result.error.code == "COMMAND_EXECUTION_FAILED"
        assert "asset failed to load" in result.error.message
        assert command.undone
        assert resolved(session) == [[(0, 2000)]]
        assert not session.can_undo

    @pytest.mark.asyncio
    async def test_render_host_failure_is_contained(self, session, render_host):
        render_host.rebuild_clip.side_effect = RuntimeError("canvas lost")
        await session.load_edit(edit([clip(0, 2)]))

        result = await session.resize_clip(0, 0, 3)

        assert result.success
        assert resolved(session) == [[(0, 3000)]]

    @pytest.mark.asyncio
    async def test_commands_are_serialized(self, session, prober):
        prober.durations[SRC] = 2.0
        await session.load_edit(edit([clip(0, 1)]))

        results = await asyncio.gather(
            session.add_clip(0, clip("auto", "auto", asset=video(SRC))),
            session.add_clip(0, clip("auto", "auto", asset=video(SRC))),
        )

        assert all(r.success for r in results)
        assert resolved(session) == [[(0, 1000), (1000, 2000), (3000, 2000)]]

    @pytest.mark.asyncio
    async def test_commands_update_duration_through_propagation(self, session):
        await session.load_edit(edit([clip(0, 2)]))
        changes = []
        session.events.on(EditEvent.DURATION_CHANGED, changes.append)

        await session.resize_clip(0, 0, 4)
        await session.resize_clip(0, 0, 4)

        assert session.total_duration_ms == 4000
        assert [c.data for c in changes] == [{"previous_ms": 2000, "duration_ms": 4000}]
        assert not hasattr(CommandContext, "update_duration")

    @pytest.mark.asyncio
    async def test_find_clip(self, session):
        await session.load_edit(edit([clip(0, 2)], [clip(1, 1)]))
        target = session.get_clip(1, 0)

        assert session.find_clip(target.id) == (1, 0, target)
        assert session.find_clip("missing") is None


class TestHistory:
    """Undo/redo stack behavior."""

    @pytest.mark.asyncio
    async def test_empty_history(self, session):
        await session.load_edit(edit([clip(0, 2)]))

        assert await session.undo() is False
        assert await session.redo() is False

    @pytest.mark.asyncio
    async def test_undo_redo_events_and_summary(self, session):
        await session.load_edit(edit([clip(0, 2)]))
        received = []
        session.events.on(EditEvent.EDIT_UNDO, received.append)
        session.events.on(EditEvent.EDIT_REDO, received.append)

        await session.add_clip(0, clip("auto", 1))
        await session.resize_clip(0, 0, 3)
        await session.undo()

        history = session.get_history()
        assert [(op.command, op.state) for op in history.operations] == [
            ("add_clip", "applied"),
            ("resize_clip", "undone"),
        ]
        assert history.can_undo and history.can_redo

        await session.redo()
        assert [r.event_type for r in received] == [EditEvent.EDIT_UNDO, EditEvent.EDIT_REDO]
        assert received[0].data == {"command": "resize_clip"}
        assert resolved(session) == [[(0, 3000), (3000, 1000)]]

    @pytest.mark.asyncio
    async def test_new_command_drops_redo_tail(self, session):
        await session.load_edit(edit([clip(0, 2)]))
        await session.resize_clip(0, 0, 3)
        await session.undo()

        await session.resize_clip(0, 0, 5)

        assert not session.can_redo
        assert len(session.history) == 1

    @pytest.mark.asyncio
    async def test_history_limit(self, prober, render_host):
        session = EditSession(
            prober=prober,
            render_host=render_host,
            settings=Settings(_env_file=None, history_limit=2),
        )
        await session.load_edit(edit([clip(0, 2)]))

        for length in (3, 4, 5):
            await session.resize_clip(0, 0, length)

        assert len(session.history) == 2
        assert await session.undo()
        assert await session.undo()
        assert not await session.undo()
        assert resolved(session) == [[(0, 3000)]]
