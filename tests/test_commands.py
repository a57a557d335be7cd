"""Tests for the reversible edit commands.

Every command is checked for its effect and for exact round-trip undo:
resolved timing, track composition, layers and clip identities.
"""

import pytest

from builders import clip, clip_ids, edit, layers, resolved, video
from cliptiming.commands import (
    AddClipCommand,
    CreateTrackAndMoveClipCommand,
    UpdateClipPositionCommand,
)
from cliptiming.schemas.events import EditEvent

SRC = "https://cdn.example.com/a.mp4"
SRC2 = "https://cdn.example.com/b.mp4"


def state_of(session):
    return resolved(session), layers(session), clip_ids(session), session.total_duration_ms


def declared(session, track_index, clip_index):
    return session.get_edit()["timeline"]["tracks"][track_index]["clips"][clip_index]


class TestAddClip:
    """AddClipCommand"""

    @pytest.mark.asyncio
    async def test_add_clip_sequences_and_extends_end_clip(self, session):
        await session.load_edit(edit([clip(0, 2)], [clip(0, "end")]))
        before = state_of(session)
        added = []
        session.events.on(EditEvent.CLIP_ADDED, added.append)

        result = await session.add_clip(0, clip("auto", 3))

        assert result.success
        assert resolved(session) == [[(0, 2000), (2000, 3000)], [(0, 5000)]]
        assert session.total_duration_ms == 5000
        assert added[0].data["clip_index"] == 1

        assert await session.undo()
        assert state_of(session) == before

    @pytest.mark.asyncio
    async def test_add_auto_length_clip_probes(self, session, prober):
        prober.durations[SRC] = 7.5
        await session.load_edit(edit([clip(0, 1)]))

        await session.add_clip(0, clip("auto", "auto", asset=video(SRC)))

        assert resolved(session) == [[(0, 1000), (1000, 7500)]]

    @pytest.mark.asyncio
    async def test_short_literal_length_gets_floor(self, session):
        await session.load_edit(edit([clip(0, 2)]))

        await session.add_clip(0, clip(5, 0.05))

        assert resolved(session) == [[(0, 2000), (5000, 100)]]
        assert declared(session, 0, 1)["length"] == 0.05
        assert session.total_duration_ms == 5100

    @pytest.mark.asyncio
    async def test_added_clip_matches_loaded_clip(self, session):
        document = edit([clip(0, 2), clip("auto", 0.02)])
        await session.load_edit(edit([clip(0, 2)]))
        await session.add_clip(0, clip("auto", 0.02))
        added = resolved(session)

        await session.load_edit(document)

        assert resolved(session) == added == [[(0, 2000), (2000, 100)]]

    @pytest.mark.asyncio
    async def test_redo_reuses_clip_identity(self, session, render_host):
        await session.load_edit(edit([clip(0, 1)]))
        await session.add_clip(0, clip("auto", 1))
        added_id = session.get_clip(0, 1).id

        await session.undo()
        render_host.dispose_clip.assert_called()
        assert await session.redo()

        assert session.get_clip(0, 1).id == added_id
        render_host.rebuild_clip.assert_called()

    @pytest.mark.asyncio
    async def test_invalid_track_is_a_noop(self, session):
        await session.load_edit(edit([clip(0, 1)]))
        before = state_of(session)

        result = await session.add_clip(3, clip(0, 1))

        assert not result.success
        assert result.error.code == "INVALID_TRACK_INDEX"
        assert state_of(session) == before
        assert not session.can_undo


class TestDeleteClip:
    """DeleteClipCommand"""

    @pytest.mark.asyncio
    async def test_delete_resequences_auto_starts(self, session, render_host):
        await session.load_edit(edit([clip(0, 2), clip("auto", 3), clip("auto", 1)]))
        before = state_of(session)
        deleted = session.get_clip(0, 0)

        result = await session.delete_clip(0, 0)

        assert result.success
        assert resolved(session) == [[(0, 3000), (3000, 1000)]]
        render_host.dispose_clip.assert_called_with(deleted)

        await session.undo()
        assert state_of(session) == before

    @pytest.mark.asyncio
    async def test_deleting_only_clip_removes_track(self, session, render_host):
        """Deleting the last clip on a track deletes the track; undo restores both."""
        await session.load_edit(edit([clip(0, 2)], [clip(0, 5)]))
        before = state_of(session)
        survivor = session.get_clip(1, 0)

        result = await session.delete_clip(0, 0)

        assert result.success
        assert session.project.track_count == 1
        assert layers(session) == [[1]]
        render_host.reparent_clip.assert_any_call(survivor, 2, 1)

        await session.undo()
        assert state_of(session) == before
        assert session.project.track_count == 2

    @pytest.mark.asyncio
    async def test_invalid_clip_index_is_a_noop(self, session):
        await session.load_edit(edit([clip(0, 2)]))

        result = await session.delete_clip(0, 4)

        assert result.error.code == "INVALID_CLIP_INDEX"
        assert session.project.track_count == 1
        assert not session.can_undo


class TestTracks:
    """AddTrackCommand / DeleteTrackCommand"""

    @pytest.mark.asyncio
    async def test_add_track_shifts_layers(self, session, render_host):
        await session.load_edit(edit([clip(0, 1)], [clip(0, 2)]))
        before = state_of(session)
        upper = session.get_clip(1, 0)

        await session.add_track(1)

        assert layers(session) == [[1], [], [3]]
        render_host.reparent_clip.assert_called_with(upper, 2, 3)

        await session.undo()
        assert state_of(session) == before

    @pytest.mark.asyncio
    async def test_add_track_out_of_range(self, session):
        await session.load_edit(edit([clip(0, 1)]))

        result = await session.add_track(5)

        assert result.error.code == "INVALID_TRACK_INDEX"

    @pytest.mark.asyncio
    async def test_delete_track_round_trip(self, session):
        await session.load_edit(edit([clip(0, 1)], [clip(0, 4)], [clip(0, 3)]))
        before = state_of(session)

        await session.delete_track(1)

        assert layers(session) == [[1], [2]]
        assert session.total_duration_ms == 3000

        await session.undo()
        assert state_of(session) == before


class TestResizeClip:
    """ResizeClipCommand"""

    @pytest.mark.asyncio
    async def test_resize_freezes_auto_length(self, session, prober):
        prober.durations[SRC] = 10.0
        await session.load_edit(edit([clip(0, "auto", asset=video(SRC)), clip("auto", 2)]))
        before = state_of(session)

        await session.resize_clip(0, 0, 4)

        assert resolved(session) == [[(0, 4000), (4000, 2000)]]
        assert declared(session, 0, 0)["length"] == 4.0

        await session.undo()
        assert state_of(session) == before
        assert declared(session, 0, 0)["length"] == "auto"

    @pytest.mark.asyncio
    async def test_resize_end_clip_leaves_end_set(self, session):
        await session.load_edit(edit([clip(0, 6)], [clip(1, "end")]))
        end_clip = session.get_clip(1, 0)

        await session.resize_clip(1, 0, 2)

        assert end_clip not in session.project.end_length_clips
        assert end_clip.length_ms == 2000

        await session.undo()
        assert end_clip in session.project.end_length_clips
        assert end_clip.length_ms == 5000

    @pytest.mark.asyncio
    async def test_negative_length_fails_without_change(self, session):
        await session.load_edit(edit([clip(0, 6)]))
        before = state_of(session)

        result = await session.resize_clip(0, 0, -1)

        assert result.error.code == "INVALID_TIMING_VALUE"
        assert state_of(session) == before


class TestUpdateClipTiming:
    """UpdateClipTimingCommand"""

    @pytest.mark.asyncio
    async def test_switch_to_end_length(self, session):
        await session.load_edit(edit([clip(0, 6)], [clip(1, 2)]))
        before = state_of(session)
        target = session.get_clip(1, 0)

        await session.update_clip_timing(1, 0, length="end")

        assert target in session.project.end_length_clips
        assert target.end_ms == 6000

        await session.undo()
        assert target not in session.project.end_length_clips
        assert state_of(session) == before

    @pytest.mark.asyncio
    async def test_start_alias(self, session):
        await session.load_edit(edit([clip(3, 1, alias="hero")], [clip(0, 2)]))

        await session.update_clip_timing(1, 0, start="alias://hero")

        assert session.get_clip(1, 0).start_ms == 3000
        assert declared(session, 1, 0)["start"] == "alias://hero"

    @pytest.mark.asyncio
    async def test_millisecond_values(self, session):
        await session.load_edit(edit([clip(0, 2)]))

        await session.update_clip_timing(0, 0, start=1500, length=2250)

        assert resolved(session) == [[(1500, 2250)]]
        assert declared(session, 0, 0)["start"] == 1.5

    @pytest.mark.asyncio
    async def test_unknown_alias_rolls_back(self, session):
        await session.load_edit(edit([clip(3, 1, alias="hero")], [clip(0, 2)]))
        before = state_of(session)

        result = await session.update_clip_timing(1, 0, start="alias://ghost")

        assert not result.success
        assert result.error.code == "ALIAS_NOT_FOUND"
        assert result.error.user_visible
        assert state_of(session) == before
        assert declared(session, 1, 0)["start"] == 0
        assert not session.can_undo

    @pytest.mark.asyncio
    async def test_auto_length_reprobes(self, session, prober):
        prober.durations[SRC] = 7.0
        await session.load_edit(edit([clip(0, 2, asset=video(SRC))]))

        await session.update_clip_timing(0, 0, length="auto")

        assert resolved(session) == [[(0, 7000)]]


class TestUpdateClip:
    """SetUpdatedClipCommand / UpdateClipPositionCommand"""

    @pytest.mark.asyncio
    async def test_src_change_reprobes_auto_length(self, session, prober):
        prober.durations.update({SRC: 5.0, SRC2: 8.0})
        await session.load_edit(edit([clip(0, "auto", asset=video(SRC)), clip("auto", 1)]))
        before = state_of(session)

        await session.update_clip(0, 0, clip(0, "auto", asset=video(SRC2)))

        assert resolved(session) == [[(0, 8000), (8000, 1000)]]
        assert prober.calls == [SRC, SRC2]

        await session.undo()
        assert state_of(session) == before

    @pytest.mark.asyncio
    async def test_same_src_does_not_reprobe(self, session, prober):
        prober.durations[SRC] = 5.0
        await session.load_edit(edit([clip(0, "auto", asset=video(SRC))]))

        await session.update_clip(0, 0, clip(0, "auto", asset=video(SRC), fit="cover"))

        assert prober.calls == [SRC]
        assert declared(session, 0, 0)["fit"] == "cover"

    @pytest.mark.asyncio
    async def test_position_patch(self, session):
        await session.load_edit(edit([clip(0, 2)]))

        result = await session.execute_command(
            UpdateClipPositionCommand(0, 0, {"offset": {"x": 0.1, "y": -0.2}})
        )

        assert result.success
        assert declared(session, 0, 0)["offset"] == {"x": 0.1, "y": -0.2}
        assert resolved(session) == [[(0, 2000)]]

        await session.undo()
        assert "offset" not in declared(session, 0, 0)


class TestMoveClip:
    """MoveClipCommand"""

    @pytest.mark.asyncio
    async def test_move_to_other_track_removes_empty_source(self, session):
        await session.load_edit(edit([clip(0, 2)], [clip(0, 1), clip(5, 1)]))
        before = state_of(session)

        result = await session.move_clip(0, 0, 1, 2.0)

        assert result.success
        assert resolved(session) == [[(0, 1000), (2000, 2000), (5000, 1000)]]
        assert layers(session) == [[1, 1, 1]]

        await session.undo()
        assert state_of(session) == before

    @pytest.mark.asyncio
    async def test_move_within_track_reorders(self, session):
        await session.load_edit(edit([clip(0, 1), clip(2, 1), clip(4, 1)]))
        before = state_of(session)

        await session.move_clip(0, 0, 0, 3.0)

        assert resolved(session) == [[(2000, 1000), (3000, 1000), (4000, 1000)]]

        await session.undo()
        assert state_of(session) == before


class TestSplitClip:
    """SplitClipCommand"""

    @pytest.mark.asyncio
    async def test_split_advances_trim(self, session, render_host):
        await session.load_edit(edit([clip(0, 10, asset=video(SRC, trim=1), alias="hero")]))
        before = state_of(session)
        split = []
        session.events.on(EditEvent.CLIP_SPLIT, split.append)

        result = await session.split_clip(0, 0, 4.0)

        assert result.success
        assert resolved(session) == [[(0, 4000), (4000, 6000)]]
        right = declared(session, 0, 1)
        assert right["asset"]["trim"] == 5.0
        assert "alias" not in right
        assert split[0].data["new_clip_index"] == 1

        right_clip = session.get_clip(0, 1)
        await session.undo()
        assert state_of(session) == before
        render_host.dispose_clip.assert_called_with(right_clip)

    @pytest.mark.asyncio
    async def test_split_too_close_to_edge_fails(self, session):
        await session.load_edit(edit([clip(0, 10)]))
        before = state_of(session)

        result = await session.split_clip(0, 0, 0.05)

        assert result.error.code == "INVALID_SPLIT_POINT"
        assert state_of(session) == before


class TestCreateTrackAndMoveClip:
    """CreateTrackAndMoveClipCommand"""

    @pytest.mark.asyncio
    async def test_round_trip(self, session):
        await session.load_edit(edit([clip(0, 2), clip(3, 1)]))
        before = state_of(session)

        result = await session.execute_command(CreateTrackAndMoveClipCommand(0, 0, 1, 5.0))

        assert result.success
        assert resolved(session) == [[(5000, 1000)], [(0, 2000)]]
        assert layers(session) == [[1], [2]]

        await session.undo()
        assert state_of(session) == before

    @pytest.mark.asyncio
    async def test_invalid_source_is_a_noop(self, session):
        await session.load_edit(edit([clip(0, 2)]))

        result = await session.execute_command(CreateTrackAndMoveClipCommand(0, 0, 3, 1.0))

        assert result.error.code == "INVALID_CLIP_INDEX"
        assert session.project.track_count == 1


class TestCommandObjects:
    """Commands used directly against a session."""

    @pytest.mark.asyncio
    async def test_add_clip_accepts_dict_config(self, session):
        await session.load_edit(edit([]))
        command = AddClipCommand(0, clip(1, 2))

        await session.execute_command(command)

        assert command.clip is session.get_clip(0, 0)
        assert command.clip.layer == 1
