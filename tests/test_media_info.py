"""
Tests for ffprobe-backed duration probing.

Test cases:
1. Parse duration from ffprobe JSON
2. Report failures as None from the prober
3. Raise RuntimeError from get_media_duration
"""

import logging
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from cliptiming.interfaces import DurationProber
from cliptiming.utils.media_info import FFprobeDurationProber, get_media_duration

SRC = "https://cdn.example.com/a.mp4"


def fake_process(stdout: bytes, returncode: int = 0, stderr: bytes = b"") -> MagicMock:
    process = MagicMock()
    process.communicate = AsyncMock(return_value=(stdout, stderr))
    process.returncode = returncode
    return process


class TestGetMediaDuration:
    """get_media_duration()"""

    @pytest.mark.asyncio
    async def test_parses_format_duration(self):
        process = fake_process(b'{"format": {"duration": "12.500000"}}')
        with patch("asyncio.create_subprocess_exec", new=AsyncMock(return_value=process)) as run:
            duration = await get_media_duration(SRC, ffprobe_path="/usr/bin/ffprobe")

        assert duration == 12.5
        args = run.call_args.args
        assert args[0] == "/usr/bin/ffprobe"
        assert "-show_format" in args
        assert args[-1] == SRC

    @pytest.mark.asyncio
    async def test_nonzero_exit_raises(self):
        process = fake_process(b"", returncode=1, stderr=b"No such file")
        with patch("asyncio.create_subprocess_exec", new=AsyncMock(return_value=process)):
            with pytest.raises(RuntimeError, match="ffprobe failed"):
                await get_media_duration(SRC)

    @pytest.mark.asyncio
    async def test_missing_duration_raises(self):
        process = fake_process(b'{"format": {}}')
        with patch("asyncio.create_subprocess_exec", new=AsyncMock(return_value=process)):
            with pytest.raises(RuntimeError, match="Duration not found"):
                await get_media_duration(SRC)


class TestFFprobeDurationProber:
    """FFprobeDurationProber.probe_duration()"""

    def test_satisfies_protocol(self):
        assert isinstance(FFprobeDurationProber("ffprobe"), DurationProber)

    @pytest.mark.asyncio
    async def test_returns_seconds(self):
        process = fake_process(b'{"format": {"duration": "3.2"}}')
        with patch("asyncio.create_subprocess_exec", new=AsyncMock(return_value=process)):
            assert await FFprobeDurationProber("ffprobe").probe_duration(SRC) == 3.2

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "process",
        [
            fake_process(b"not json"),
            fake_process(b"", returncode=1),
            fake_process(b'{"format": {"duration": "N/A"}}'),
        ],
        ids=["bad-json", "exit-code", "unparseable"],
    )
    async def test_failures_return_none(self, process, caplog):
        with patch("asyncio.create_subprocess_exec", new=AsyncMock(return_value=process)):
            with caplog.at_level(logging.WARNING):
                result = await FFprobeDurationProber("ffprobe").probe_duration(SRC)

        assert result is None
        assert "Duration probe failed" in caplog.text

    @pytest.mark.asyncio
    async def test_missing_binary_returns_none(self):
        run = AsyncMock(side_effect=FileNotFoundError("ffprobe"))
        with patch("asyncio.create_subprocess_exec", new=run):
            assert await FFprobeDurationProber("ffprobe").probe_duration(SRC) is None
