"""Media duration probing using FFprobe."""

import asyncio
import json
import logging

from cliptiming.config import get_settings

logger = logging.getLogger(__name__)


async def _run_ffprobe(src: str, *args: str, ffprobe_path: str | None = None) -> dict:
    """Run ffprobe asynchronously and return parsed JSON."""
    cmd = [
        ffprobe_path or get_settings().ffprobe_path,
        "-v", "quiet",
        "-print_format", "json",
        *args,
        src,
    ]

    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await process.communicate()

    if process.returncode != 0:
        raise RuntimeError(f"ffprobe failed: {stderr.decode(errors='replace')}")

    try:
        return json.loads(stdout.decode())
    except json.JSONDecodeError as e:
        raise RuntimeError(f"Failed to parse ffprobe output: {e}")


async def get_media_duration(src: str, ffprobe_path: str | None = None) -> float:
    """
    Get media duration in seconds.

    Args:
        src: Media URL or path
        ffprobe_path: Override for the configured ffprobe binary

    Returns:
        Duration in seconds

    Raises:
        RuntimeError: If ffprobe fails or duration not found
    """
    data = await _run_ffprobe(src, "-show_format", ffprobe_path=ffprobe_path)
    format_info = data.get("format", {})

    if "duration" not in format_info:
        raise RuntimeError(f"Duration not found in: {src}")

    try:
        return float(format_info["duration"])
    except (TypeError, ValueError):
        raise RuntimeError(f"Unparseable duration {format_info['duration']!r} in: {src}")


class FFprobeDurationProber:
    """DurationProber backed by the ffprobe binary.

    Failures are reported as None; the caller decides the fallback length.
    """

    def __init__(self, ffprobe_path: str | None = None):
        self.ffprobe_path = ffprobe_path or get_settings().ffprobe_path

    async def probe_duration(self, src: str) -> float | None:
        try:
            return await get_media_duration(src, ffprobe_path=self.ffprobe_path)
        except (RuntimeError, OSError) as e:
            logger.warning(f"Duration probe failed for {src}: {e}")
            return None
