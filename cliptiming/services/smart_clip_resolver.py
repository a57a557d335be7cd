"""Two-phase resolution of "auto" and "end" timing.

Phase 1 walks each track in clip order with a running cursor: "auto"
starts take the cursor, "auto" lengths come from the probed media
duration. Tracks are independent and run concurrently.

Phase 2 runs once every track has finished Phase 1 and sizes each
"end"-length clip so it finishes at the timeline end.
"""

import asyncio
import logging
import math

from cliptiming.config import Settings, get_settings
from cliptiming.interfaces import DurationProber
from cliptiming.models.project import Clip, ProjectState
from cliptiming.schemas.timing import AliasRef
from cliptiming.utils.timing import clamp_length, to_ms

logger = logging.getLogger(__name__)


class SmartClipResolver:
    """Resolves smart timing intents into concrete milliseconds."""

    def __init__(self, prober: DurationProber | None = None, settings: Settings | None = None):
        self.prober = prober
        self.settings = settings or get_settings()

    @property
    def default_length_ms(self) -> int:
        return to_ms(self.settings.default_auto_length_s)

    async def resolve(self, project: ProjectState) -> None:
        """Resolve every clip's smart timing in place."""
        await asyncio.gather(*(self.resolve_track(track) for track in project.tracks))
        self.resolve_end_lengths(project)

    async def resolve_track(self, track: list[Clip]) -> None:
        """Phase 1 for one track."""
        live = [clip for clip in track if not clip.disposed]
        if not live:
            return

        first_start = live[0].intent.start
        cursor = live[0].resolved.start if first_start != "auto" else 0

        for clip in live:
            start = cursor if clip.intent.start == "auto" else self._numeric_start(clip)

            length = clip.resolved.length
            if clip.intent.length == "auto":
                length = await self.resolve_auto_length(clip.asset)
            elif isinstance(clip.intent.length, float):
                length = clamp_length(to_ms(clip.intent.length), self.settings.min_clip_length_ms)

            clip.set_resolved(start=start, length=length)
            cursor = clip.cursor_end_ms

    def _numeric_start(self, clip: Clip) -> int:
        if isinstance(clip.intent.start, AliasRef):
            # Written by the alias pass.
            return clip.resolved.start
        return to_ms(clip.intent.start)

    def resolve_end_lengths(self, project: ProjectState) -> list[Clip]:
        """
        Phase 2: size every "end"-length clip to reach the timeline end.

        The timeline end excludes all "end"-length clips, so none of them
        feeds into its own length.

        Returns:
            Clips whose resolved length changed
        """
        end_clips = [clip for clip in project.clips if clip.intent.length == "end"]
        if not end_clips:
            return []

        timeline_end = project.timeline_end(exclude_end_length=True)
        changed: list[Clip] = []
        for clip in end_clips:
            length = clamp_length(
                timeline_end - clip.resolved.start, self.settings.min_clip_length_ms
            )
            if length != clip.resolved.length:
                clip.set_resolved(length=length)
                changed.append(clip)
        logger.debug(
            f"Resolved {len(end_clips)} end-length clips against timeline end {timeline_end}ms"
        )
        return changed

    async def resolve_auto_length(self, asset) -> int:
        """
        Resolve an "auto" length for an asset.

        Probeable media (video/audio/luma with a src) use the probed duration
        minus the asset's trim; everything else, and every probe failure,
        falls back to the default length.

        Returns:
            Length in milliseconds, never below the minimum floor
        """
        floor = self.settings.min_clip_length_ms
        asset_type = getattr(asset, "type", None)
        src = getattr(asset, "src", None)

        if asset_type not in self.settings.probeable_asset_types or not src:
            return clamp_length(self.default_length_ms, floor)

        duration = await self._probe(src)
        if duration is None:
            return clamp_length(self.default_length_ms, floor)

        trim = getattr(asset, "trim", 0) or 0
        return clamp_length(to_ms(duration - trim), floor)

    async def resolve_clip_auto_length(self, clip: Clip) -> int:
        """Re-probe one "auto"-length clip and write the result."""
        length = await self.resolve_auto_length(clip.asset)
        clip.set_resolved(length=length)
        return length

    async def _probe(self, src: str) -> float | None:
        if self.prober is None:
            logger.debug(f"No duration prober configured; default length for {src}")
            return None
        try:
            duration = await asyncio.wait_for(
                self.prober.probe_duration(src), timeout=self.settings.probe_timeout_s
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Duration probe for {src} timed out after {self.settings.probe_timeout_s}s; "
                "using default length"
            )
            return None
        except Exception as e:
            logger.warning(f"Duration probe for {src} failed: {e}; using default length")
            return None

        if duration is None or not isinstance(duration, (int, float)) or not math.isfinite(duration):
            logger.warning(f"Duration probe for {src} returned {duration!r}; using default length")
            return None
        return float(duration)
