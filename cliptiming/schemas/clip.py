"""Project document schemas (edit -> timeline -> tracks -> clips).

Timing fields keep the user's declared values: seconds, "auto", "end"
(length only) or "alias://<name>". Fields this engine does not interpret
are preserved via extra="allow".
"""

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cliptiming.schemas.asset import Asset
from cliptiming.schemas.timing import ALIAS_NAME_PATTERN, ALIAS_REFERENCE_RE

TimingValue = float | str


def _check_timing_value(value: Any, field: str) -> TimingValue:
    if isinstance(value, bool):
        raise ValueError(f"{field} must be a number of seconds or a keyword, got {value!r}")
    if isinstance(value, (int, float)):
        if not math.isfinite(value) or value < 0:
            raise ValueError(f"{field} must be a non-negative number of seconds, got {value!r}")
        return value
    if value == "auto" or (value == "end" and field == "length"):
        return value
    if isinstance(value, str) and ALIAS_REFERENCE_RE.match(value):
        return value
    allowed = "'auto', 'end'" if field == "length" else "'auto'"
    raise ValueError(f"{field} must be seconds, {allowed} or 'alias://<name>', got {value!r}")


class ClipConfig(BaseModel):
    """A clip as it appears in the project document."""

    model_config = ConfigDict(extra="allow")

    asset: Asset
    start: TimingValue = 0
    length: TimingValue
    alias: str | None = Field(default=None, pattern=rf"^{ALIAS_NAME_PATTERN}$")

    @field_validator("start", mode="before")
    @classmethod
    def validate_start(cls, v: Any) -> TimingValue:
        return _check_timing_value(v, "start")

    @field_validator("length", mode="before")
    @classmethod
    def validate_length(cls, v: Any) -> TimingValue:
        return _check_timing_value(v, "length")


class TrackConfig(BaseModel):
    model_config = ConfigDict(extra="allow")

    clips: list[ClipConfig] = Field(default_factory=list)


class TimelineConfig(BaseModel):
    model_config = ConfigDict(extra="allow")

    background: str | None = None
    tracks: list[TrackConfig] = Field(default_factory=list)


class EditDocument(BaseModel):
    """The full project document."""

    model_config = ConfigDict(extra="allow")

    timeline: TimelineConfig = Field(default_factory=TimelineConfig)
    output: dict[str, Any] | None = None
