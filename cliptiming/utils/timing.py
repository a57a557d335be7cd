"""Time unit conversions and timing-intent classification.

All functions here are pure: no logging side effects beyond debug traces,
no project state.
"""

import logging
import math
from typing import Any

from cliptiming.exceptions import InvalidTimingValueError
from cliptiming.schemas.timing import (
    ALIAS_REFERENCE_RE,
    AliasRef,
    LengthIntent,
    StartIntent,
    TimingField,
    TimingIntent,
    TimingKind,
)

logger = logging.getLogger(__name__)


def to_ms(seconds: float) -> int:
    """Convert seconds to whole milliseconds.

    Non-finite input converts to 0 so the conversion never raises.
    """
    if not math.isfinite(seconds):
        logger.debug(f"Non-finite seconds value {seconds!r} converted to 0ms")
        return 0
    return int(round(seconds * 1000))


def to_sec(milliseconds: int | float) -> float:
    """Convert milliseconds to seconds."""
    if not math.isfinite(milliseconds):
        logger.debug(f"Non-finite milliseconds value {milliseconds!r} converted to 0s")
        return 0.0
    return milliseconds / 1000


def parse_alias_reference(value: Any) -> str | None:
    """Return the alias name of an `alias://name` string, else None."""
    if isinstance(value, AliasRef):
        return value.name
    if not isinstance(value, str):
        return None
    match = ALIAS_REFERENCE_RE.match(value)
    return match.group(1) if match else None


def classify_timing_value(value: Any, field: TimingField = "length") -> TimingKind:
    """Classify a declared timing value.

    Accepts document values (numbers, "auto", "end", "alias://name") and
    parsed values (AliasRef). "end" is only valid for length.

    Raises:
        InvalidTimingValueError: value is none of the four forms
    """
    if isinstance(value, bool):
        raise InvalidTimingValueError(value, field)
    if isinstance(value, (int, float)):
        if not math.isfinite(value) or value < 0:
            raise InvalidTimingValueError(value, field)
        return TimingKind.LITERAL
    if value == "auto":
        return TimingKind.AUTO
    if value == "end":
        if field != "length":
            raise InvalidTimingValueError(value, field)
        return TimingKind.END
    if parse_alias_reference(value) is not None:
        return TimingKind.ALIAS
    raise InvalidTimingValueError(value, field)


def _parse(value: Any, field: TimingField) -> StartIntent | LengthIntent:
    kind = classify_timing_value(value, field)
    if kind is TimingKind.LITERAL:
        return float(value)
    if kind is TimingKind.ALIAS:
        return AliasRef(name=parse_alias_reference(value), field=field)
    return value


def parse_timing_intent(start: Any, length: Any) -> TimingIntent:
    """Build a TimingIntent from document values."""
    return TimingIntent(start=_parse(start, "start"), length=_parse(length, "length"))


def intent_value_to_document(value: StartIntent | LengthIntent) -> float | str:
    """Render an intent value back into its document form."""
    if isinstance(value, AliasRef):
        return str(value)
    return value


def clamp_length(length_ms: int, floor_ms: int) -> int:
    """Apply the minimum resolved length floor."""
    return max(length_ms, floor_ms)
