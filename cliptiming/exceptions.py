"""Custom exceptions for the clip timing engine.

These exceptions carry machine-readable error codes so the host can decide
whether a failure is silent degradation (structural drift) or an actionable
authoring mistake that must be shown to the user (alias errors).
"""

from cliptiming.constants.error_codes import get_error_spec
from cliptiming.schemas.envelope import ErrorInfo, ErrorLocation


class CliptimingError(Exception):
    """Base exception for all timing engine errors."""

    code: str = "INTERNAL_ERROR"
    message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        location: ErrorLocation | None = None,
        suggested_fix: str | None = None,
    ):
        self.message = message or self.__class__.message
        if code:
            self.code = code
        self.location = location
        self.suggested_fix = suggested_fix
        super().__init__(self.message)

    def to_error_info(self) -> ErrorInfo:
        """Convert exception to ErrorInfo for the host."""
        spec = get_error_spec(self.code)

        # Use suggested_fix from spec, or explicit override from exception
        suggested_fix = self.suggested_fix or spec.get("suggested_fix")

        return ErrorInfo(
            code=self.code,
            message=self.message,
            location=self.location,
            retryable=spec.get("retryable", False),
            user_visible=spec.get("user_visible", False),
            suggested_fix=suggested_fix,
        )


# =============================================================================
# Structural Errors (recovered locally as no-ops)
# =============================================================================


class StructuralError(CliptimingError):
    """Base class for invalid track/clip index errors."""


class InvalidTrackIndexError(StructuralError):
    """Track index does not address an existing track."""

    code = "INVALID_TRACK_INDEX"
    message = "Invalid track index"

    def __init__(self, track_index: int, track_count: int | None = None):
        message = f"Invalid track index: {track_index}"
        if track_count is not None:
            message += f" (tracks: {track_count})"
        self.track_index = track_index
        super().__init__(message, location=ErrorLocation(track_index=track_index))


class InvalidClipIndexError(StructuralError):
    """Clip index does not address an existing clip on the track."""

    code = "INVALID_CLIP_INDEX"
    message = "Invalid clip index"

    def __init__(self, track_index: int, clip_index: int):
        self.track_index = track_index
        self.clip_index = clip_index
        super().__init__(
            f"Invalid clip index: {clip_index} for track {track_index}",
            location=ErrorLocation(track_index=track_index, clip_index=clip_index),
        )


# =============================================================================
# Alias Errors (fatal to the resolution pass, surfaced to the user)
# =============================================================================


class AliasResolutionError(CliptimingError):
    """Base class for alias resolution failures."""


class CircularAliasReferenceError(AliasResolutionError):
    """Alias references form a cycle."""

    code = "CIRCULAR_ALIAS_REFERENCE"
    message = "Circular alias reference detected"

    def __init__(self, cycle: list[str]):
        self.cycle = list(cycle)
        super().__init__(
            f"Circular alias reference detected: {' -> '.join(self.cycle)}",
            location=ErrorLocation(alias=self.cycle[0] if self.cycle else None),
        )


class AliasNotFoundError(AliasResolutionError):
    """A clip references an alias that no clip declares."""

    code = "ALIAS_NOT_FOUND"
    message = "Alias not found"

    def __init__(self, alias: str, available: list[str], field: str | None = None):
        self.alias = alias
        self.available = sorted(available)
        known = ", ".join(self.available) or "none"
        super().__init__(
            f'Alias "{alias}" not found. Available: {known}',
            location=ErrorLocation(alias=alias, field=field),
        )


class UnresolvedAliasTargetError(AliasResolutionError):
    """The referenced clip's value is not numeric at resolution time."""

    code = "UNRESOLVED_ALIAS_TARGET"
    message = "Alias target is unresolved"

    def __init__(self, alias: str, field: str):
        self.alias = alias
        self.field = field
        super().__init__(
            f'Cannot resolve alias "{alias}": target has unresolved {field}',
            location=ErrorLocation(alias=alias, field=field),
        )


# =============================================================================
# Timing / Command Errors
# =============================================================================


class InvalidTimingValueError(CliptimingError):
    """A timing value is none of literal / auto / end / alias."""

    code = "INVALID_TIMING_VALUE"
    message = "Invalid timing value"

    def __init__(self, value: object, field: str | None = None):
        self.value = value
        where = f" for {field}" if field else ""
        super().__init__(
            f"Invalid timing value{where}: {value!r}",
            location=ErrorLocation(field=field) if field else None,
        )


class InvalidSplitPointError(CliptimingError):
    """Split point is too close to a clip boundary."""

    code = "INVALID_SPLIT_POINT"
    message = "Cannot split clip: split point too close to clip boundaries"

    def __init__(self, track_index: int, clip_index: int, split_time: float):
        self.split_time = split_time
        super().__init__(
            f"Cannot split clip {track_index}:{clip_index} at {split_time}s: "
            "split point too close to clip boundaries",
            location=ErrorLocation(track_index=track_index, clip_index=clip_index),
        )


class CommandExecutionError(CliptimingError):
    """A command failed for a reason other than a structural or alias error."""

    code = "COMMAND_EXECUTION_FAILED"
    message = "Command execution failed"

    def __init__(self, command: str, reason: str):
        self.command = command
        super().__init__(f"Command {command} failed: {reason}")
