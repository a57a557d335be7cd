"""Error codes dictionary for the timing and command engine.

This is the single source of truth for all error codes, their retryability,
and suggested fixes. Used by CliptimingError.to_error_info() to build
machine-readable failures for the host.
"""

from typing import TypedDict


class ErrorCodeSpec(TypedDict, total=False):
    """Specification for an error code."""

    retryable: bool
    user_visible: bool
    suggested_fix: str


# Error codes dictionary - single source of truth
ERROR_CODES: dict[str, ErrorCodeSpec] = {
    # ==========================================================================
    # Structural errors (UI index drift, recovered as a no-op)
    # ==========================================================================
    "INVALID_TRACK_INDEX": {
        "retryable": True,
        "user_visible": False,
        "suggested_fix": "Re-read the track list and retry with a current index",
    },
    "INVALID_CLIP_INDEX": {
        "retryable": True,
        "user_visible": False,
        "suggested_fix": "Re-read the track's clips and retry with a current index",
    },
    # ==========================================================================
    # Alias errors (authoring mistakes, surfaced to the user)
    # ==========================================================================
    "CIRCULAR_ALIAS_REFERENCE": {
        "retryable": False,
        "user_visible": True,
        "suggested_fix": "Break the cycle by giving one clip in the chain a numeric value",
    },
    "ALIAS_NOT_FOUND": {
        "retryable": False,
        "user_visible": True,
        "suggested_fix": "Reference one of the available aliases or add the alias to a clip",
    },
    "UNRESOLVED_ALIAS_TARGET": {
        "retryable": False,
        "user_visible": True,
        "suggested_fix": "Point the alias at a clip whose referenced value is a number or another alias",
    },
    # ==========================================================================
    # Timing / command errors
    # ==========================================================================
    "INVALID_TIMING_VALUE": {
        "retryable": False,
        "user_visible": True,
        "suggested_fix": "Use a non-negative number of seconds, 'auto', 'end' (length only) or 'alias://<name>'",
    },
    "INVALID_SPLIT_POINT": {
        "retryable": False,
        "user_visible": True,
        "suggested_fix": "Split further away from the clip's start and end",
    },
    "COMMAND_EXECUTION_FAILED": {
        "retryable": False,
        "user_visible": False,
    },
    # ==========================================================================
    # Internal
    # ==========================================================================
    "INTERNAL_ERROR": {
        "retryable": False,
        "user_visible": False,
    },
}


def get_error_spec(code: str) -> ErrorCodeSpec:
    """Get error specification by code.

    Args:
        code: Error code string

    Returns:
        ErrorCodeSpec dictionary, or empty dict if code not found
    """
    return ERROR_CODES.get(code, {})
