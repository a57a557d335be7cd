from pydantic import BaseModel


class ErrorLocation(BaseModel):
    field: str | None = None
    alias: str | None = None
    track_index: int | None = None
    clip_index: int | None = None


class ErrorInfo(BaseModel):
    code: str
    message: str
    location: ErrorLocation | None = None
    retryable: bool = False
    user_visible: bool = False
    suggested_fix: str | None = None  # Human-readable fix suggestion


class CommandResult(BaseModel):
    """Outcome of EditSession.execute_command()."""

    command: str
    success: bool
    error: ErrorInfo | None = None
