"""Timing intent and resolved timing value types.

Intent values are in seconds (as the user declares them); resolved values
are integer milliseconds, which every consumer (renderer, player, export)
reads.
"""

import re
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ALIAS_PREFIX = "alias://"
ALIAS_NAME_PATTERN = r"[a-zA-Z0-9_-]+"
ALIAS_REFERENCE_RE = re.compile(rf"^alias://({ALIAS_NAME_PATTERN})$")

TimingField = Literal["start", "length"]


class TimingKind(str, Enum):
    """The four forms a declared timing value can take."""

    LITERAL = "literal"
    AUTO = "auto"
    END = "end"
    ALIAS = "alias"


class AliasRef(BaseModel):
    """Reference to the start or length of the clip named `name`."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(pattern=rf"^{ALIAS_NAME_PATTERN}$")
    field: TimingField = "start"

    def __str__(self) -> str:
        return f"{ALIAS_PREFIX}{self.name}"


StartIntent = float | Literal["auto"] | AliasRef
LengthIntent = float | Literal["auto", "end"] | AliasRef


class TimingIntent(BaseModel):
    """The user's declared timing, preserved after resolution."""

    model_config = ConfigDict(frozen=True)

    start: StartIntent
    length: LengthIntent

    @property
    def is_smart(self) -> bool:
        return self.start == "auto" or self.length in ("auto", "end")

    @property
    def has_alias(self) -> bool:
        return isinstance(self.start, AliasRef) or isinstance(self.length, AliasRef)


class ResolvedTiming(BaseModel):
    """Concrete timing in milliseconds."""

    model_config = ConfigDict(frozen=True)

    start: int = Field(default=0, ge=0)
    length: int = Field(default=0, ge=0)

    @property
    def end(self) -> int:
        return self.start + self.length
