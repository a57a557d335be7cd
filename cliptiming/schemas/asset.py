"""Asset payloads as a closed tagged union on `type`.

Only `type`, `src` and `trim` matter to timing; every other field is
carried through untouched (extra="allow").
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class _AssetBase(BaseModel):
    model_config = ConfigDict(extra="allow")


class VideoAsset(_AssetBase):
    type: Literal["video"] = "video"
    src: str
    trim: float = Field(default=0, ge=0)


class AudioAsset(_AssetBase):
    type: Literal["audio"] = "audio"
    src: str
    trim: float = Field(default=0, ge=0)


class LumaAsset(_AssetBase):
    type: Literal["luma"] = "luma"
    src: str
    trim: float = Field(default=0, ge=0)


class ImageAsset(_AssetBase):
    type: Literal["image"] = "image"
    src: str


class TextAsset(_AssetBase):
    type: Literal["text"] = "text"
    text: str = ""


class RichTextAsset(_AssetBase):
    type: Literal["rich-text"] = "rich-text"
    text: str = ""


class CaptionAsset(_AssetBase):
    type: Literal["caption"] = "caption"
    src: str | None = None


class ShapeAsset(_AssetBase):
    type: Literal["shape"] = "shape"
    shape: str = "rectangle"


class HtmlAsset(_AssetBase):
    type: Literal["html"] = "html"
    html: str = ""


Asset = Annotated[
    VideoAsset
    | AudioAsset
    | LumaAsset
    | ImageAsset
    | TextAsset
    | RichTextAsset
    | CaptionAsset
    | ShapeAsset
    | HtmlAsset,
    Field(discriminator="type"),
]

# Asset types whose media can be trimmed from the start
TRIMMABLE_ASSET_TYPES = frozenset({"video", "audio", "luma"})
