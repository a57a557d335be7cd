from cliptiming.schemas.envelope import CommandResult, ErrorInfo, ErrorLocation
from cliptiming.schemas.timing import AliasRef, ResolvedTiming, TimingIntent, TimingKind
from cliptiming.schemas.asset import Asset, AudioAsset, ImageAsset, LumaAsset, TextAsset, VideoAsset
from cliptiming.schemas.clip import ClipConfig, EditDocument, TimelineConfig, TrackConfig
from cliptiming.schemas.events import EditEvent
from cliptiming.schemas.operation import HistoryResponse, OperationSummary

__all__ = [
    "CommandResult",
    "ErrorInfo",
    "ErrorLocation",
    "AliasRef",
    "ResolvedTiming",
    "TimingIntent",
    "TimingKind",
    "Asset",
    "AudioAsset",
    "ImageAsset",
    "LumaAsset",
    "TextAsset",
    "VideoAsset",
    "ClipConfig",
    "EditDocument",
    "TimelineConfig",
    "TrackConfig",
    "EditEvent",
    "HistoryResponse",
    "OperationSummary",
]
