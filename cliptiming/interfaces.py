"""
Host Interfaces

Protocol definitions for the capabilities the engine consumes from its host
(rendering/UI layer). The engine never touches rendering objects directly;
everything visual goes through RenderHost callbacks.
"""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from cliptiming.models.project import Clip


@runtime_checkable
class DurationProber(Protocol):
    """
    Protocol for media duration probing.

    Used only by the Smart-Clip Resolver to resolve "auto" lengths.
    """

    async def probe_duration(self, src: str) -> float | None:
        """
        Probe the intrinsic duration of a media source.

        Args:
            src: Media URL or path

        Returns:
            Duration in seconds, or None if it cannot be determined
        """
        ...


@runtime_checkable
class RenderHost(Protocol):
    """
    Protocol for the visual side of clip lifecycle.

    Implement this to keep on-screen representations in step with the
    project state. Failures raised here are logged by the engine and never
    leave project state half-applied.
    """

    def dispose_clip(self, clip: "Clip") -> None:
        """Tear down the clip's on-screen representation."""
        ...

    def rebuild_clip(self, clip: "Clip") -> None:
        """Rebuild a clip's on-screen representation after a restore or timing change."""
        ...

    def reparent_clip(self, clip: "Clip", from_layer: int, to_layer: int) -> None:
        """Move a clip's visual container to the container for `to_layer`."""
        ...


class NullRenderHost:
    """RenderHost that draws nothing (headless use and tests)."""

    def dispose_clip(self, clip: "Clip") -> None:
        pass

    def rebuild_clip(self, clip: "Clip") -> None:
        pass

    def reparent_clip(self, clip: "Clip", from_layer: int, to_layer: int) -> None:
        pass
