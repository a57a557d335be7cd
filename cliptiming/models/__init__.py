from cliptiming.models.project import Clip, ClipSnapshot, EndLengthRegistry, ProjectState

__all__ = [
    "Clip",
    "ClipSnapshot",
    "EndLengthRegistry",
    "ProjectState",
]
