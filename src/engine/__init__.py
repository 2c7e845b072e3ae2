"""Scene timeline"""

from .timeline import (
    InvalidStateTransition,
    SceneTimeline,
    TimelineCoordinator,
    TimelineFrame,
    build_scene_timeline,
    sample_timeline,
)

__all__ = [
    "InvalidStateTransition",
    "SceneTimeline",
    "TimelineCoordinator",
    "TimelineFrame",
    "build_scene_timeline",
    "sample_timeline",
]
