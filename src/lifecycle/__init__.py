"""
Lifecycle subsystem
-------------------

Task tracking for the engine's background work:
    from lifecycle import TaskRegistry, TaskCategory, create_tracked_task
"""

from .task_registry import TaskRegistry, TaskCategory, TaskInfo, TaskRecord, create_tracked_task

__all__ = [
    "TaskRegistry",
    "TaskCategory",
    "TaskInfo",
    "TaskRecord",
    "create_tracked_task",
]
