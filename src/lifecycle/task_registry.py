"""
Task Registry
-------------

Tracks the asyncio tasks the engine starts (timeline tick loops, narration
playback, mouth-shape drivers) so a host can list them and cancel them on
scene teardown or shutdown.

- Register tasks with category and description
- Record completion, cancellation and failures (failures are logged)
- Cancel by category, or everything at shutdown
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Any, Dict, List, Optional

from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.TASK)


class TaskCategory(Enum):
    """Logical grouping of asynchronous tasks."""
    TIMELINE = auto()
    AUDIO = auto()
    SPEECH = auto()
    EVENTBUS = auto()
    SYSTEM = auto()
    GENERAL = auto()


@dataclass(frozen=True)
class TaskInfo:
    """Metadata captured at task creation time."""
    id: int
    category: TaskCategory
    description: str
    created_at: str           # ISO UTC string
    created_timestamp: float


@dataclass
class TaskRecord:
    task: asyncio.Task
    info: TaskInfo
    cancelled: bool = False
    finished_with_error: Optional[BaseException] = None
    finished_return: Optional[Any] = None
    finished_timestamp: Optional[float] = None

    @property
    def running(self) -> bool:
        return not self.task.done()


class TaskRegistry:
    """
    Process-wide registry of engine tasks

    Finished records are kept for introspection until prune() is called.
    """

    _instance: Optional["TaskRegistry"] = None

    def __init__(self) -> None:
        self._records: Dict[int, TaskRecord] = {}
        self._by_task: Dict[asyncio.Task, int] = {}
        self._next_id: int = 1

    @classmethod
    def instance(cls) -> "TaskRegistry":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton (tests)"""
        cls._instance = None

    def register(self, task: asyncio.Task, category: TaskCategory, description: str) -> int:
        task_id = self._next_id
        self._next_id += 1

        now = datetime.now(timezone.utc)
        info = TaskInfo(
            id=task_id,
            category=category,
            description=description,
            created_at=now.isoformat(),
            created_timestamp=now.timestamp(),
        )
        self._records[task_id] = TaskRecord(task=task, info=info)
        self._by_task[task] = task_id

        log.debug(f"[Task {task_id}] Registered ({category.name}) - {description}")
        task.add_done_callback(self._on_task_done)
        return task_id

    def _on_task_done(self, task: asyncio.Task) -> None:
        task_id = self._by_task.get(task)
        record = self._records.get(task_id) if task_id is not None else None
        if record is None:
            return

        record.finished_timestamp = datetime.now(timezone.utc).timestamp()
        if task.cancelled():
            record.cancelled = True
            log.debug(f"[Task {task_id}] Cancelled")
            return

        exc = task.exception()
        if exc:
            record.finished_with_error = exc
            log.error(
                f"[Task {task_id}] FAILED: {exc}",
                description=record.info.description,
                error_type=type(exc).__name__,
            )
        else:
            record.finished_return = task.result()
            log.debug(f"[Task {task_id}] Completed")

    # -----------------------------
    # Introspection
    # -----------------------------

    def list_all(self) -> List[TaskRecord]:
        return list(self._records.values())

    def active(self, category: Optional[TaskCategory] = None) -> List[TaskRecord]:
        return [
            r for r in self._records.values()
            if r.running and (category is None or r.info.category == category)
        ]

    def failed(self) -> List[TaskRecord]:
        return [r for r in self._records.values() if r.finished_with_error is not None]

    def cancelled(self) -> List[TaskRecord]:
        return [r for r in self._records.values() if r.cancelled]

    def summary(self) -> str:
        return (
            f"Tasks: total={len(self._records)}, running={len(self.active())}, "
            f"failed={len(self.failed())}, cancelled={len(self.cancelled())}"
        )

    def prune(self) -> int:
        """Forget finished tasks; returns how many were removed"""
        done = [tid for tid, r in self._records.items() if not r.running]
        for tid in done:
            record = self._records.pop(tid)
            self._by_task.pop(record.task, None)
        return len(done)

    # -----------------------------
    # Cancellation
    # -----------------------------

    async def cancel_all(
        self,
        category: Optional[TaskCategory] = None,
        exclude: Optional[List[asyncio.Task]] = None,
    ) -> int:
        """
        Cancel running tasks (optionally one category) and wait for them

        Returns:
            Number of tasks cancelled
        """
        exclude = exclude or []
        tasks = [r.task for r in self.active(category) if r.task not in exclude]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        log.debug(f"Cancelled {len(tasks)} tasks", category=category.name if category else "all")
        return len(tasks)


def create_tracked_task(
    coro,
    *,
    category: TaskCategory,
    description: str,
    loop: Optional[asyncio.AbstractEventLoop] = None
) -> asyncio.Task:
    """
    Create and register a task in a single call.
    """
    loop = loop or asyncio.get_running_loop()
    task = loop.create_task(coro)
    TaskRegistry.instance().register(task=task, category=category, description=description)
    return task
