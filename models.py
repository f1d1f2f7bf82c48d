"""Data models for the nested task tree."""
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from errors import InvalidInputError

# Sentinel accepted wherever a parent id is expected to mean "the root task".
ROOT = "root"


class TaskType(str, Enum):
    """How a task's daily records are interpreted."""
    UNIQUE = "unique"
    REPETITIVE = "repetitive"
    MANUAL_TIME = "manual_time"
    RECORD_TIME = "record_time"
    QUANTITY = "quantity"
    ROOT = "root"

    @classmethod
    def parse(cls, value: Union[str, 'TaskType']) -> 'TaskType':
        """Return the member for value, raising InvalidInputError if unknown."""
        try:
            return cls(value)
        except ValueError:
            raise InvalidInputError(f"Unknown task type: {value!r}") from None


class TaskGroup(str, Enum):
    """Display group of a task."""
    URGENT = "urgent"
    ROUTINE = "routine"
    PROJECT = "project"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Union[str, 'TaskGroup']) -> 'TaskGroup':
        """Return the member for value, raising InvalidInputError if unknown."""
        try:
            return cls(value)
        except ValueError:
            raise InvalidInputError(f"Unknown task group: {value!r}") from None


GROUP_ORDER = {
    TaskGroup.URGENT: 1,
    TaskGroup.ROUTINE: 2,
    TaskGroup.PROJECT: 3,
    TaskGroup.OTHER: 4,
}
UNKNOWN_GROUP_ORDER = 99


def new_task_id() -> str:
    """Allocate a fresh task id."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class DailyRecord:
    """Per-date entry of a task.

    ``value`` is hours for manual-time tasks, seconds for record-time tasks and
    a raw count for quantity tasks. ``completed`` is the done mark of unique and
    repetitive tasks.
    """
    value: Optional[float] = None
    completed: Optional[bool] = None

    @property
    def is_empty(self) -> bool:
        return not self.value and not self.completed

    def add_value(self, amount: float) -> 'DailyRecord':
        """Return a copy with amount added to the value (missing counts as 0)."""
        return replace(self, value=(self.value or 0) + amount)


@dataclass(frozen=True)
class Task:
    """A node of the task tree.

    Nodes are immutable: every mutation produces a new node via
    ``dataclasses.replace`` and untouched subtrees are shared between the old
    and new tree.

    Tracking fields (is_tracking, start_time, tracking_date) mirror the tree's
    single ActiveTracker and are only set on the node it points at.
    """
    id: str
    text: str
    task_type: TaskType = TaskType.UNIQUE
    group: TaskGroup = TaskGroup.OTHER
    completed: bool = False
    daily_data: Dict[str, DailyRecord] = field(default_factory=dict)
    is_tracking: bool = False
    start_time: Optional[float] = None
    tracking_date: Optional[str] = None
    subtasks: Tuple['Task', ...] = ()

    @classmethod
    def create(cls, text: str, task_type: TaskType = TaskType.UNIQUE,
               group: TaskGroup = TaskGroup.OTHER) -> 'Task':
        """Create a new, empty task with a freshly allocated id."""
        return cls(id=new_task_id(), text=text, task_type=task_type, group=group)

    @classmethod
    def create_root(cls, text: str, task_id: Optional[str] = None) -> 'Task':
        """Create the root task of a new tree."""
        return cls(id=task_id or new_task_id(), text=text, task_type=TaskType.ROOT)

    @property
    def is_leaf(self) -> bool:
        return not self.subtasks

    @property
    def is_root(self) -> bool:
        return self.task_type == TaskType.ROOT

    def record_for(self, date_key: str) -> DailyRecord:
        """Get the record for a date, or an empty one."""
        return self.daily_data.get(date_key, DailyRecord())

    def with_record(self, date_key: str, record: DailyRecord) -> 'Task':
        """Return a copy with the record for date_key replaced."""
        daily_data = dict(self.daily_data)
        daily_data[date_key] = record
        return replace(self, daily_data=daily_data)

    def with_tracking_cleared(self) -> 'Task':
        """Return a copy that is not tracking."""
        if not self.is_tracking and self.start_time is None and self.tracking_date is None:
            return self
        return replace(self, is_tracking=False, start_time=None, tracking_date=None)


@dataclass(frozen=True)
class ActiveTracker:
    """The single running timer of a tree."""
    task_id: str
    date: str
    start_time: float


@dataclass(frozen=True)
class TaskTree:
    """A task tree together with its timer state.

    ``active_tracker`` is None when the state machine is idle.
    """
    root: Task
    active_tracker: Optional[ActiveTracker] = None

    @classmethod
    def empty(cls, root_text: str) -> 'TaskTree':
        return cls(root=Task.create_root(root_text))

    @property
    def is_tracking(self) -> bool:
        return self.active_tracker is not None
