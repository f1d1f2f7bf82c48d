"""Pytest configuration and shared fixtures."""
import pytest
from models import DailyRecord, Task, TaskGroup, TaskTree, TaskType
from business_logic.task_manager import TaskManager
from business_logic.time_tracker import TimeTracker

DAY = "2025-11-10"
NEXT_DAY = "2025-11-11"


class FakeClock:
    """Manually advanced clock returning POSIX seconds."""

    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """Fixture providing a fake clock."""
    return FakeClock()


@pytest.fixture
def tracker(clock):
    """Fixture providing a TimeTracker on the fake clock."""
    return TimeTracker(clock=clock)


@pytest.fixture
def manager(tracker):
    """Fixture providing a TaskManager on the fake clock."""
    return TaskManager(time_tracker=tracker)


@pytest.fixture
def empty_tree():
    """Fixture providing a tree holding only its root."""
    return TaskTree(root=Task.create_root("Projects", task_id="r"))


@pytest.fixture
def sample_tree():
    """
    Fixture providing a small tree:

    r (root)
    ├── a "Write book" (project, container)
    │   ├── a1 "Chapter 1" (record time, 2 records)
    │   └── a2 "Chapter 2" (manual time, 1.5h)
    ├── b "Pay bills" (urgent, unique, completed)
    └── c "Push-ups" (routine, quantity)
    """
    a1 = Task(id="a1", text="Chapter 1", task_type=TaskType.RECORD_TIME, group=TaskGroup.PROJECT,
              daily_data={DAY: DailyRecord(value=600), NEXT_DAY: DailyRecord(value=300)})
    a2 = Task(id="a2", text="Chapter 2", task_type=TaskType.MANUAL_TIME, group=TaskGroup.PROJECT,
              daily_data={DAY: DailyRecord(value=1.5)})
    a = Task(id="a", text="Write book", group=TaskGroup.PROJECT, subtasks=(a1, a2))
    b = Task(id="b", text="Pay bills", group=TaskGroup.URGENT, completed=True)
    c = Task(id="c", text="Push-ups", task_type=TaskType.QUANTITY, group=TaskGroup.ROUTINE,
             daily_data={DAY: DailyRecord(value=20), NEXT_DAY: DailyRecord(value=30)})
    root = Task(id="r", text="Projects", task_type=TaskType.ROOT, subtasks=(a, b, c))
    return TaskTree(root=root)
