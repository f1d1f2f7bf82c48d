"""Persist the task tree as flat task and daily-record rows."""
import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from business_logic.time_tracker import tracker_from_tree
from config import config
from errors import DataIntegrityError, InvalidInputError
from models import DailyRecord, Task, TaskGroup, TaskTree, TaskType
from utils.date_utils import is_date_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskRow:
    """One stored task. parent_id is None only for the root."""
    id: str
    parent_id: Optional[str]
    text: str
    type: str
    group: str
    completed: bool = False
    is_tracking: bool = False
    start_time: Optional[float] = None
    tracking_date: Optional[str] = None
    position: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'parent_id': self.parent_id,
            'text': self.text,
            'type': self.type,
            'group': self.group,
            'completed': self.completed,
            'is_tracking': self.is_tracking,
            'start_time': self.start_time,
            'tracking_date': self.tracking_date,
            'position': self.position,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'TaskRow':
        """Create from dictionary (JSON deserialization)."""
        return cls(
            id=data['id'],
            parent_id=data.get('parent_id'),
            text=data['text'],
            type=data['type'],
            group=data['group'],
            completed=data.get('completed', False),
            is_tracking=data.get('is_tracking', False),
            start_time=data.get('start_time'),
            tracking_date=data.get('tracking_date'),
            position=data.get('position', 0),
        )


@dataclass(frozen=True)
class DailyDataRow:
    """One stored (task, date) record."""
    task_id: str
    date: str
    value: Optional[float] = None
    completed: Optional[bool] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'task_id': self.task_id,
            'date': self.date,
            'value': self.value,
            'completed': self.completed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'DailyDataRow':
        """Create from dictionary (JSON deserialization)."""
        return cls(
            task_id=data['task_id'],
            date=data['date'],
            value=data.get('value'),
            completed=data.get('completed'),
        )


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _check_task_row(row: TaskRow) -> None:
    """Reject task rows whose fields have the wrong type."""
    if not isinstance(row.id, str) or not isinstance(row.text, str):
        raise DataIntegrityError(f"Task row {row.id!r} has a non-string id or text")
    if not isinstance(row.type, str) or not isinstance(row.group, str):
        raise DataIntegrityError(f"Task {row.id} has a non-string type or group")
    if row.parent_id is not None and not isinstance(row.parent_id, str):
        raise DataIntegrityError(f"Task {row.id} has a non-string parent id")
    if not isinstance(row.completed, bool) or not isinstance(row.is_tracking, bool):
        raise DataIntegrityError(f"Task {row.id} has non-boolean flags")
    if isinstance(row.position, bool) or not isinstance(row.position, int):
        raise DataIntegrityError(f"Task {row.id} has invalid position {row.position!r}")
    if row.start_time is not None and not _is_number(row.start_time):
        raise DataIntegrityError(f"Task {row.id} has invalid start time {row.start_time!r}")
    if row.tracking_date is not None and not is_date_key(row.tracking_date):
        raise DataIntegrityError(f"Task {row.id} has malformed tracking date {row.tracking_date!r}")


def _check_daily_row(daily: DailyDataRow) -> None:
    """Reject daily-record rows whose fields have the wrong type."""
    if not isinstance(daily.task_id, str) or not isinstance(daily.date, str):
        raise DataIntegrityError(f"Daily record row has a non-string task id or date: {daily.task_id!r}")
    if daily.value is not None and not _is_number(daily.value):
        raise DataIntegrityError(
            f"Daily record {daily.date} of task {daily.task_id} has invalid value {daily.value!r}")
    if daily.completed is not None and not isinstance(daily.completed, bool):
        raise DataIntegrityError(
            f"Daily record {daily.date} of task {daily.task_id} has invalid done mark {daily.completed!r}")


def _parse_enums(row: TaskRow) -> Tuple[TaskType, TaskGroup]:
    try:
        return TaskType.parse(row.type), TaskGroup.parse(row.group)
    except InvalidInputError as e:
        raise DataIntegrityError(f"Task {row.id}: {e}") from e


def build_task_tree(task_rows: List[TaskRow], daily_rows: List[DailyDataRow],
                    root_text: Optional[str] = None) -> TaskTree:
    """
    Rebuild the task tree from stored rows.

    Children of each task are ordered by their stored position. If there is
    no root row a new, empty root is created.

    Args:
        task_rows: All task rows of one owner
        daily_rows: All daily-record rows of those tasks
        root_text: Label for a newly created root (defaults to config.root_text)

    Returns:
        The tree, with its timer state derived from the tracking row

    Raises:
        DataIntegrityError: If the rows do not describe a single well-formed tree
    """
    rows_by_id: Dict[str, TaskRow] = {}
    for row in task_rows:
        _check_task_row(row)
        if row.id in rows_by_id:
            raise DataIntegrityError(f"Duplicate task id: {row.id}")
        rows_by_id[row.id] = row

    roots = [row for row in task_rows if _parse_enums(row)[0] == TaskType.ROOT]
    if len(roots) > 1:
        raise DataIntegrityError("More than one root task")

    children_of: Dict[Optional[str], List[TaskRow]] = {}
    for row in task_rows:
        if row.type == TaskType.ROOT.value:
            continue
        if row.parent_id is None or row.parent_id not in rows_by_id:
            raise DataIntegrityError(f"Task {row.id} has dangling parent reference {row.parent_id!r}")
        children_of.setdefault(row.parent_id, []).append(row)

    records_of: Dict[str, Dict[str, DailyRecord]] = {}
    for daily in daily_rows:
        _check_daily_row(daily)
        if daily.task_id not in rows_by_id:
            raise DataIntegrityError(f"Daily record for unknown task {daily.task_id}")
        if not is_date_key(daily.date):
            raise DataIntegrityError(f"Daily record of task {daily.task_id} has malformed date {daily.date!r}")
        records = records_of.setdefault(daily.task_id, {})
        if daily.date in records:
            raise DataIntegrityError(f"Duplicate daily record {daily.date} for task {daily.task_id}")
        records[daily.date] = DailyRecord(value=daily.value, completed=daily.completed)

    built = set()

    def build(row: TaskRow) -> Task:
        built.add(row.id)
        task_type, group = _parse_enums(row)
        children = sorted(children_of.get(row.id, []), key=lambda child: child.position)
        return Task(
            id=row.id,
            text=row.text,
            task_type=task_type,
            group=group,
            completed=row.completed,
            daily_data=records_of.get(row.id, {}),
            is_tracking=row.is_tracking,
            start_time=row.start_time,
            tracking_date=row.tracking_date,
            subtasks=tuple(build(child) for child in children),
        )

    if roots:
        root = build(roots[0])
    else:
        logger.warning("No root task found, creating a new one")
        root = Task.create_root(root_text or config.root_text)

    unreachable = set(rows_by_id) - built
    if unreachable:
        raise DataIntegrityError(f"Tasks not reachable from the root: {', '.join(sorted(unreachable))}")

    return TaskTree(root=root, active_tracker=tracker_from_tree(root))


def flatten_task_tree(tree: TaskTree) -> Tuple[List[TaskRow], List[DailyDataRow]]:
    """
    Turn a tree into rows for storage.

    Positions are each task's index among its siblings. Empty daily records
    are kept.

    Returns:
        Tuple of (task rows, daily-record rows), parents before children
    """
    task_rows: List[TaskRow] = []
    daily_rows: List[DailyDataRow] = []

    def visit(task: Task, parent_id: Optional[str], position: int) -> None:
        task_rows.append(TaskRow(
            id=task.id,
            parent_id=parent_id,
            text=task.text,
            type=task.task_type.value,
            group=task.group.value,
            completed=task.completed,
            is_tracking=task.is_tracking,
            start_time=task.start_time,
            tracking_date=task.tracking_date,
            position=position,
        ))
        for key, record in task.daily_data.items():
            daily_rows.append(DailyDataRow(task_id=task.id, date=key,
                                           value=record.value, completed=record.completed))
        for index, child in enumerate(task.subtasks):
            visit(child, task.id, index)

    visit(tree.root, None, 0)
    return task_rows, daily_rows


class TaskStore:
    """Read and write a task tree as a JSON document of flat rows."""

    def __init__(self, base_dir: Optional[str] = None, filename: Optional[str] = None):
        """
        Initialize TaskStore.

        Args:
            base_dir: Optional base directory path. If None, uses config.base_dir.
            filename: Optional file name. If None, uses config.data_file.
        """
        if base_dir is None:
            self.base_dir = config.base_dir
        else:
            self.base_dir = Path(base_dir).expanduser()
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.file_path = self.base_dir / (filename or config.data_file)

    def load(self) -> TaskTree:
        """Load the tree.

        Returns:
            The stored tree, or a tree holding only a new root if the file
            does not exist yet

        Raises:
            DataIntegrityError: If the file cannot be parsed or its rows are
                not a well-formed tree
        """
        if not self.file_path.exists():
            logger.info("No task file at %s, starting a new tree", self.file_path)
            return TaskTree.empty(config.root_text)

        try:
            data = json.loads(self.file_path.read_text())
            task_rows = [TaskRow.from_dict(item) for item in data.get('tasks', [])]
            daily_rows = [DailyDataRow.from_dict(item) for item in data.get('daily_data', [])]
        except (IOError, UnicodeDecodeError, json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
            raise DataIntegrityError(f"Cannot read tasks from {self.file_path}: {e}") from e

        tree = build_task_tree(task_rows, daily_rows)
        logger.debug("Loaded %d tasks and %d daily records from %s",
                     len(task_rows), len(daily_rows), self.file_path)
        return tree

    def save(self, tree: TaskTree) -> None:
        """Save the tree, replacing the file.

        Raises:
            IOError: If file cannot be written (permissions, disk full, etc.)
        """
        task_rows, daily_rows = flatten_task_tree(tree)
        content = json.dumps({
            'tasks': [row.to_dict() for row in task_rows],
            'daily_data': [row.to_dict() for row in daily_rows],
        }, indent=2)

        try:
            self.file_path.write_text(content)
        except (IOError, PermissionError) as e:
            raise IOError(f"Failed to save tasks to {self.file_path}: {e}") from e
