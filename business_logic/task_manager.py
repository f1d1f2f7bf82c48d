"""Mutation requests on the task tree.

TaskManager is the entry point for every change a user can make: adding,
deleting, renaming and completing tasks, updating daily records and starting or
stopping the timer. Each method takes a TaskTree and returns a new one; the
tree passed in is never modified. After the structural change the completion
rule is re-run on the affected ancestors and the timer state is reconciled, so
the returned tree always satisfies the tree invariants.

Missing ids are reported by raising NotFoundError, except for delete and stop
which treat them as a no-op.
"""
import logging
import math
from dataclasses import replace
from typing import Optional, Tuple, Union

from business_logic.completion import propagate_completion, recompute_ancestors
from business_logic.time_tracker import TimeTracker
from business_logic.tree_operations import (
    contains_task,
    delete_task,
    find_task,
    find_task_and_path,
    insert_subtask,
    update_task,
)
from errors import ForbiddenError, InvalidInputError, NotFoundError
from models import ROOT, ActiveTracker, Task, TaskGroup, TaskTree, TaskType
from utils.date_utils import parse_date_key

logger = logging.getLogger(__name__)

_UNSET = object()


def clean_text(text: str) -> str:
    """Trim a task label, rejecting empty ones."""
    if not isinstance(text, str) or not text.strip():
        raise InvalidInputError("Task text must not be empty")
    return text.strip()


def _check_value(value) -> Optional[float]:
    """Validate a daily record value (None clears it)."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise InvalidInputError(f"Daily value must be a number: {value!r}")
    if value < 0:
        raise InvalidInputError(f"Daily value must not be negative: {value!r}")
    return value


class TaskManager:
    """Applies mutation requests to a task tree."""

    def __init__(self, time_tracker: Optional[TimeTracker] = None):
        """
        Initialize TaskManager.

        Args:
            time_tracker: Timer state machine to use. A TimeTracker on the
                system clock is created when omitted.
        """
        self.time_tracker = time_tracker or TimeTracker()

    def _resolve_parent(self, tree: TaskTree, parent_id: str) -> Task:
        if parent_id == ROOT or parent_id == tree.root.id:
            return tree.root
        parent = find_task((tree.root,), parent_id)
        if parent is None:
            raise NotFoundError(parent_id)
        return parent

    def _settle(self, root: Task, active: Optional[ActiveTracker]) -> TaskTree:
        """Pair root with the timer state, stopping a timer that propagation closed."""
        tree = TaskTree(root=root, active_tracker=active)
        if active is None:
            return tree
        tracked = find_task((root,), active.task_id)
        if tracked is None:
            return TaskTree(root=root, active_tracker=None)
        if not tracked.is_tracking:
            tree = self.time_tracker.stop_active(tree)
        return tree

    def add_task(self, tree: TaskTree, text: str,
                 task_type: Union[TaskType, str] = TaskType.UNIQUE,
                 group: Union[TaskGroup, str, None] = TaskGroup.OTHER,
                 position: Optional[int] = None) -> Tuple[TaskTree, str]:
        """Add a top-level task. See add_subtask."""
        return self.add_subtask(tree, ROOT, text, task_type, group, position)

    def add_subtask(self, tree: TaskTree, parent_id: str, text: str,
                    task_type: Union[TaskType, str] = TaskType.UNIQUE,
                    group: Union[TaskGroup, str, None] = None,
                    position: Optional[int] = None) -> Tuple[TaskTree, str]:
        """
        Add a new task under parent_id.

        Subtasks always take their parent's group; only top-level tasks (parent
        is the root) use the given group, defaulting to OTHER.

        Args:
            tree: The task tree
            parent_id: Id of the parent, or ROOT for a top-level task
            text: Label of the new task (trimmed, must not be empty)
            task_type: Type of the new task (ROOT is not allowed)
            group: Group of the new task
            position: Index among the parent's children; None appends

        Returns:
            Tuple of (new tree, id of the new task)

        Raises:
            InvalidInputError: Empty text or unknown type/group
            NotFoundError: parent_id does not exist
            ForbiddenError: The parent is a completed task
        """
        text = clean_text(text)
        task_type = TaskType.parse(task_type)
        if task_type == TaskType.ROOT:
            raise InvalidInputError("Only the tree root may have the root type")
        group = TaskGroup.parse(group) if group is not None else TaskGroup.OTHER

        parent = self._resolve_parent(tree, parent_id)
        if not parent.is_root:
            if parent.completed:
                raise ForbiddenError(f"Cannot add a subtask to completed task {parent.id}")
            group = parent.group

        # Only leaves are timed; a parent about to become a container stops its timer.
        if tree.active_tracker is not None and tree.active_tracker.task_id == parent.id:
            tree = self.time_tracker.stop_active(tree)

        new_task = Task.create(text, task_type, group)
        root = insert_subtask((tree.root,), parent.id, new_task, position)[0]
        root = propagate_completion(root, new_task.id)
        logger.info("Added task %s (%s, %s) under %s", new_task.id, task_type.value, group.value, parent.id)
        return self._settle(root, tree.active_tracker), new_task.id

    def delete_task(self, tree: TaskTree, task_id: str) -> Tuple[TaskTree, bool]:
        """
        Delete a task and its whole subtree.

        If the subtree holds the running timer, the timer is discarded: the
        time elapsed in that session is not recorded.

        Returns:
            Tuple of (new tree, deleted). deleted is False (and the tree
            unchanged) when task_id does not exist.

        Raises:
            ForbiddenError: task_id is the root
        """
        found = find_task_and_path((tree.root,), task_id)
        if found is None:
            logger.debug("Delete ignored: task %s not found", task_id)
            return tree, False
        node, path = found
        if node.is_root:
            raise ForbiddenError("The root task cannot be deleted")

        if tree.active_tracker is not None and contains_task(node, tree.active_tracker.task_id):
            tree = self.time_tracker.discard_timer(tree)

        nodes, _ = delete_task((tree.root,), task_id)
        root = recompute_ancestors(nodes[0], path[:-1])
        logger.info("Deleted task %s", task_id)
        return self._settle(root, tree.active_tracker), True

    def rename_task(self, tree: TaskTree, task_id: str, text: str) -> TaskTree:
        """
        Change a task's label.

        Raises:
            InvalidInputError: text is empty after trimming
            NotFoundError: task_id does not exist
        """
        text = clean_text(text)
        if find_task((tree.root,), task_id) is None:
            raise NotFoundError(task_id)
        root = update_task((tree.root,), task_id, lambda task: replace(task, text=text))[0]
        logger.info("Renamed task %s", task_id)
        return TaskTree(root=root, active_tracker=tree.active_tracker)

    def set_completed(self, tree: TaskTree, task_id: str, completed: bool) -> TaskTree:
        """
        Mark a leaf task complete or incomplete.

        A running timer on the task is stopped normally (its time committed)
        before the task is closed. Ancestors are then re-derived.

        Raises:
            NotFoundError: task_id does not exist
            ForbiddenError: task_id is the root or a container task
        """
        found = find_task_and_path((tree.root,), task_id)
        if found is None:
            raise NotFoundError(task_id)
        node, _ = found
        if node.is_root:
            raise ForbiddenError("The root task cannot be completed")
        if not node.is_leaf:
            raise ForbiddenError(f"Task {task_id} has subtasks; its completion is derived")

        if completed and tree.active_tracker is not None and tree.active_tracker.task_id == task_id:
            tree = self.time_tracker.stop_active(tree)

        def apply(task: Task) -> Task:
            if completed:
                task = task.with_tracking_cleared()
            return replace(task, completed=completed)

        root = update_task((tree.root,), task_id, apply)[0]
        root = propagate_completion(root, task_id)
        logger.info("Task %s marked %s", task_id, "complete" if completed else "incomplete")
        return self._settle(root, tree.active_tracker)

    def toggle_completed(self, tree: TaskTree, task_id: str) -> TaskTree:
        """Flip a leaf task's completed flag. See set_completed."""
        node = find_task((tree.root,), task_id)
        if node is None:
            raise NotFoundError(task_id)
        return self.set_completed(tree, task_id, not node.completed)

    def update_daily_data(self, tree: TaskTree, task_id: str, date_key: str,
                          value=_UNSET, completed=_UNSET) -> TaskTree:
        """
        Update the daily record of a task.

        Only the given fields change; the rest of the record is kept. Setting
        ``completed`` on a unique task also completes (or re-opens) the task
        itself.

        Args:
            tree: The task tree
            task_id: Id of the task
            date_key: Record date (YYYY-MM-DD)
            value: New value (hours, seconds or count by task type); None clears
            completed: New done mark

        Raises:
            InvalidInputError: Malformed date or value
            NotFoundError: task_id does not exist
            ForbiddenError: task_id is the root
        """
        parse_date_key(date_key)
        changes = {}
        if value is not _UNSET:
            changes["value"] = _check_value(value)
        if completed is not _UNSET:
            changes["completed"] = None if completed is None else bool(completed)

        node = find_task((tree.root,), task_id)
        if node is None:
            raise NotFoundError(task_id)
        if node.is_root:
            raise ForbiddenError("The root task has no daily records")

        record = replace(node.record_for(date_key), **changes)
        root = update_task((tree.root,), task_id, lambda task: task.with_record(date_key, record))[0]
        tree = TaskTree(root=root, active_tracker=tree.active_tracker)
        logger.debug("Updated record %s of task %s: %s", date_key, task_id, changes)

        if "completed" in changes and node.task_type == TaskType.UNIQUE and node.is_leaf:
            tree = self.set_completed(tree, task_id, bool(changes["completed"]))
        return tree

    def toggle_daily_completed(self, tree: TaskTree, task_id: str, date_key: str) -> TaskTree:
        """Flip the done mark of a task's daily record."""
        node = find_task((tree.root,), task_id)
        if node is None:
            raise NotFoundError(task_id)
        return self.update_daily_data(tree, task_id, date_key,
                                      completed=not node.record_for(date_key).completed)

    def start_tracking(self, tree: TaskTree, task_id: str, date_key: str) -> TaskTree:
        """
        Start the timer on a task for a date, handing off any running session.

        Raises:
            InvalidInputError: Malformed date
            NotFoundError: task_id does not exist
        """
        parse_date_key(date_key)
        return self.time_tracker.start_timer(tree, task_id, date_key)

    def stop_tracking(self, tree: TaskTree, task_id: str, date_key: str) -> TaskTree:
        """Stop the timer if it runs for exactly this task and date; otherwise no-op."""
        return self.time_tracker.stop_timer(tree, task_id, date_key)

    def toggle_tracking(self, tree: TaskTree, task_id: str, date_key: str) -> Tuple[TaskTree, bool]:
        """Stop this session if it runs, otherwise start it. Returns (tree, is_now_running)."""
        parse_date_key(date_key)
        return self.time_tracker.toggle_timer(tree, task_id, date_key)
