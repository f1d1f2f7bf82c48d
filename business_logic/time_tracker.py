"""Single-timer time tracking over the task tree."""
import logging
import time
from dataclasses import replace
from typing import Callable, Optional, Tuple

from business_logic.tree_operations import find_task, iter_tasks, update_task
from errors import DataIntegrityError, NotFoundError
from models import ActiveTracker, Task, TaskTree

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class TimeTracker:
    """
    Runs at most one timer across a whole task tree.

    The timer state is the tree's ``active_tracker``: None when idle, or the
    (task id, date, start time) of the running session. The tracking fields on
    task nodes are kept consistent with it by every method here.

    Features:
    - Start a timer, stopping (and committing) any other running session first
    - Stop a session, adding the elapsed seconds to that date's record
    - Discard a running session without committing
    - Live elapsed time for display

    All methods are pure: they take a TaskTree and return a new one.
    """

    def __init__(self, clock: Optional[Clock] = None):
        """
        Initialize TimeTracker.

        Args:
            clock: Callable returning the current POSIX time. Defaults to
                time.time. Each method samples it at most once.
        """
        self.clock = clock or time.time

    def start_timer(self, tree: TaskTree, task_id: str, date_key: str) -> TaskTree:
        """
        Start the timer for a task on a date.

        A session already running for another task, or for the same task on
        another date, is stopped first and its elapsed time committed.
        Starting the session that is already running changes nothing.

        Args:
            tree: The task tree
            task_id: Id of the task to time
            date_key: Date whose record receives the time (YYYY-MM-DD)

        Returns:
            The new tree, tracking task_id

        Raises:
            NotFoundError: If task_id is not in the tree
        """
        if find_task((tree.root,), task_id) is None:
            raise NotFoundError(task_id)

        active = tree.active_tracker
        if active is not None and active.task_id == task_id and active.date == date_key:
            return tree

        now = self.clock()
        if active is not None:
            tree = self._commit(tree, now)

        def begin(task: Task) -> Task:
            return replace(task, is_tracking=True, start_time=now, tracking_date=date_key)

        root = update_task((tree.root,), task_id, begin)[0]
        logger.info("Timer started for task %s on %s", task_id, date_key)
        return TaskTree(root=root, active_tracker=ActiveTracker(task_id, date_key, now))

    def stop_timer(self, tree: TaskTree, task_id: str, date_key: str) -> TaskTree:
        """
        Stop the running session if it is exactly (task_id, date_key).

        Any other request, including the right task with another date, is
        ignored and the tree is returned unchanged.

        Returns:
            The new tree, idle, with the elapsed seconds added to
            ``daily_data[date_key].value`` of the task
        """
        active = tree.active_tracker
        if active is None or active.task_id != task_id or active.date != date_key:
            logger.debug("Ignoring stop for task %s on %s: no matching session", task_id, date_key)
            return tree
        return self._commit(tree, self.clock())

    def stop_active(self, tree: TaskTree) -> TaskTree:
        """Stop whatever session is running, committing its time."""
        if tree.active_tracker is None:
            return tree
        return self._commit(tree, self.clock())

    def toggle_timer(self, tree: TaskTree, task_id: str, date_key: str) -> Tuple[TaskTree, bool]:
        """
        Toggle the timer for a task on a date.

        Returns:
            Tuple of (new tree, is_now_running)
        """
        if self.is_timer_running(tree, task_id, date_key):
            return self.stop_timer(tree, task_id, date_key), False
        return self.start_timer(tree, task_id, date_key), True

    def discard_timer(self, tree: TaskTree) -> TaskTree:
        """
        Cancel the running session without adding time.

        Returns:
            The new tree, idle. Unchanged if no timer was running.
        """
        active = tree.active_tracker
        if active is None:
            return tree
        logger.warning(
            "Discarding %.0f tracked seconds of task %s on %s",
            self.get_elapsed_seconds(tree), active.task_id, active.date,
        )
        root = update_task((tree.root,), active.task_id, lambda task: task.with_tracking_cleared())[0]
        return TaskTree(root=root, active_tracker=None)

    def get_elapsed_seconds(self, tree: TaskTree, now: Optional[float] = None) -> float:
        """
        Get seconds elapsed in the running session.

        Returns:
            Elapsed seconds (0 if no timer is running)
        """
        active = tree.active_tracker
        if active is None:
            return 0.0
        if now is None:
            now = self.clock()
        return max(0.0, now - active.start_time)

    def is_timer_running(self, tree: TaskTree, task_id: str, date_key: Optional[str] = None) -> bool:
        """Check if task_id (on date_key, when given) holds the running timer."""
        active = tree.active_tracker
        if active is None or active.task_id != task_id:
            return False
        return date_key is None or active.date == date_key

    def _commit(self, tree: TaskTree, now: float) -> TaskTree:
        """Add the running session's elapsed time to its record and go idle."""
        active = tree.active_tracker
        elapsed = max(0.0, now - active.start_time)

        def finish(task: Task) -> Task:
            record = task.record_for(active.date).add_value(elapsed)
            return task.with_record(active.date, record).with_tracking_cleared()

        root = update_task((tree.root,), active.task_id, finish)[0]
        logger.info("Timer stopped for task %s on %s: %.0f seconds committed",
                    active.task_id, active.date, elapsed)
        return TaskTree(root=root, active_tracker=None)


def project_tracking(root: Task, active: Optional[ActiveTracker]) -> Task:
    """
    Recompute every node's tracking fields from the timer state.

    The node named by ``active`` (if present) is marked tracking with the
    session's start time and date; every other node is cleared. Subtrees that
    need no change are shared.
    """
    def project(node: Task) -> Task:
        if active is not None and node.id == active.task_id:
            updated = replace(node, is_tracking=True, start_time=active.start_time,
                              tracking_date=active.date)
        else:
            updated = node.with_tracking_cleared()
        subtasks = tuple(project(child) for child in node.subtasks)
        if any(new is not old for new, old in zip(subtasks, node.subtasks)):
            updated = replace(updated, subtasks=subtasks)
        return updated

    return project(root)


def tracker_from_tree(root: Task) -> Optional[ActiveTracker]:
    """
    Derive the timer state from node flags, e.g. after loading from storage.

    Raises:
        DataIntegrityError: If more than one node is tracking, or the tracking
            node lacks its start time or date
    """
    tracking = [task for task in iter_tasks((root,)) if task.is_tracking]
    if not tracking:
        return None
    if len(tracking) > 1:
        ids = ", ".join(task.id for task in tracking)
        raise DataIntegrityError(f"More than one task is tracking: {ids}")
    task = tracking[0]
    if task.start_time is None or task.tracking_date is None:
        raise DataIntegrityError(f"Task {task.id} is tracking without a start time or date")
    return ActiveTracker(task.id, task.tracking_date, task.start_time)
