"""Display ordering and filtering of the task tree.

Both transforms are read-only: they build a derived tree for the
presentation layer and never feed back into the stored tree. They can be
composed in either order.
"""
from dataclasses import replace
from typing import AbstractSet, List, Optional, Sequence, Tuple

from models import GROUP_ORDER, UNKNOWN_GROUP_ORDER, Task


class TaskSorter:
    """Builds the display projection of a task tree."""

    @staticmethod
    def group_rank(task: Task) -> int:
        """Precedence of the task's group (urgent first, unknown groups last)."""
        return GROUP_ORDER.get(task.group, UNKNOWN_GROUP_ORDER)

    @staticmethod
    def sort_tasks(tasks: Sequence[Task]) -> Tuple[Task, ...]:
        """Sort tasks by group at every level.

        Ties keep their stored relative order, so sorting an already sorted
        tree changes nothing.

        Args:
            tasks: Sibling tasks to sort (with their subtrees)

        Returns:
            New tuple of sorted siblings
        """
        with_sorted_children = [
            replace(task, subtasks=TaskSorter.sort_tasks(task.subtasks)) if task.subtasks else task
            for task in tasks
        ]
        return tuple(sorted(with_sorted_children, key=TaskSorter.group_rank))

    @staticmethod
    def filter_completed(tasks: Sequence[Task], hide_completed: bool) -> Tuple[Task, ...]:
        """Drop completed tasks, with their whole subtree, when hide_completed is set.

        Args:
            tasks: Sibling tasks to filter
            hide_completed: When False the tasks are returned as they are

        Returns:
            New tuple of remaining siblings
        """
        if not hide_completed:
            return tuple(tasks)
        return tuple(
            replace(task, subtasks=TaskSorter.filter_completed(task.subtasks, True)) if task.subtasks else task
            for task in tasks
            if not task.completed
        )

    @staticmethod
    def project(root: Task, hide_completed: bool = False) -> Task:
        """Sort and (optionally) filter the children of root for display."""
        subtasks = TaskSorter.filter_completed(root.subtasks, hide_completed)
        return replace(root, subtasks=TaskSorter.sort_tasks(subtasks))

    @staticmethod
    def flatten_visible(root: Task, folded_ids: Optional[AbstractSet[str]] = None) -> List[Tuple[Task, int]]:
        """Turn a projected tree into display rows.

        Args:
            root: Root of a (projected) tree; the root itself is not listed
            folded_ids: Ids of tasks whose subtasks are collapsed

        Returns:
            List of (task, depth) in display order, top-level tasks at depth 0
        """
        rows = []
        folded = folded_ids or frozenset()

        def visit(tasks: Sequence[Task], depth: int) -> None:
            for task in tasks:
                rows.append((task, depth))
                if task.id not in folded:
                    visit(task.subtasks, depth + 1)

        visit(root.subtasks, 0)
        return rows
