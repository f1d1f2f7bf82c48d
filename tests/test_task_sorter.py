"""Tests for display sorting and filtering."""
from models import Task, TaskGroup, TaskType
from business_logic.task_sorter import TaskSorter


def _ids(tasks):
    return [task.id for task in tasks]


class TestSortTasks:
    """Test group ordering."""

    def test_sorted_by_group(self, sample_tree):
        """urgent < routine < project < other."""
        root = TaskSorter.project(sample_tree.root)
        assert _ids(root.subtasks) == ["b", "c", "a"]

    def test_ties_keep_stored_order(self):
        tasks = (
            Task(id="x", text="X", group=TaskGroup.OTHER),
            Task(id="y", text="Y", group=TaskGroup.URGENT),
            Task(id="z", text="Z", group=TaskGroup.OTHER),
            Task(id="w", text="W", group=TaskGroup.URGENT),
        )
        assert _ids(TaskSorter.sort_tasks(tasks)) == ["y", "w", "x", "z"]

    def test_sorts_every_level(self):
        parent = Task(id="p", text="P", subtasks=(
            Task(id="x", text="X", group=TaskGroup.OTHER),
            Task(id="y", text="Y", group=TaskGroup.ROUTINE),
        ))
        sorted_parent = TaskSorter.sort_tasks((parent,))[0]
        assert _ids(sorted_parent.subtasks) == ["y", "x"]

    def test_sorting_is_idempotent(self, sample_tree):
        once = TaskSorter.project(sample_tree.root)
        twice = TaskSorter.project(once)
        assert once == twice

    def test_stored_tree_untouched(self, sample_tree):
        TaskSorter.project(sample_tree.root, hide_completed=True)
        assert _ids(sample_tree.root.subtasks) == ["a", "b", "c"]


class TestFilterCompleted:
    """Test hiding completed tasks."""

    def test_hide_completed_drops_subtree(self):
        done = Task(id="d", text="D", completed=True, subtasks=(Task(id="dx", text="DX"),))
        open_parent = Task(id="o", text="O", subtasks=(
            Task(id="ox", text="OX", completed=True),
            Task(id="oy", text="OY"),
        ))
        result = TaskSorter.filter_completed((done, open_parent), True)
        assert _ids(result) == ["o"]
        assert _ids(result[0].subtasks) == ["oy"]

    def test_show_all(self, sample_tree):
        result = TaskSorter.filter_completed(sample_tree.root.subtasks, False)
        assert _ids(result) == ["a", "b", "c"]

    def test_filter_and_sort_commute(self, sample_tree):
        sorted_first = TaskSorter.filter_completed(TaskSorter.sort_tasks(sample_tree.root.subtasks), True)
        filtered_first = TaskSorter.sort_tasks(TaskSorter.filter_completed(sample_tree.root.subtasks, True))
        assert sorted_first == filtered_first


class TestFlattenVisible:
    """Test display rows."""

    def test_rows_with_depth(self, sample_tree):
        rows = TaskSorter.flatten_visible(TaskSorter.project(sample_tree.root))
        assert [(task.id, depth) for task, depth in rows] == [
            ("b", 0), ("c", 0), ("a", 0), ("a1", 1), ("a2", 1),
        ]

    def test_root_not_listed(self):
        root = Task(id="r", text="R", task_type=TaskType.ROOT)
        assert TaskSorter.flatten_visible(root) == []

    def test_folded_task_children_omitted(self, sample_tree):
        rows = TaskSorter.flatten_visible(TaskSorter.project(sample_tree.root), {"a"})
        assert [(task.id, depth) for task, depth in rows] == [("b", 0), ("c", 0), ("a", 0)]
