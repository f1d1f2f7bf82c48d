"""Tests for JSON persistence of the task tree."""
import json

import pytest

from conftest import DAY
from errors import DataIntegrityError
from models import DailyRecord, TaskGroup, TaskType
from task_store import DailyDataRow, TaskRow, TaskStore, build_task_tree, flatten_task_tree
from business_logic.tree_operations import find_task


@pytest.fixture
def store(tmp_path):
    """TaskStore writing into a temporary directory."""
    return TaskStore(base_dir=str(tmp_path))


def _root_row(**overrides):
    values = dict(id="r", parent_id=None, text="Projects", type="root", group="other")
    values.update(overrides)
    return TaskRow(**values)


class TestFlatten:
    """Test converting a tree into rows."""

    def test_rows_parents_first_with_positions(self, sample_tree):
        task_rows, daily_rows = flatten_task_tree(sample_tree)
        assert [(row.id, row.parent_id, row.position) for row in task_rows] == [
            ("r", None, 0), ("a", "r", 0), ("a1", "a", 0), ("a2", "a", 1), ("b", "r", 1), ("c", "r", 2),
        ]
        assert len(daily_rows) == 5
        assert DailyDataRow(task_id="a2", date=DAY, value=1.5) in daily_rows

    def test_enum_values_stored(self, sample_tree):
        task_rows, _ = flatten_task_tree(sample_tree)
        a1 = next(row for row in task_rows if row.id == "a1")
        assert a1.type == "record_time"
        assert a1.group == "project"


class TestBuild:
    """Test rebuilding a tree from rows."""

    def test_round_trip(self, sample_tree):
        task_rows, daily_rows = flatten_task_tree(sample_tree)
        assert build_task_tree(task_rows, daily_rows) == sample_tree

    def test_rows_round_trip(self, sample_tree):
        """Rows with contiguous positions come back unchanged (order aside)."""
        task_rows, daily_rows = flatten_task_tree(sample_tree)
        again_tasks, again_daily = flatten_task_tree(build_task_tree(list(reversed(task_rows)), daily_rows))
        assert set(again_tasks) == set(task_rows)
        assert set(again_daily) == set(daily_rows)

    def test_children_ordered_by_position(self):
        rows = [
            _root_row(),
            TaskRow(id="y", parent_id="r", text="Y", type="unique", group="other", position=1),
            TaskRow(id="x", parent_id="r", text="X", type="unique", group="other", position=0),
        ]
        tree = build_task_tree(rows, [])
        assert [t.id for t in tree.root.subtasks] == ["x", "y"]

    def test_tracking_row_restores_timer(self):
        rows = [
            _root_row(),
            TaskRow(id="t", parent_id="r", text="T", type="record_time", group="other",
                    is_tracking=True, start_time=123.0, tracking_date=DAY),
        ]
        tree = build_task_tree(rows, [])
        assert tree.active_tracker.task_id == "t"
        assert tree.active_tracker.start_time == 123.0

    def test_missing_root_creates_one(self):
        tree = build_task_tree([], [], root_text="Life")
        assert tree.root.text == "Life"
        assert tree.root.task_type == TaskType.ROOT
        assert tree.root.subtasks == ()

    @pytest.mark.parametrize("rows,daily", [
        # duplicate id
        ([_root_row(), TaskRow(id="r", parent_id="r", text="X", type="unique", group="other")], []),
        # two roots
        ([_root_row(), _root_row(id="r2")], []),
        # dangling parent
        ([_root_row(), TaskRow(id="x", parent_id="ghost", text="X", type="unique", group="other")], []),
        # unknown type
        ([_root_row(), TaskRow(id="x", parent_id="r", text="X", type="weekly", group="other")], []),
        # unknown group
        ([_root_row(), TaskRow(id="x", parent_id="r", text="X", type="unique", group="later")], []),
        # record of unknown task
        ([_root_row()], [DailyDataRow(task_id="ghost", date=DAY, value=1)]),
        # malformed date
        ([_root_row()], [DailyDataRow(task_id="r", date="10/11/2025", value=1)]),
        # duplicate record
        ([_root_row()], [DailyDataRow(task_id="r", date=DAY, value=1), DailyDataRow(task_id="r", date=DAY)]),
        # position not an integer
        ([_root_row(), TaskRow(id="x", parent_id="r", text="X", type="unique", group="other", position=None)], []),
        ([_root_row(), TaskRow(id="x", parent_id="r", text="X", type="unique", group="other", position="1")], []),
        # start time not a number
        ([_root_row(), TaskRow(id="x", parent_id="r", text="X", type="record_time", group="other",
                               is_tracking=True, start_time="noon", tracking_date=DAY)], []),
        # flags not booleans
        ([_root_row(), TaskRow(id="x", parent_id="r", text="X", type="unique", group="other", completed="false")], []),
        # record value not a number
        ([_root_row()], [DailyDataRow(task_id="r", date=DAY, value="2h")]),
        ([_root_row()], [DailyDataRow(task_id="r", date=DAY, value=float("nan"))]),
        # done mark not a boolean
        ([_root_row()], [DailyDataRow(task_id="r", date=DAY, completed="yes")]),
        # cycle not reachable from the root
        ([_root_row(),
          TaskRow(id="x", parent_id="y", text="X", type="unique", group="other"),
          TaskRow(id="y", parent_id="x", text="Y", type="unique", group="other")], []),
    ])
    def test_integrity_errors(self, rows, daily):
        with pytest.raises(DataIntegrityError):
            build_task_tree(rows, daily)

    def test_two_tracking_rows_rejected(self):
        rows = [
            _root_row(),
            TaskRow(id="t", parent_id="r", text="T", type="record_time", group="other",
                    is_tracking=True, start_time=1.0, tracking_date=DAY),
            TaskRow(id="u", parent_id="r", text="U", type="record_time", group="other",
                    is_tracking=True, start_time=2.0, tracking_date=DAY),
        ]
        with pytest.raises(DataIntegrityError):
            build_task_tree(rows, [])


class TestTaskStore:
    """Test reading and writing the JSON file."""

    def test_load_missing_file_gives_empty_tree(self, store):
        tree = store.load()
        assert tree.root.task_type == TaskType.ROOT
        assert tree.root.subtasks == ()
        assert tree.active_tracker is None

    def test_save_and_load(self, store, sample_tree):
        store.save(sample_tree)
        loaded = store.load()
        assert loaded == sample_tree
        a2 = find_task((loaded.root,), "a2")
        assert a2.group == TaskGroup.PROJECT
        assert a2.daily_data[DAY] == DailyRecord(value=1.5)

    def test_file_layout(self, store, sample_tree):
        store.save(sample_tree)
        data = json.loads(store.file_path.read_text())
        assert set(data) == {"tasks", "daily_data"}
        assert data["tasks"][0]["id"] == "r"
        assert data["tasks"][0]["parent_id"] is None

    def test_corrupt_file_raises(self, store):
        store.file_path.write_text("{not json")
        with pytest.raises(DataIntegrityError):
            store.load()

    def test_rows_missing_fields_raise(self, store):
        store.file_path.write_text(json.dumps({"tasks": [{"id": "r"}], "daily_data": []}))
        with pytest.raises(DataIntegrityError):
            store.load()

    def test_custom_filename(self, tmp_path):
        store = TaskStore(base_dir=str(tmp_path), filename="other.json")
        assert store.file_path == tmp_path / "other.json"

    def test_null_position_in_file_raises(self, store):
        store.file_path.write_text(json.dumps({
            "tasks": [
                {"id": "r", "parent_id": None, "text": "Projects", "type": "root", "group": "other"},
                {"id": "x", "parent_id": "r", "text": "X", "type": "unique", "group": "other", "position": None},
                {"id": "y", "parent_id": "r", "text": "Y", "type": "unique", "group": "other", "position": 1},
            ],
            "daily_data": [],
        }))
        with pytest.raises(DataIntegrityError):
            store.load()
