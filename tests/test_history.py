import threading

import pytest

from promptpack.cells import CodeCell
from promptpack.history import HistoryManager, format_diff_prompt
from promptpack.history.diff import DiffType


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        self.now += 1
        return self.now


def cell(content: str, path: str = "a.py", output: str | None = None) -> CodeCell:
    return CodeCell(path, path, content, output)


@pytest.fixture
def manager() -> HistoryManager:
    return HistoryManager(clock=FakeClock())


class TestRecord:
    def test_unchanged_content_is_not_recorded(self, manager):
        assert manager.record([cell("x = 1")]) == 1
        assert manager.record([cell("x = 1")]) == 0
        assert len(manager.history("a.py")) == 1

    def test_history_is_capped(self, manager):
        for i in range(15):
            manager.record([cell(f"x = {i}")])
        history = manager.history("a.py")
        assert len(history) == 10
        assert [e.content for e in history] == [f"x = {i}" for i in range(5, 15)]

    def test_entries_keep_output_and_time(self, manager):
        manager.record([cell("x = 1", output="1")])
        (entry,) = manager.history("a.py")
        assert entry.output == "1"
        assert entry.timestamp == 1001.0

    def test_max_entries_must_allow_a_diff(self):
        with pytest.raises(ValueError):
            HistoryManager(max_entries=1)

    def test_concurrent_records(self, manager):
        def work(path: str):
            for i in range(50):
                manager.record([cell(f"v{i}", path=path)])

        threads = [threading.Thread(target=work, args=(f"f{n}.py",)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        for n in range(4):
            history = manager.history(f"f{n}.py")
            assert [e.content for e in history] == [f"v{i}" for i in range(40, 50)]


class TestSnapshot:
    def test_no_snapshot_initially(self, manager):
        assert manager.snapshot_status() is None

    def test_snapshot_records_unchanged_cells(self, manager):
        manager.record([cell("x = 1")])
        assert manager.take_snapshot([cell("x = 1"), cell("y = 2", path="b.py")]) == 2
        assert len(manager.history("a.py")) == 2
        status = manager.snapshot_status()
        assert status is not None
        assert status.cell_count == 2
        assert status.timestamp == 1004.0

    def test_snapshot_then_edit_diffs_against_snapshot(self, manager):
        manager.take_snapshot([cell("x = 1\ny = 2")])
        manager.record([cell("x = 1\ny = 3")])
        cell_diff = manager.get_diff("a.py")
        assert cell_diff is not None
        assert cell_diff.previous.content == "x = 1\ny = 2"
        assert (cell_diff.added, cell_diff.removed) == (1, 1)


class TestDiffs:
    def test_single_entry_has_no_diff(self, manager):
        manager.record([cell("x = 1")])
        assert manager.get_diff("a.py") is None
        assert manager.get_diff("missing.py") is None
        assert manager.get_all_diffs() == []

    def test_diff_of_last_two_entries(self, manager):
        for content in ("a", "b", "c"):
            manager.record([cell(content)])
        cell_diff = manager.get_diff("a.py")
        assert [(d.type, d.text) for d in cell_diff.diff] == [
            (DiffType.REMOVED, "b"),
            (DiffType.ADDED, "c"),
        ]

    def test_all_diffs_skips_unchanged_snapshots(self, manager):
        manager.take_snapshot([cell("x = 1"), cell("y = 1", path="b.py")])
        manager.take_snapshot([cell("x = 1"), cell("y = 2", path="b.py")])
        diffs = manager.get_all_diffs()
        assert [d.path for d in diffs] == ["b.py"]

    def test_clear_one_path(self, manager):
        manager.record([cell("x = 1"), cell("y = 1", path="b.py")])
        manager.take_snapshot([cell("x = 2"), cell("y = 2", path="b.py")])
        manager.clear_history("a.py")
        assert manager.history("a.py") == []
        assert len(manager.history("b.py")) == 2
        assert manager.snapshot_status() is not None

    def test_clear_everything(self, manager):
        manager.take_snapshot([cell("x = 1")])
        manager.record([cell("x = 2")])
        manager.clear_history()
        assert manager.get_all_diffs() == []
        assert manager.snapshot_status() is None


def test_recorded_changes_render_as_prompt(manager):
    manager.record([cell("x = 1", path="nb/cell-1")])
    manager.record([cell("x = 2", path="nb/cell-1")])
    prompt = format_diff_prompt(manager.get_all_diffs(), style="unified")
    assert "- x = 1\n+ x = 2\n" in prompt


def test_clear_during_concurrent_records(manager):
    stop = threading.Event()

    def clear():
        while not stop.is_set():
            manager.clear_history()

    def work(path: str):
        for i in range(200):
            manager.record([cell(f"v{i}", path=path)])

    clearer = threading.Thread(target=clear)
    workers = [threading.Thread(target=work, args=(f"f{n}.py",)) for n in range(4)]
    clearer.start()
    for t in workers:
        t.start()
    for t in workers:
        t.join()
    stop.set()
    clearer.join()

    for n in range(4):
        history = manager.history(f"f{n}.py")
        assert len(history) <= 10
        assert not history or history[-1].content == "v199"
        manager.record([cell("final", path=f"f{n}.py")])
        assert manager.history(f"f{n}.py")[-1].content == "final"
