import importlib
import json
import os
import time

from progress import _fmt_elapsed, reset, set_depth, set_done, set_nodes, set_solutions, set_status, snapshot


def test_set_done_no_args_defaults_to_solved():
    reset()
    set_done()
    snap = snapshot()
    assert snap["status"] == "Solved"
    assert snap["done"] is True
    assert snap["ok"] is True


def test_set_done_failure_keeps_reason():
    reset()
    set_status("Solving")
    set_done(False, reason="boom")
    snap = snapshot()
    assert snap["status"] == "Error"
    assert snap["message"] == "boom"
    assert snap["done"] is True
    assert snap["ok"] is False


def test_counters_are_tolerant():
    reset()
    set_nodes(120)
    set_solutions("3")
    set_depth(-4)
    snap = snapshot()
    assert snap["nodes"] == 120
    assert snap["solutions"] == 3
    assert snap["depth"] == 0
    set_nodes("many")
    assert snapshot()["nodes"] == 0


def test_reset_increments_run_identifier():
    reset()
    first = snapshot()["run_id"]
    reset()
    second = snapshot()["run_id"]
    assert isinstance(first, int)
    assert second == first + 1


def test_fmt_elapsed():
    assert _fmt_elapsed(5.7) == "5s"
    assert _fmt_elapsed(125) == "2m 5s"
    assert _fmt_elapsed(7260) == "2h 1m"


def test_tracked_search_publishes_progress():
    from models import Target
    from solver.pieces import Bag, Template
    from solver.search import solve

    domino = Template([(0, 0, 0), (1, 0, 0)])
    target = Target([(x, y, 0) for x in range(2) for y in range(2)])
    stats = solve(target, Bag([domino, domino]), None, lambda s: None, track_progress=True)

    snap = snapshot()
    assert snap["done"] is True
    assert snap["ok"] is True
    assert snap["status"] == "Solved"
    assert snap["solutions"] == stats.solutions == 2
    assert snap["nodes"] == stats.nodes


def test_snapshot_reads_state_written_by_other_process(tmp_path, monkeypatch):
    import progress as progress_module

    state_path = tmp_path / "state.json"
    monkeypatch.setenv("PACK_PROGRESS_STATE_FILE", str(state_path))
    progress = importlib.reload(progress_module)

    progress.reset()
    progress.set_nodes(10)
    first = progress.snapshot()
    assert first["nodes"] == 10
    assert state_path.exists()

    data = dict(progress.PROGRESS)
    data["nodes"] = 99
    data["message"] = "from worker"
    state_path.write_text(json.dumps(data))
    os.utime(state_path, None)

    with progress.PROGRESS_LOCK:
        progress.PROGRESS["nodes"] = 0
        progress._LAST_STATE_MTIME = 0.0

    time.sleep(0.01)
    updated = progress.snapshot()
    assert updated["nodes"] == 99
    assert updated["message"] == "from worker"

    monkeypatch.delenv("PACK_PROGRESS_STATE_FILE", raising=False)
    importlib.reload(progress_module)
