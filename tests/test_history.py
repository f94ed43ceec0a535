import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from webrepl.webrepl_history import HistoryLog, HistoryRecord


def test_append_returns_snapshot_in_order():
    log = HistoryLog()
    first = log.append(HistoryRecord(expr="1"))
    second = log.append(HistoryRecord(expr="2"))
    assert [r.expr for r in first] == ["1"]
    assert [r.expr for r in second] == ["1", "2"]
    assert log.current() == second
    assert len(log) == 2
    assert [r.expr for r in log] == ["1", "2"]


def test_snapshots_are_immutable():
    log = HistoryLog()
    snap = log.append(HistoryRecord(expr="1"))
    log.append(HistoryRecord(expr="2"))
    assert len(snap) == 1
    with pytest.raises(AttributeError):
        snap[0].expr = "changed"


def test_record_fields_default_to_empty_text():
    rec = HistoryRecord(expr="x")
    assert (rec.result, rec.out, rec.err, rec.result_html) == ("", "", "", "")


def test_rejects_non_records():
    with pytest.raises(TypeError):
        HistoryLog().append({"expr": "1"})


def test_concurrent_appends_lose_nothing():
    n = 64
    log = HistoryLog()
    barrier = threading.Barrier(n)

    def worker(i):
        barrier.wait()
        return log.append(HistoryRecord(expr=str(i)))

    with ThreadPoolExecutor(max_workers=n) as pool:
        snapshots = list(pool.map(worker, range(n)))

    exprs = [r.expr for r in log.current()]
    assert len(exprs) == n
    assert sorted(exprs, key=int) == [str(i) for i in range(n)]
    # each append observed every commit before it
    assert sorted(len(s) for s in snapshots) == list(range(1, n + 1))
