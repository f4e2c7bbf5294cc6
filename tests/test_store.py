import json
import threading
import time

import pytest

from ipplan.errors import MalformedRegistry, RegistryConflict
from ipplan.models import SubnetReservation
from ipplan.store import RangeStore, load_ranges, save_ranges


def _res(network="172.16.0.0", mask=28, label="Adresacja_a.csv"):
    return SubnetReservation(network=network, mask=mask, range_start="172.16.0.1",
                             range_end="172.16.0.14", assigned_to=label)


def test_missing_registry_is_empty(tmp_path):
    store = RangeStore(tmp_path / "DATA.json")
    snap = store.snapshot()
    assert snap.reservations == []
    assert snap.token is None


def test_save_writes_camel_case_list(tmp_path):
    path = tmp_path / "nested" / "DATA.json"
    save_ranges(path, [_res()])

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data == [{
        "network": "172.16.0.0",
        "mask": 28,
        "rangeStart": "172.16.0.1",
        "rangeEnd": "172.16.0.14",
        "assignedTo": "Adresacja_a.csv",
    }]
    assert load_ranges(path) == [_res()]


@pytest.mark.parametrize("content", ["{not json", '{"network": "1.2.3.4"}', '[{"network": "x"}]'])
def test_corrupt_registry_fails_loudly(tmp_path, content):
    path = tmp_path / "DATA.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(MalformedRegistry):
        RangeStore(path).load()
    # the lenient helper still treats it as empty
    assert load_ranges(path) == []


def test_commit_with_current_snapshot(tmp_path):
    store = RangeStore(tmp_path / "DATA.json")
    snap = store.snapshot()
    store.commit(snap, [_res()])

    snap2 = store.snapshot()
    assert snap2.reservations == [_res()]
    assert snap2.token is not None
    store.commit(snap2, [_res(), _res("172.16.0.16", label="b")])
    assert len(store.load()) == 2


def test_commit_with_stale_snapshot_conflicts(tmp_path):
    store = RangeStore(tmp_path / "DATA.json")
    stale = store.snapshot()
    store.commit(store.snapshot(), [_res()])

    with pytest.raises(RegistryConflict):
        store.commit(stale, [_res("172.16.0.16")])
    # the first writer's data is untouched
    assert store.load() == [_res()]


def test_commit_leaves_no_temp_files(tmp_path):
    store = RangeStore(tmp_path / "DATA.json")
    store.commit(store.snapshot(), [_res()])
    assert [p.name for p in tmp_path.iterdir()] == ["DATA.json"]


def test_reservation_rejects_malformed_addresses():
    with pytest.raises(ValueError):
        SubnetReservation(network="172.16.0", mask=24, range_start="172.16.0.1", range_end="172.16.0.254")


def test_stores_on_the_same_file_share_a_lock(tmp_path):
    a = RangeStore(tmp_path / "DATA.json")
    b = RangeStore(tmp_path / "." / "DATA.json")
    assert a._lock is b._lock
    assert RangeStore(tmp_path / "OTHER.json")._lock is not a._lock


class SlowStore(RangeStore):
    def _write(self, reservations):
        time.sleep(0.05)
        super()._write(reservations)


def test_concurrent_commits_from_separate_stores(tmp_path):
    path = tmp_path / "DATA.json"
    stores = [SlowStore(path), SlowStore(path)]
    snaps = [s.snapshot() for s in stores]
    start = threading.Barrier(2)
    outcome = {}

    def commit(i):
        start.wait()
        try:
            stores[i].commit(snaps[i], [_res(f"172.16.{i}.0", label=f"batch-{i}")])
            outcome[i] = "ok"
        except RegistryConflict:
            outcome[i] = "conflict"

    threads = [threading.Thread(target=commit, args=(i,)) for i in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    # exactly one writer wins, the other sees the changed file
    assert sorted(outcome.values()) == ["conflict", "ok"]
    winner = next(i for i, v in outcome.items() if v == "ok")
    assert [r.assigned_to for r in RangeStore(path).load()] == [f"batch-{winner}"]
