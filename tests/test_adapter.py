import json
import queue
import threading

from conftest import make_device
from packet_sd.adapter import Adapter
from packet_sd.discovery import create_target, tombstone


def read(path):
    with open(path) as f:
        return json.load(f)


def test_refresh_writes_file_sd_groups(tmp_path):
    output = tmp_path / "packet.json"
    adapter = Adapter(str(output), queue.Queue())

    assert adapter.refresh([create_target(make_device("d1"), 9100)])

    groups = read(output)
    assert len(groups) == 1
    assert groups[0]["targets"] == ["10.0.0.1:9100"]
    assert groups[0]["labels"]["__meta_packet_tags"] == ""


def test_tombstone_removes_group(tmp_path):
    output = tmp_path / "packet.json"
    adapter = Adapter(str(output), queue.Queue())
    adapter.refresh([
        create_target(make_device("d1"), 9100),
        create_target(make_device("d2", private_ipv4="10.0.0.2"), 9100),
    ])

    adapter.refresh([create_target(make_device("d2", private_ipv4="10.0.0.2"), 9100), tombstone("packet/d1")])

    assert [g["targets"] for g in read(output)] == [["10.0.0.2:9100"]]


def test_unchanged_batch_is_not_rewritten(tmp_path):
    output = tmp_path / "packet.json"
    adapter = Adapter(str(output), queue.Queue())
    batch = [create_target(make_device("d1"), 9100)]

    assert adapter.refresh(batch)
    assert not adapter.refresh(batch)


def test_write_leaves_no_temp_files(tmp_path):
    output = tmp_path / "packet.json"
    Adapter(str(output), queue.Queue()).refresh([])

    assert [p.name for p in tmp_path.iterdir()] == ["packet.json"]
    assert read(output) == []


def test_run_consumes_channel_until_stopped(tmp_path):
    output = tmp_path / "packet.json"
    channel = queue.Queue(maxsize=1)
    stop = threading.Event()
    adapter = Adapter(str(output), channel)
    worker = threading.Thread(target=adapter.run, args=(stop,), daemon=True)
    worker.start()

    channel.put([create_target(make_device("d1"), 9100)])
    for _ in range(100):
        if output.exists():
            break
        stop.wait(0.05)
    stop.set()
    worker.join(timeout=5)

    assert not worker.is_alive()
    assert read(output)[0]["targets"] == ["10.0.0.1:9100"]


def test_run_survives_write_errors(tmp_path):
    output = tmp_path / "missing-dir" / "packet.json"
    channel = queue.Queue()
    stop = threading.Event()
    adapter = Adapter(str(output), channel)
    channel.put([create_target(make_device("d1"), 9100)])

    worker = threading.Thread(target=adapter.run, args=(stop,), daemon=True)
    worker.start()
    for _ in range(100):
        if channel.empty():
            break
        stop.wait(0.05)
    stop.set()
    worker.join(timeout=5)

    assert not worker.is_alive()
    assert adapter.groups is None
