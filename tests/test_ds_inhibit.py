import os
import threading
import time
from pathlib import Path

import pytest

from steamos_manager.ds_inhibit import HidNode, Inhibitor
from steamos_manager.paths import path, set_root


@pytest.fixture
def root(tmp_path):
    set_root(tmp_path)
    yield tmp_path
    set_root(None)


def _read_eventually(file: Path, expected: str, timeout: float = 3.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            if file.read_text() == expected:
                return True
        except OSError:
            pass
        time.sleep(0.005)
    return False


def _setup_controller(node: HidNode, driver: str = "sony") -> None:
    (node.sys_base() / "input/input0/mouse0").mkdir(parents=True)
    os.symlink(driver, node.sys_base() / "driver")


def _start(inhibitor: Inhibitor) -> threading.Thread:
    thread = threading.Thread(target=inhibitor.run, daemon=True)
    thread.start()
    return thread


def test_hid_nodes(root):
    hid = HidNode(0)
    base = hid.sys_base()
    (base / "input/input0/foo0").mkdir(parents=True)
    (base / "input/input1/bar0").mkdir(parents=True)
    (base / "input/input2/mouse0").mkdir(parents=True)
    assert hid.get_nodes() == [base / "input/input2/inhibited"]


def test_hid_paths(root):
    hid = HidNode(3)
    assert hid.hidraw() == root / "dev/hidraw3"
    assert hid.sys_base() == root / "sys/class/hidraw/hidraw3/device"


def test_hid_can_inhibit(root):
    hids = [HidNode(i) for i in range(7)]
    layout = [
        ("foo0", "foo"),
        ("mouse0", "foo"),
        ("foo1", "sony"),
        ("mouse1", "sony"),
        ("foo2", "playstation"),
        ("mouse2", "playstation"),
        ("mouse3", None),
    ]
    for i, (child, driver) in enumerate(layout):
        (hids[i].sys_base() / f"input/input{i}/{child}").mkdir(parents=True)
        if driver is not None:
            os.symlink(driver, hids[i].sys_base() / "driver")

    assert [h.can_inhibit() for h in hids] == [False, False, False, True, False, True, False]


def test_hid_inhibit(root):
    hid = HidNode(0)
    _setup_controller(hid)
    assert hid.can_inhibit()
    inhibited = hid.sys_base() / "input/input0/inhibited"

    hid.inhibit()
    assert inhibited.read_text() == "1\n"
    hid.uninhibit()
    assert inhibited.read_text() == "0\n"


def test_hid_inhibit_error_continue(root):
    hid = HidNode(0)
    base = hid.sys_base()
    (base / "input/input0/mouse0").mkdir(parents=True)
    (base / "input/input0/inhibited").mkdir(parents=True)
    (base / "input/input1/mouse1").mkdir(parents=True)
    os.symlink("sony", base / "driver")
    assert hid.can_inhibit()

    with pytest.raises(OSError):
        hid.inhibit()
    assert (base / "input/input1/inhibited").read_text() == "1\n"
    with pytest.raises(OSError):
        hid.uninhibit()
    assert (base / "input/input1/inhibited").read_text() == "0\n"


def test_hid_check(root):
    hid = HidNode(0)
    _setup_controller(hid)
    inhibited = hid.sys_base() / "input/input0/inhibited"
    (root / "proc/1/fd").mkdir(parents=True)
    os.symlink(hid.hidraw(), root / "proc/1/fd/3")
    (root / "proc/1/comm").write_text("steam\n")

    hid.check()
    assert inhibited.read_text() == "1\n"

    (root / "proc/1/comm").write_text("epic\n")
    hid.check()
    assert inhibited.read_text() == "0\n"

    (root / "proc/1/fd/3").unlink()
    (root / "proc/1/comm").write_text("steam\n")
    hid.check()
    assert inhibited.read_text() == "0\n"


def test_watch_rejects_other_entries(root):
    (root / "dev/hidraw9").mkdir(parents=True)
    (root / "dev/null").write_text("")
    inhibitor = Inhibitor.init()
    try:
        assert inhibitor.watch(root / "dev/hidraw9") is False
        assert inhibitor.watch(root / "dev/null") is False
        with pytest.raises(FileNotFoundError):
            inhibitor.watch(root / "dev/hidraw5")
    finally:
        inhibitor.shutdown()


def test_inhibitor_start(root):
    hid = HidNode(0)
    (root / "dev").mkdir()
    _setup_controller(hid)
    hid.hidraw().write_text("")
    (root / "proc/1/fd").mkdir(parents=True)
    os.symlink(hid.hidraw(), root / "proc/1/fd/3")
    (root / "proc/1/comm").write_text("steam\n")
    inhibited = hid.sys_base() / "input/input0/inhibited"

    inhibitor = Inhibitor.init()
    assert inhibited.read_text() == "1\n"

    inhibitor.shutdown()
    assert inhibited.read_text() == "0\n"


def test_inhibitor_open_close(root):
    hid = HidNode(0)
    (root / "dev").mkdir()
    _setup_controller(hid)
    hid.hidraw().write_bytes(b"")
    (root / "proc/1/fd").mkdir(parents=True)
    (root / "proc/1/comm").write_text("steam\n")
    inhibited = hid.sys_base() / "input/input0/inhibited"

    inhibitor = Inhibitor.init()
    thread = _start(inhibitor)
    try:
        assert inhibited.read_text() == "0\n"

        os.symlink(hid.hidraw(), root / "proc/1/fd/3")
        handle = open(hid.hidraw(), "rb")
        assert _read_eventually(inhibited, "1\n")

        (root / "proc/1/fd/3").unlink()
        handle.close()
        assert _read_eventually(inhibited, "0\n")
    finally:
        inhibitor.shutdown()
        thread.join(timeout=5)
    assert not thread.is_alive()


def test_inhibitor_fast_create(root):
    hid = HidNode(0)
    (root / "dev").mkdir()
    _setup_controller(hid)
    (root / "proc/1/fd").mkdir(parents=True)
    (root / "proc/1/comm").write_text("steam\n")
    inhibited = hid.sys_base() / "input/input0/inhibited"

    inhibitor = Inhibitor.init()
    thread = _start(inhibitor)
    try:
        assert not inhibited.exists()

        hid.hidraw().write_bytes(b"")
        os.symlink(hid.hidraw(), root / "proc/1/fd/3")
        with open(hid.hidraw(), "rb"):
            assert _read_eventually(inhibited, "1\n")
    finally:
        inhibitor.shutdown()
        thread.join(timeout=5)


def test_inhibitor_create(root):
    hid = HidNode(0)
    path("/dev").mkdir(parents=True)
    _setup_controller(hid)
    path("/proc/1/fd").mkdir(parents=True)
    path("/proc/1/comm").write_text("steam\n")
    inhibited = hid.sys_base() / "input/input0/inhibited"

    inhibitor = Inhibitor.init()
    thread = _start(inhibitor)
    try:
        with pytest.raises(FileNotFoundError):
            inhibited.read_text()

        hid.hidraw().write_bytes(b"")
        os.symlink(hid.hidraw(), path("/proc/1/fd/3"))
        with open(hid.hidraw(), "rb"):
            assert _read_eventually(inhibited, "1\n")
    finally:
        inhibitor.shutdown()
        thread.join(timeout=5)

    assert inhibited.read_text() == "0\n"