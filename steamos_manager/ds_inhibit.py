"""Inhibit the mouse emulation of PlayStation controllers while Steam owns them."""

from __future__ import annotations

import logging
import os
import queue
import threading
import time
from dataclasses import dataclass
from pathlib import Path

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from steamos_manager.paths import path, write_synced

log = logging.getLogger(__name__)

_SETTLE_DELAY = 0.25
_INHIBITABLE_DRIVERS = ("sony", "playstation")


@dataclass(frozen=True)
class HidNode:
    """A ``/dev/hidrawN`` node and its sysfs device."""

    id: int

    def sys_base(self) -> Path:
        """Return the sysfs directory of the device behind this node."""
        return path(f"/sys/class/hidraw/hidraw{self.id}/device")

    def hidraw(self) -> Path:
        """Return the device node path."""
        return path(f"/dev/hidraw{self.id}")

    def get_nodes(self) -> list[Path]:
        """Return the ``inhibited`` files of every input that exposes a mouse."""
        entries = []
        for input_dir in sorted((self.sys_base() / "input").iterdir()):
            for child in sorted(input_dir.iterdir()):
                if child.name.startswith("mouse"):
                    log.debug("Found %s", input_dir)
                    entries.append(input_dir / "inhibited")
        return entries

    def can_inhibit(self) -> bool:
        """Tell whether this is a PlayStation controller with mouse inputs."""
        log.debug("Checking if hidraw%d can be inhibited", self.id)
        try:
            driver = os.readlink(self.sys_base() / "driver")
        except OSError as err:
            log.warning("Failed to find associated driver for hidraw%d: %s", self.id, err)
            return False

        if Path(driver).name not in _INHIBITABLE_DRIVERS:
            log.debug("Not a PlayStation controller")
            return False
        try:
            nodes = self.get_nodes()
        except OSError as err:
            log.warning("Failed to list inputs for hidraw%d: %s", self.id, err)
            return False
        if not nodes:
            log.debug("No nodes to inhibit")
            return False
        return True

    def _opened_by_steam(self) -> bool:
        hidraw = self.hidraw()
        for proc in path("/proc").iterdir():
            if not proc.name.isdigit() or int(proc.name) >= 2**32:
                continue
            try:
                fds = list((proc / "fd").iterdir())
            except OSError as err:
                log.debug("Process %s disappeared while scanning: %s", proc.name, err)
                continue
            for fd in fds:
                try:
                    target = Path(os.readlink(fd))
                except OSError as err:
                    log.debug("Process %s disappeared while scanning: %s", proc.name, err)
                    continue
                if target != hidraw:
                    continue
                try:
                    comm = path(f"/proc/{proc.name}/comm").read_bytes()
                except OSError as err:
                    log.debug("Process %s disappeared while scanning: %s", proc.name, err)
                    continue
                if comm.decode(errors="replace") == "steam\n":
                    return True
        return False

    def check(self) -> None:
        """Inhibit the node if Steam holds it open, otherwise uninhibit it."""
        if self._opened_by_steam():
            log.info("Inhibiting hidraw%d", self.id)
            self.inhibit()
        else:
            log.info("Uninhibiting hidraw%d", self.id)
            self.uninhibit()

    def _write_all(self, value: bytes) -> None:
        failure: OSError | None = None
        for node in self.get_nodes():
            try:
                write_synced(node, value)
            except OSError as err:
                log.error("Encountered error inhibiting: %s", err)
                failure = err
        if failure is not None:
            raise failure

    def inhibit(self) -> None:
        """Turn off mouse emulation; every node is tried before an error is raised."""
        self._write_all(b"1\n")

    def uninhibit(self) -> None:
        """Turn mouse emulation back on; every node is tried before an error is raised."""
        self._write_all(b"0\n")


class _Forwarder(FileSystemEventHandler):
    def __init__(self, events: queue.Queue[FileSystemEvent | None]) -> None:
        super().__init__()
        self._events = events

    def on_any_event(self, event: FileSystemEvent) -> None:
        self._events.put(event)


class Inhibitor:
    """Watches ``/dev`` for controllers and keeps their inhibit state current."""

    NAME = "ds-inhibitor"

    def __init__(self) -> None:
        self._dev = path("/dev")
        self._events: queue.Queue[FileSystemEvent | None] = queue.Queue()
        self._watches: dict[Path, HidNode] = {}
        self._lock = threading.Lock()
        self._observer = Observer()
        self._observer.schedule(_Forwarder(self._events), str(self._dev), recursive=False)
        self._observer.start()

    @classmethod
    def init(cls) -> Inhibitor:
        """Start watching ``/dev`` and pick up the controllers already present."""
        try:
            inhibitor = cls()
        except OSError as err:
            log.error("Could not create watches: %s", err)
            raise
        for entry in inhibitor._dev.iterdir():
            try:
                inhibitor.watch(entry)
            except OSError as err:
                log.error("Encountered error attempting to watch: %s", err)
        return inhibitor

    def watch(self, path: str | os.PathLike[str]) -> bool:
        """Track ``path`` if it is an inhibitable hidraw node; return whether it was added."""
        node_path = Path(path)
        if node_path.stat().st_mode and node_path.is_dir():
            return False
        suffix = node_path.name.removeprefix("hidraw")
        if suffix == node_path.name or not suffix.isdigit():
            return False
        node = HidNode(int(suffix))
        if not node.can_inhibit():
            return False
        log.info("Adding %s to watchlist", node_path)
        with self._lock:
            self._watches[node.hidraw()] = node
        try:
            node.check()
        except OSError as err:
            log.error(
                "Encountered error attempting to check if hidraw%d can be inhibited: %s",
                node.id,
                err,
            )
        return True

    def _process_event(self, event: FileSystemEvent) -> None:
        source = Path(os.fsdecode(event.src_path))
        log.debug("Got event: %s %s", event.event_type, source)
        with self._lock:
            node = self._watches.get(source)
        if event.event_type == EVENT_TYPE_CREATED:
            if node is not None:
                return
            log.debug("New device %s found", source.name)
            time.sleep(_SETTLE_DELAY)  # let the device's nodes enumerate
            self.watch(self._dev / source.name)
        elif node is None:
            return
        elif event.event_type == EVENT_TYPE_DELETED:
            log.debug("Device removed")
            with self._lock:
                self._watches.pop(source, None)
        else:
            node.check()

    def run(self) -> None:
        """Handle device events until :meth:`shutdown` is called."""
        while True:
            event = self._events.get()
            if event is None:
                return
            try:
                self._process_event(event)
            except OSError as err:
                log.warning("Got error processing event: %s", err)

    def shutdown(self) -> None:
        """Stop watching and uninhibit every tracked controller."""
        self._observer.stop()
        if self._observer is not threading.current_thread():
            self._observer.join()
        self._events.put(None)
        with self._lock:
            nodes = list(self._watches.values())
            self._watches.clear()
        failure: OSError | None = None
        for node in nodes:
            try:
                node.uninhibit()
            except OSError as err:
                log.warning("Error uninhibiting %d while shutting down: %s", node.id, err)
                failure = err
        if failure is not None:
            raise failure