"""Child processes exposed as pausable, cancellable jobs."""

from __future__ import annotations

import logging
import os
import signal
import subprocess
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

log = logging.getLogger(__name__)

JOB_PREFIX = "/com/steampowered/SteamOSManager1/Jobs"


class JobError(Exception):
    """A job operation failed."""


@dataclass
class Job:
    """A spawned process that can be paused, resumed, cancelled and waited on."""

    process: subprocess.Popen[bytes]
    paused: bool = False
    exit_code: int | None = None

    @classmethod
    def spawn(
        cls, executable: str | os.PathLike[str], args: Iterable[str | os.PathLike[str]]
    ) -> Job:
        """Start ``executable`` with ``args``; raises OSError if it cannot start."""
        process = subprocess.Popen([os.fspath(executable), *map(os.fspath, args)])
        return cls(process)

    def _send_signal(self, sig: signal.Signals) -> None:
        if self.process.returncode is not None:
            raise JobError("Unable to get pid from command, it likely finished running")
        try:
            os.kill(self.process.pid, sig)
        except OSError as err:
            raise JobError(str(err)) from err

    def _record(self, returncode: int) -> int:
        # A negative return code already means "killed by that signal".
        self.exit_code = returncode
        return returncode

    def try_wait(self) -> int | None:
        """Return the exit code if the process has finished, without blocking."""
        if self.exit_code is None:
            returncode = self.process.poll()
            if returncode is not None:
                self._record(returncode)
        return self.exit_code

    def pause(self) -> None:
        """Stop the process with SIGSTOP."""
        if self.paused:
            raise JobError("Already paused")
        try:
            self._send_signal(signal.SIGSTOP)
        finally:
            self.paused = True

    def resume(self) -> None:
        """Continue a paused process with SIGCONT."""
        if not self.paused:
            raise JobError("Not paused")
        try:
            self._send_signal(signal.SIGCONT)
        finally:
            self.paused = False

    def cancel(self, force: bool) -> None:
        """Terminate the process, or kill it if ``force``; a finished job is left alone."""
        if self.try_wait() is None:
            self._send_signal(signal.SIGKILL if force else signal.SIGTERM)
            if self.paused:
                self.resume()

    def wait(self) -> int:
        """Block until the process exits and return its code, or minus the killing signal."""
        if self.paused:
            self.resume()
        if self.exit_code is not None:
            return self.exit_code
        try:
            return self._record(self.process.wait())
        except OSError as err:
            raise JobError("Unable to get exit code") from err


@dataclass
class JobManager:
    """Numbers spawned jobs and keeps them addressable by object path."""

    on_job_started: Callable[[str], None] | None = None
    _jobs: dict[str, Job] = field(default_factory=dict, init=False, repr=False)
    _next_job: int = field(default=0, init=False, repr=False)

    def _add_job(self, job: Job) -> str:
        object_path = f"{JOB_PREFIX}/{self._next_job}"
        self._next_job += 1
        self._jobs[object_path] = job
        if self.on_job_started is not None:
            self.on_job_started(object_path)
        return object_path

    def run_process(
        self,
        executable: str | os.PathLike[str],
        args: Iterable[str | os.PathLike[str]],
        operation_name: str,
    ) -> str:
        """Start a process as a new job and return the job's object path."""
        try:
            job = Job.spawn(executable, args)
        except OSError as err:
            log.error("Error %s: %s", operation_name, err)
            raise JobError(str(err)) from err
        return self._add_job(job)

    def get_job(self, path: str) -> Job:
        """Return the job registered under ``path``."""
        try:
            return self._jobs[path]
        except KeyError:
            raise KeyError(f"No job at {path}") from None