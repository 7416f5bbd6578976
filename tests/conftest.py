"""Shared fixtures for the process tools tests."""

import sys
import time
import subprocess
import contextlib
from types import SimpleNamespace

import psutil
import pytest

from tools import tool_control
from tools.process.blocking import shutdown_executor
from tools.process.snapshot import ProcessRecord


class FakeProcess:
    """Stand-in for psutil.Process used to drive take_snapshot()."""

    def __init__(self, pid, name="proc", cpu=0.0, rss=0, gone_before_read=False,
                 gone_on_prime=False, denied=(), status=psutil.STATUS_SLEEPING):
        self.pid = pid
        self._name = name
        self._cpu = cpu
        self._rss = rss
        self._gone_before_read = gone_before_read
        self._gone_on_prime = gone_on_prime
        self._denied = set(denied)
        self._primed = False
        self._status = status

    def oneshot(self):
        return contextlib.nullcontext()

    def _check(self, attr):
        if self._gone_before_read:
            raise psutil.NoSuchProcess(self.pid)
        if attr in self._denied:
            raise psutil.AccessDenied(self.pid)

    def status(self):
        self._check("status")
        return self._status

    def name(self):
        self._check("name")
        return self._name

    def cpu_percent(self, interval=None):
        if not self._primed:
            self._primed = True
            if self._gone_on_prime:
                raise psutil.NoSuchProcess(self.pid)
            return 0.0
        self._check("cpu_percent")
        return self._cpu

    def memory_info(self):
        self._check("memory_info")
        return SimpleNamespace(rss=self._rss)


def make_record(pid, name="proc", cpu=0.0, memory_mb=1.0):
    return ProcessRecord(pid=pid, name=name, cpu_percent=cpu, memory_mb=memory_mb)


@pytest.fixture
def records():
    """A small snapshot in OS enumeration order."""
    return [
        make_record(1, "systemd", 0.0, 12.0),
        make_record(200, "python3", 35.5, 80.0),
        make_record(201, "Python Helper", 5.0, 20.0),
        make_record(300, "nginx", 12.0, 8.0),
        make_record(301, "nginx", 12.0, 8.5),
        make_record(400, "postgres", 150.0, 512.0),
        make_record(500, "bash", 0.0, 4.0),
    ]


@pytest.fixture
def sleeping_child():
    """A real child process that does nothing for a minute."""
    child = subprocess.Popen([sys.executable, "-c", "import time; time.sleep(60)"])

    # Until exec completes the child still carries the test runner's name
    deadline = time.monotonic() + 5
    while time.monotonic() < deadline:
        try:
            if "time.sleep(60)" in " ".join(psutil.Process(child.pid).cmdline()):
                break
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            pass
        time.sleep(0.01)

    yield child
    if child.poll() is None:
        child.kill()
    child.wait(timeout=10)


@pytest.fixture
def no_disabled_tools():
    tool_control.reload_disabled_tools("")
    yield
    tool_control.reload_disabled_tools("")


@pytest.fixture(scope="session", autouse=True)
def _stop_worker_pool():
    yield
    shutdown_executor(wait=True)
