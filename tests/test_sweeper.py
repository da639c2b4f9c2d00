import threading
from datetime import timedelta

from calendar_mcp.services.sweeper import PeriodicTask


def test_run_once_logs_failures(caplog):
    def explode():
        raise RuntimeError("boom")

    PeriodicTask("explode", timedelta(seconds=1), explode).run_once()

    assert "Periodic task explode failed" in caplog.text


def test_task_runs_until_stopped():
    ran = threading.Event()
    task = PeriodicTask("tick", timedelta(milliseconds=10), ran.set)

    task.start()
    assert ran.wait(2)
    task.stop()

    assert not task.running
