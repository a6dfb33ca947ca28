"""Tests for the scan dispatcher and probe jobs."""

import threading
from collections import Counter

import pytest

from sprinkler_discovery.core.data_models import ScanStatus
from sprinkler_discovery.core.scan_dispatcher import ScanDispatcher, ScanJob
from sprinkler_discovery.utils.error_handler import ProbeFailure


class RecordingProbe:
    """Counts calls per address; matches a fixed set of addresses."""

    def __init__(self, matches=(), fail_with=None):
        self.matches = set(matches)
        self.fail_with = fail_with
        self.calls = Counter()
        self.threads = set()
        self._lock = threading.Lock()

    def __call__(self, address):
        with self._lock:
            self.calls[address] += 1
            self.threads.add(threading.current_thread().name)
        if self.fail_with and address not in self.matches:
            raise self.fail_with
        return address in self.matches


class RecordingSink:
    def __init__(self):
        self.reported = []
        self._lock = threading.Lock()

    def report(self, address):
        with self._lock:
            self.reported.append(address)


def targets(count):
    return [f"10.0.0.{i}" for i in range(1, count + 1)]


class TestScanJob:
    """Tests for a single probe job."""

    def test_success_reports_once(self, quiet_logger):
        """A matching probe reports the address exactly once."""
        sink = RecordingSink()
        job = ScanJob("10.0.0.7", lambda a: True, sink.report, quiet_logger)

        assert job.run() is True
        assert sink.reported == ["10.0.0.7"]

    def test_no_match_reports_nothing(self, quiet_logger):
        sink = RecordingSink()
        job = ScanJob("10.0.0.7", lambda a: False, sink.report, quiet_logger)

        assert job.run() is False
        assert sink.reported == []

    @pytest.mark.parametrize("error", [
        ProbeFailure("connection refused"),
        TimeoutError("timed out"),
        RuntimeError("unexpected"),
    ])
    def test_failures_are_swallowed(self, error, quiet_logger):
        """Probe failures never escape the job."""
        sink = RecordingSink()

        def probe(address):
            raise error

        job = ScanJob("10.0.0.7", probe, sink.report, quiet_logger)

        assert job.run() is False
        assert sink.reported == []

    def test_failing_sink_does_not_raise(self, quiet_logger):
        def report(address):
            raise RuntimeError("database down")

        job = ScanJob("10.0.0.7", lambda a: True, report, quiet_logger)

        assert job.run() is False


class TestScanDispatcher:
    """Tests for fanning targets out over the pool."""

    def test_every_target_probed_exactly_once(self, quiet_logger):
        """Pool of 4 with 50 targets still probes all 50 once."""
        probe = RecordingProbe()
        dispatcher = ScanDispatcher(pool_size=4, logger=quiet_logger)

        scan_run = dispatcher.run_scan(targets(50), probe, RecordingSink().report)

        assert scan_run.wait(timeout=30)
        assert scan_run.dispatched_count == 50
        assert scan_run.completed_count == 50
        assert set(probe.calls) == set(targets(50))
        assert all(count == 1 for count in probe.calls.values())
        assert len(probe.threads) <= 4

    def test_matches_reported(self, quiet_logger):
        probe = RecordingProbe(matches={"10.0.0.3", "10.0.0.17"})
        sink = RecordingSink()
        dispatcher = ScanDispatcher(pool_size=8, logger=quiet_logger)

        scan_run = dispatcher.run_scan(targets(20), probe, sink.report)

        assert scan_run.wait(timeout=30)
        assert sorted(sink.reported) == ["10.0.0.17", "10.0.0.3"]
        assert scan_run.discovered_count == 2
        assert scan_run.status == ScanStatus.COMPLETED
        assert scan_run.finished_at is not None

    def test_failing_jobs_do_not_cancel_siblings(self, quiet_logger):
        """Exceptions in some jobs leave the others running to completion."""
        probe = RecordingProbe(matches={"10.0.0.5"}, fail_with=ConnectionRefusedError())
        sink = RecordingSink()
        dispatcher = ScanDispatcher(pool_size=3, logger=quiet_logger)

        scan_run = dispatcher.run_scan(targets(30), probe, sink.report)

        assert scan_run.wait(timeout=30)
        assert sum(probe.calls.values()) == 30
        assert sink.reported == ["10.0.0.5"]
        assert all(future.exception() is None for future in scan_run.futures)

    def test_returns_before_probes_finish(self, quiet_logger):
        """Dispatch is a submission barrier; wait() is the drain barrier."""
        release = threading.Event()
        started = threading.Event()

        def blocking_probe(address):
            started.set()
            release.wait(timeout=30)
            return False

        dispatcher = ScanDispatcher(pool_size=2, logger=quiet_logger)
        scan_run = dispatcher.run_scan(targets(5), blocking_probe, RecordingSink().report)

        assert scan_run.dispatched_count == 5
        assert started.wait(timeout=10)
        assert not scan_run.done()
        assert scan_run.wait(timeout=0.05) is False
        assert scan_run.status == ScanStatus.IN_PROGRESS

        release.set()

        assert scan_run.wait(timeout=30) is True
        assert scan_run.done()

    def test_slow_probe_does_not_starve_others(self, quiet_logger):
        """One stuck probe occupies one worker; the rest keep draining."""
        release = threading.Event()
        probe = RecordingProbe()

        def probe_with_one_slow(address):
            if address == "10.0.0.1":
                release.wait(timeout=30)
            return probe(address)

        dispatcher = ScanDispatcher(pool_size=4, logger=quiet_logger)
        scan_run = dispatcher.run_scan(targets(40), probe_with_one_slow, RecordingSink().report)

        others = [f for t, f in zip(scan_run.targets, scan_run.futures) if t != "10.0.0.1"]
        for future in others:
            future.result(timeout=30)

        assert scan_run.completed_count == 39
        release.set()
        assert scan_run.wait(timeout=30)
        assert scan_run.completed_count == 40

    def test_cancel_pending_skips_queued_jobs(self, quiet_logger):
        """Cancelling after a timeout leaves only the running job to finish."""
        release = threading.Event()
        started = threading.Event()
        probe = RecordingProbe()

        def blocking_probe(address):
            started.set()
            release.wait(timeout=30)
            return probe(address)

        dispatcher = ScanDispatcher(pool_size=1, logger=quiet_logger)
        scan_run = dispatcher.run_scan(targets(20), blocking_probe, RecordingSink().report)

        assert started.wait(timeout=10)
        assert scan_run.wait(timeout=0.05) is False
        assert scan_run.cancel_pending() == 19
        assert scan_run.cancel_pending() == 0

        release.set()

        assert scan_run.wait(timeout=10)
        assert sum(probe.calls.values()) == 1
        assert scan_run.cancelled_count == 19
        assert scan_run.completed_count == 20

    def test_discoveries_counted_once_per_address(self, quiet_logger):
        sink = RecordingSink()
        dispatcher = ScanDispatcher(pool_size=2, logger=quiet_logger)

        scan_run = dispatcher.run_scan(
            ["10.0.0.4", "10.0.0.4", "10.0.0.5"],
            RecordingProbe(matches={"10.0.0.4"}),
            sink.report,
        )

        assert scan_run.wait(timeout=30)
        assert sink.reported == ["10.0.0.4", "10.0.0.4"]
        assert scan_run.discovered_count == 1
        assert scan_run.discovered == {"10.0.0.4"}

    def test_targets_are_copied(self, quiet_logger):
        """Mutating the caller's list after dispatch changes nothing."""
        target_list = targets(3)
        dispatcher = ScanDispatcher(pool_size=2, logger=quiet_logger)

        scan_run = dispatcher.run_scan(target_list, RecordingProbe(), RecordingSink().report)
        target_list.append("10.0.0.99")

        assert scan_run.wait(timeout=30)
        assert scan_run.targets == targets(3)

    def test_empty_targets(self, quiet_logger):
        dispatcher = ScanDispatcher(pool_size=4, logger=quiet_logger)

        scan_run = dispatcher.run_scan([], RecordingProbe(), RecordingSink().report)

        assert scan_run.dispatched_count == 0
        assert scan_run.wait(timeout=1)

    @pytest.mark.parametrize("pool_size", [0, -3])
    def test_invalid_pool_size(self, pool_size):
        with pytest.raises(ValueError):
            ScanDispatcher(pool_size=pool_size)
