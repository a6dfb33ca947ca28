"""
Scan Dispatcher for the Sprinkler Discovery Module.

This module fans scan targets out over a fixed-size thread pool. Each target
becomes one independent ScanJob; jobs share nothing but the pool, and a job
that fails never affects its siblings.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Optional

from .data_models import ScanRun
from ..utils.error_handler import ProbeFailure
from ..utils.logger import Logger, get_logger

Probe = Callable[[str], bool]
Reporter = Callable[[str], None]


class ScanJob:
    """
    Probe one address and report it on success.

    A job never raises: unreachable addresses are the common case of a
    subnet scan, so every failure ends at debug level inside the job.
    """

    def __init__(
        self,
        target: str,
        probe: Probe,
        report: Reporter,
        logger: Optional[Logger] = None,
    ):
        self.target = target
        self.probe = probe
        self.report = report
        self.logger = logger or get_logger(__name__)

    def run(self) -> bool:
        """
        Execute the probe and report a match.

        Returns:
            bool: True if the device answered and was reported
        """
        try:
            found = self.probe(self.target)
        except ProbeFailure as e:
            self.logger.debug(f"No device at {self.target}: {e}")
            return False
        except Exception as e:
            self.logger.debug(
                f"Probe of {self.target} failed: {type(e).__name__}: {e}"
            )
            return False

        if not found:
            self.logger.debug(f"No device at {self.target}")
            return False

        try:
            self.report(self.target)
        except Exception as e:
            # Reporting problems belong to the sink; the pool must keep going
            self.logger.warning(f"Could not report device at {self.target}: {e}")
            return False
        return True


class ScanDispatcher:
    """
    Runs one ScanJob per target on a bounded worker pool.

    Dispatch is a two-phase protocol: ``run_scan`` returns once every job
    has been submitted, and the returned ScanRun's ``wait()`` blocks until
    the pool has drained.
    """

    def __init__(self, pool_size: int, logger: Optional[Logger] = None):
        """
        Initialize the dispatcher.

        Args:
            pool_size: Number of worker threads per run (must be positive)
            logger: Logger instance (default: module logger)
        """
        if pool_size <= 0:
            raise ValueError(f"pool_size must be positive, got {pool_size}")
        self.pool_size = pool_size
        self.logger = logger or get_logger(__name__)

    def run_scan(
        self, targets: Iterable[str], probe: Probe, report: Reporter
    ) -> ScanRun:
        """
        Submit one probe job per target without waiting for them.

        Args:
            targets: Addresses to probe; copied before submission
            probe: Callable returning True when the device signature matches
            report: Called with the address of every matching device

        Returns:
            ScanRun: Handle whose wait() is the drain barrier
        """
        target_list = list(targets)
        scan_run = ScanRun(targets=target_list, pool_size=self.pool_size)

        def report_and_count(address: str) -> None:
            report(address)
            scan_run.record_discovery(address)

        self.logger.info(
            f"Dispatching {len(target_list)} probe jobs on {self.pool_size} worker threads"
        )

        executor = ThreadPoolExecutor(
            max_workers=self.pool_size, thread_name_prefix="sprinkler-probe"
        )
        try:
            for target in target_list:
                job = ScanJob(target, probe, report_and_count, self.logger)
                scan_run.futures.append(executor.submit(job.run))
        finally:
            # Submitted jobs still run; the threads exit once the queue drains
            executor.shutdown(wait=False)

        self.logger.debug(f"Dispatch complete: {scan_run.dispatched_count} jobs submitted")
        return scan_run
