"""
JSON Report Generator for Sprinkler Discovery Module.

This module writes the outcome of a discovery run to a JSON file, with
timestamp-based file naming and collision handling.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.data_models import DiscoveryResult, ScanRun
from .logger import Logger, get_logger
from .network_utils import ip_sort_key


class JSONReporter:
    """
    Handles generation of JSON reports from discovery runs.

    This class is responsible for:
    - Converting a run and its discovered devices to JSON format
    - Managing output file naming with timestamp-based collision handling
    """

    def __init__(self, output_directory: str = "results", logger: Optional[Logger] = None):
        """
        Initialize the JSON reporter.

        Args:
            output_directory: Directory where JSON reports will be saved
        """
        self.output_directory = Path(output_directory)
        self.logger = logger or get_logger(__name__)

        self.output_directory.mkdir(parents=True, exist_ok=True)

    def generate_report(
        self,
        scan_run: ScanRun,
        devices: List[DiscoveryResult],
        interface_name: Optional[str] = None,
        host_ip: Optional[str] = None,
        subnets: Optional[List[str]] = None,
        configuration: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Generate a JSON report for a discovery run.

        Args:
            scan_run: The dispatched run
            devices: Devices discovered during the run
            interface_name: Interface that was scanned
            host_ip: Local address the interface was found from
            subnets: CIDR strings that were expanded
            configuration: Configuration used for the run

        Returns:
            str: Path to the generated JSON file

        Raises:
            ValueError: If scan_run is missing
            IOError: If file cannot be written
        """
        if scan_run is None:
            raise ValueError("Scan run cannot be None")

        json_data = {
            "scan_metadata": {
                "timestamp": scan_run.started_at.isoformat(),
                "scan_duration": scan_run.duration,
                "scan_status": scan_run.status.value,
                "interface_name": interface_name,
                "host_ip": host_ip,
                "subnets_scanned": subnets or [],
                "targets_dispatched": scan_run.dispatched_count,
                "targets_completed": scan_run.completed_count - scan_run.cancelled_count,
                "targets_cancelled": scan_run.cancelled_count,
                "pool_size": scan_run.pool_size,
                "configuration_used": configuration or {},
            },
            "devices": self._convert_devices(devices),
        }

        filepath = self._handle_file_collision(
            self.output_directory / self._generate_filename(scan_run.started_at)
        )

        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump(json_data, f, indent=2, ensure_ascii=False, default=str)
        except IOError as e:
            self.logger.error(f"Failed to write JSON report to {filepath}: {e}")
            raise

        self.logger.info(f"JSON report successfully generated: {filepath}")
        return str(filepath)

    def _convert_devices(self, devices: List[DiscoveryResult]) -> List[Dict[str, Any]]:
        converted = [
            {
                "thing_uid": device.thing_uid,
                "label": device.label,
                # Credentials stay out of reports
                "properties": {**device.to_properties(), "password": "***"},
            }
            for device in devices
        ]
        converted.sort(key=lambda d: ip_sort_key(d["properties"]["hostname"]))
        return converted

    def _generate_filename(self, timestamp: datetime) -> str:
        # Format: sprinkler_discovery_YYYYMMDD_HHMMSS.json
        return f"sprinkler_discovery_{timestamp.strftime('%Y%m%d_%H%M%S')}.json"

    def _handle_file_collision(self, filepath: Path) -> Path:
        """
        Handle filename collisions by adding incremental suffix.

        Args:
            filepath: Original file path

        Returns:
            Path: Unique file path
        """
        if not filepath.exists():
            return filepath

        base_name = filepath.stem
        extension = filepath.suffix

        for counter in range(1, 1000):
            new_filepath = filepath.parent / f"{base_name}_{counter:03d}{extension}"
            if not new_filepath.exists():
                self.logger.info(f"File collision detected, using filename: {new_filepath.name}")
                return new_filepath

        raise IOError(f"Too many file collisions for {filepath}")
