"""
Main entry point for the Sprinkler Discovery Module.

This module provides the command-line interface for the discovery tool,
including argument parsing, configuration overrides, and graceful shutdown
handling.
"""

import argparse
import signal
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Tuple

from . import __version__
from .config.config_loader import ConfigLoader, DiscoveryConfig
from .core.discovery_service import SprinklerDiscoveryService
from .utils.error_handler import (
    ConfigurationError,
    SprinklerDiscoveryError,
    troubleshooting_hints,
)
from .utils.json_reporter import JSONReporter
from .utils.logger import LogLevel, get_logger, set_log_level


class SprinklerDiscoveryApp:
    """
    Main application class for Sprinkler Discovery Module.

    Handles CLI interface, configuration and application lifecycle.
    """

    def __init__(self, install_signal_handlers: bool = True):
        """Initialize the application."""
        self.logger = get_logger(__name__)
        self.service: Optional[SprinklerDiscoveryService] = None
        self.shutdown_requested = False

        if install_signal_handlers:
            signal.signal(signal.SIGINT, self._signal_handler)
            signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum: int, frame) -> None:
        """
        Handle shutdown signals gracefully.

        Args:
            signum: Signal number
            frame: Current stack frame
        """
        signal_names = {signal.SIGINT: "SIGINT", signal.SIGTERM: "SIGTERM"}
        signal_name = signal_names.get(signum, f"Signal {signum}")

        if not self.shutdown_requested:
            self.logger.warning(f"Received {signal_name} - initiating graceful shutdown...")
            self.shutdown_requested = True
            raise KeyboardInterrupt
        else:
            self.logger.error("Force shutdown requested - terminating immediately")
            sys.exit(1)

    def _validate_paths(self, config_dir: Optional[str], output_dir: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
        """
        Validate configuration and output directories.

        Args:
            config_dir: Configuration directory path
            output_dir: Output directory path

        Returns:
            tuple: (validated_config_dir, validated_output_dir)

        Raises:
            ConfigurationError: If a directory is unusable
        """
        validated_config_dir = None
        if config_dir:
            config_path = Path(config_dir)
            if not config_path.is_dir():
                raise ConfigurationError(f"Configuration directory does not exist: {config_dir}")
            validated_config_dir = str(config_path.resolve())

        validated_output_dir = None
        if output_dir:
            output_path = Path(output_dir)
            try:
                output_path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise ConfigurationError(f"Cannot create output directory {output_dir}: {e}")
            validated_output_dir = str(output_path.resolve())

        return validated_config_dir, validated_output_dir

    def build_config(self, args: argparse.Namespace, config_dir: Optional[str]) -> DiscoveryConfig:
        """
        Load the configuration file and apply command-line overrides.

        Args:
            args: Parsed command line arguments
            config_dir: Validated configuration directory

        Returns:
            DiscoveryConfig: Effective configuration
        """
        config = ConfigLoader(config_dir, self.logger).load_discovery_config()

        overrides = {}
        if args.pool_size is not None:
            if args.pool_size <= 0:
                raise ConfigurationError(f"--pool-size must be positive, got {args.pool_size}")
            overrides["pool_size"] = args.pool_size
        if args.port is not None:
            if not 0 < args.port <= 65535:
                raise ConfigurationError(f"--port must be between 1 and 65535, got {args.port}")
            overrides["default_port"] = args.port
        if args.password is not None:
            overrides["default_password"] = args.password

        return replace(config, **overrides) if overrides else config

    def _cancel_pending_probes(self) -> None:
        if self.service is None or self.service.current_run is None:
            return
        cancelled = self.service.current_run.cancel_pending()
        if cancelled:
            self.logger.info(f"Cancelled {cancelled} pending probe(s)")

    def create_config(self, config_dir: Optional[str]) -> int:
        """
        Write the default configuration file.

        Args:
            config_dir: Target directory (default: packaged config directory)

        Returns:
            int: Exit code
        """
        config_path = ConfigLoader(config_dir, self.logger).create_default_config()
        if not config_path.exists():
            return 1
        self.logger.success(f"Configuration file: {config_path}")
        return 0

    def _print_devices(self) -> None:
        devices = self.service.discovered()
        if not devices:
            self.logger.info("No OpenSprinkler devices found")
            return

        widths = [15, 6, 8, 22]
        self.logger.table_header(["Hostname", "Port", "Refresh", "Thing UID"], widths)
        for device in devices:
            self.logger.table_row(
                [device.hostname, device.port, device.refresh_interval, device.thing_uid],
                widths,
            )

    def run(self, args: argparse.Namespace) -> int:
        """
        Run the sprinkler discovery application.

        Args:
            args: Parsed command line arguments

        Returns:
            int: Exit code (0 for success, non-zero for failure)
        """
        try:
            if args.create_config:
                return self.create_config(args.config_dir)

            config_dir, output_dir = self._validate_paths(args.config_dir, args.output_dir)
            config = self.build_config(args, config_dir)

            self.service = SprinklerDiscoveryService(config, logger=self.logger)

            self.logger.section("OPENSPRINKLER DISCOVERY")
            scan_run = self.service.start_scan()

            enumerator = self.service.enumerator
            subnets = [subnet.cidr for subnet in enumerator.subnets]
            self.logger.network_info(
                interface=enumerator.interface_name or "unknown",
                host_ip=enumerator.host_ip or "unknown",
                subnets=subnets,
            )

            self.logger.progress_start(f"Probing {scan_run.dispatched_count} addresses")
            if not scan_run.wait(args.timeout):
                self.logger.progress_end()
                cancelled = scan_run.cancel_pending()
                self.logger.warning(
                    f"Discovery did not finish within {args.timeout}s "
                    f"({scan_run.completed_count - cancelled}/{scan_run.dispatched_count} "
                    f"probes finished, {cancelled} cancelled)"
                )
            else:
                self.logger.progress_end(
                    f"Discovery completed in {scan_run.duration:.1f}s. "
                    f"Found {scan_run.discovered_count} device(s)"
                )

            self._print_devices()

            if not args.no_report:
                reporter = JSONReporter(output_dir or "results", self.logger)
                reporter.generate_report(
                    scan_run,
                    self.service.discovered(),
                    interface_name=enumerator.interface_name,
                    host_ip=enumerator.host_ip,
                    subnets=subnets,
                    configuration=config.to_dict(),
                )

            return 0

        except KeyboardInterrupt:
            self.logger.warning("Discovery interrupted by user")
            self._cancel_pending_probes()
            return 130  # Standard exit code for SIGINT
        except SprinklerDiscoveryError as e:
            self.logger.error(f"Sprinkler discovery failed: {str(e)}", exception=e)
            for hint in troubleshooting_hints(e):
                self.logger.info(f"  • {hint}")
            return 1
        except Exception as e:
            self.logger.error(f"Sprinkler discovery failed: {str(e)}", exception=e)
            return 1


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the command line argument parser.

    Returns:
        argparse.ArgumentParser: Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="sprinkler_discovery",
        description="Sprinkler Discovery - find OpenSprinkler controllers on the local subnet",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m sprinkler_discovery                           # Run with default settings
  python -m sprinkler_discovery --config-dir ./configs    # Use custom config directory
  python -m sprinkler_discovery --pool-size 32            # Probe 32 addresses at a time
  python -m sprinkler_discovery --port 8080 --no-report   # Non-default port, no JSON file
  python -m sprinkler_discovery --verbose                 # Show every probe outcome
  python -m sprinkler_discovery --create-config --config-dir ./configs
        """
    )

    parser.add_argument(
        "--config-dir",
        type=str,
        help="Directory containing discovery_config.yml. "
             "Defaults to sprinkler_discovery/config/"
    )

    parser.add_argument(
        "--output-dir",
        type=str,
        help="Directory for output JSON reports. Defaults to ./results/"
    )

    parser.add_argument(
        "--pool-size",
        type=int,
        help="Number of addresses probed in parallel (overrides the config file)"
    )

    parser.add_argument(
        "--port",
        type=int,
        help="OpenSprinkler HTTP port (overrides the config file)"
    )

    parser.add_argument(
        "--password",
        type=str,
        help="OpenSprinkler admin password (overrides the config file)"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Maximum seconds to wait for all probes to finish (default: no limit)"
    )

    parser.add_argument(
        "--create-config",
        action="store_true",
        help="Write the default discovery_config.yml to --config-dir and exit"
    )

    parser.add_argument(
        "--no-report",
        action="store_true",
        help="Do not write a JSON report"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Sprinkler Discovery {__version__}"
    )

    return parser


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for the Sprinkler Discovery Module.

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        set_log_level(LogLevel.DEBUG)

    app = SprinklerDiscoveryApp()
    return app.run(args)


if __name__ == "__main__":
    sys.exit(main())
