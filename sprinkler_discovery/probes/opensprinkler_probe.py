"""
OpenSprinkler probe.

An OpenSprinkler controller serves a small HTTP API. Its option endpoint
``/jo`` answers a request authenticated with the MD5 hex digest of the admin
password with a JSON object that always carries the firmware version under
``fwv``. That object is the device signature.
"""

import hashlib
import socket
from typing import Any, Dict, Optional

import requests

from .base_probe import BaseProbe
from ..utils.error_handler import ProbeFailure
from ..utils.logger import Logger

OPTIONS_ENDPOINT = "/jo"


def hash_password(password: str) -> str:
    return hashlib.md5(password.encode("utf-8")).hexdigest()


class OpenSprinklerProbe(BaseProbe):
    """
    Detects OpenSprinkler controllers over HTTP.

    The probe first checks that the API port accepts a TCP connection within
    ``connect_timeout`` so the many silent addresses of a subnet fail fast,
    then performs the authenticated options request.
    """

    def __init__(
        self,
        port: int = 80,
        password: str = "opendoor",
        connect_timeout: float = 0.5,
        http_timeout: float = 5.0,
        logger: Optional[Logger] = None,
    ):
        """
        Initialize the probe.

        Args:
            port: HTTP API port
            password: Admin password (plain text, hashed before sending)
            connect_timeout: Seconds allowed for the TCP reachability check
            http_timeout: Seconds allowed for the HTTP request
            logger: Logger instance for debug traces
        """
        super().__init__(logger)
        self.port = port
        self.password_hash = hash_password(password)
        self.connect_timeout = connect_timeout
        self.http_timeout = http_timeout

    def probe(self, address: str) -> bool:
        self._check_reachable(address)
        options = self._fetch_options(address)

        firmware = options.get("fwv")
        if isinstance(firmware, bool) or not isinstance(firmware, int):
            raise ProbeFailure(
                f"{address}:{self.port} answered without a firmware version",
                address=address,
            )

        self._log_debug(f"OpenSprinkler firmware {firmware} at {address}:{self.port}")
        return True

    def _check_reachable(self, address: str) -> None:
        try:
            with socket.create_connection(
                (address, self.port), timeout=self.connect_timeout
            ):
                pass
        except OSError as e:
            raise ProbeFailure(f"{address}:{self.port} unreachable: {e}", address=address)

    def _fetch_options(self, address: str) -> Dict[str, Any]:
        url = f"http://{address}:{self.port}{OPTIONS_ENDPOINT}"
        try:
            response = requests.get(
                url,
                params={"pw": self.password_hash},
                timeout=self.http_timeout,
            )
        except requests.exceptions.Timeout:
            raise ProbeFailure(f"Request timeout to {url}", address=address)
        except requests.exceptions.RequestException as e:
            raise ProbeFailure(f"Request to {url} failed: {e}", address=address)

        if response.status_code != 200:
            raise ProbeFailure(
                f"{url} answered HTTP {response.status_code}", address=address
            )

        try:
            data = response.json()
        except ValueError:
            raise ProbeFailure(f"{url} did not answer with JSON", address=address)

        if not isinstance(data, dict):
            raise ProbeFailure(f"{url} answered with unexpected JSON", address=address)
        return data
