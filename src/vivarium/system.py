"""OS-level port probe for Vivarium."""

import enum
import re
import subprocess
import sys

from .console import debug


class PortStatus(enum.Enum):
    """Outcome of probing a TCP port for a listener."""

    IN_USE = "in_use"
    FREE = "free"
    INCONCLUSIVE = "inconclusive"


class PortProbe:
    """Check the local socket table for TCP listeners.

    Probing never raises. When every tool for the platform is missing or
    fails, the result is INCONCLUSIVE and ``is_port_in_use`` treats it as
    free (fail-open). Only POSIX platforms are supported.
    """

    def __init__(self, platform: str | None = None, timeout: float = 5) -> None:
        self.platform = platform or sys.platform
        self.timeout = timeout

    def is_port_in_use(self, port: int) -> bool:
        """Return True only when a listener was positively detected."""
        return self.probe(port) is PortStatus.IN_USE

    def probe(self, port: int) -> PortStatus:
        """Probe a single port using the platform-appropriate tool.

        Args:
            port: Port number to check

        Returns:
            PortStatus for the port
        """
        if self.platform == "darwin":
            probes = [self._probe_lsof]
        else:
            # Fastest first, netstat as the last resort
            probes = [self._probe_ss, self._probe_lsof, self._probe_netstat]

        status = PortStatus.INCONCLUSIVE
        for probe in probes:
            status = probe(port)
            if status is not PortStatus.INCONCLUSIVE:
                break

        if status is PortStatus.INCONCLUSIVE:
            debug(f"Could not determine whether port {port} is in use")
        return status

    def _run(self, args: list[str]) -> subprocess.CompletedProcess[str] | None:
        try:
            return subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (subprocess.SubprocessError, OSError):
            return None

    def _probe_ss(self, port: int) -> PortStatus:
        """Probe using ss (Linux)."""
        # TCP, listening, numeric, no header, filtered on source port
        result = self._run(["ss", "-tlnH", "sport", "=", f":{port}"])
        if result is None or result.returncode != 0:
            return PortStatus.INCONCLUSIVE
        return PortStatus.IN_USE if result.stdout.strip() else PortStatus.FREE

    def _probe_lsof(self, port: int) -> PortStatus:
        """Probe using lsof (macOS/Linux)."""
        result = self._run(["lsof", f"-iTCP:{port}", "-sTCP:LISTEN", "-P", "-n"])
        if result is None:
            return PortStatus.INCONCLUSIVE
        if result.returncode == 0 and result.stdout.strip():
            return PortStatus.IN_USE
        # lsof exits 1 with no output when nothing matches
        if result.returncode == 1 and not result.stdout.strip():
            return PortStatus.FREE
        return PortStatus.INCONCLUSIVE

    def _probe_netstat(self, port: int) -> PortStatus:
        """Probe using netstat (universal, slowest)."""
        result = self._run(["netstat", "-tln"])
        if result is None or result.returncode != 0:
            return PortStatus.INCONCLUSIVE
        pattern = re.compile(rf":{port}\s")
        for line in result.stdout.splitlines():
            if "LISTEN" in line and pattern.search(line):
                return PortStatus.IN_USE
        return PortStatus.FREE


def is_port_in_use(port: int) -> bool:
    """Check whether a TCP port has a listener, failing open."""
    return PortProbe().is_port_in_use(port)
