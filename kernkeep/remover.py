"""
Package removal module.

Provides functionality to simulate and perform kernel package purges using apt-get.
"""

import os
import re
import subprocess
from typing import List, NamedTuple, Sequence, Tuple
from enum import Enum

from .utils import run_command


class RemovalStatus(Enum):
    """Status of a package removal operation."""
    SUCCESS = "success"
    FAILED = "failed"


class SimulationResult(NamedTuple):
    """Exit code and combined output of a simulated purge."""
    exit_code: int
    output: str


class PurgeError(RuntimeError):
    """apt-get purge exited with a non-zero status."""

    def __init__(self, exit_code: int):
        super().__init__(f"apt-get purge failed with exit code {exit_code}")
        self.exit_code = exit_code


def check_root() -> bool:
    """
    Check if the current process has root privileges.

    Returns:
        bool: True if running with sudo/root, False otherwise
    """
    try:
        # On Unix systems, root has UID 0
        return os.geteuid() == 0
    except AttributeError:
        # os.geteuid() not available on Windows
        return False


def generate_purge_command(packages: Sequence[str], simulate: bool = False, assume_yes: bool = False) -> List[str]:
    """
    Generate the apt-get command to purge packages.

    Args:
        packages: List of package names to purge
        simulate: If True, add --simulate so apt only reports what it would do
        assume_yes: If True, add -y to skip apt's own confirmation prompt

    Returns:
        List[str]: Command as list of arguments
    """
    if not packages:
        raise ValueError("No packages provided for removal")

    cmd = ["apt-get", "purge"]
    if simulate:
        cmd.append("--simulate")
    if assume_yes:
        cmd.append("-y")

    cmd.extend(packages)

    return cmd


def simulate_purge(packages: Sequence[str]) -> SimulationResult:
    """
    Run apt-get purge in simulation mode.

    A non-zero exit code is reported in the result rather than raised.

    Args:
        packages: List of package names to purge

    Returns:
        SimulationResult: apt-get exit code and combined stdout/stderr

    Raises:
        RuntimeError: If apt-get cannot be executed
    """
    cmd = generate_purge_command(packages, simulate=True)
    try:
        exit_code, output, _ = run_command(cmd, check=False, merge_stderr=True)
    except (OSError, subprocess.SubprocessError) as e:
        raise RuntimeError(f"Failed to execute apt-get: {e}")

    return SimulationResult(exit_code, output)


def find_discrepancies(simulation_output: str, kept_packages: Sequence[str]) -> List[str]:
    """
    Find kept packages that apt would purge anyway.

    apt-get reports each simulated purge as a line like
    'Purg linux-image-6.1.0-13-amd64 [6.1.55-1]'.

    Args:
        simulation_output: Output of a simulated purge
        kept_packages: Packages the retention plan keeps

    Returns:
        List[str]: Kept packages that appear as purged, in kept order
    """
    discrepancies = []
    for package in kept_packages:
        pattern = re.compile(rf"Purg\s+{re.escape(package)}(?!\S)")
        if pattern.search(simulation_output):
            discrepancies.append(package)

    return discrepancies


def _execute_purge(cmd: List[str], packages: Sequence[str]) -> List[Tuple[str, RemovalStatus]]:
    """
    Execute apt-get purge and return results.

    Args:
        cmd: apt-get command to execute
        packages: List of package names being purged

    Returns:
        List[Tuple[str, RemovalStatus]]: List of (package, status) tuples

    Raises:
        PurgeError: If apt-get exits with a non-zero status
        RuntimeError: If apt-get cannot be executed
    """
    try:
        # Output and apt's prompt stay attached to the terminal
        result = subprocess.run(cmd, check=False)
    except (OSError, subprocess.SubprocessError) as e:
        raise RuntimeError(f"Failed to execute apt-get: {e}")

    if result.returncode != 0:
        raise PurgeError(result.returncode)

    return [(pkg, RemovalStatus.SUCCESS) for pkg in packages]


def purge_packages(packages: Sequence[str], assume_yes: bool = False) -> List[Tuple[str, RemovalStatus]]:
    """
    Purge packages using apt-get.

    Args:
        packages: List of package names to purge
        assume_yes: Pass -y so apt-get does not ask again

    Returns:
        List[Tuple[str, RemovalStatus]]: List of (package, status) tuples

    Raises:
        PermissionError: If not running with sufficient privileges
        PurgeError: If apt-get exits with a non-zero status
        RuntimeError: If apt-get cannot be executed
    """
    if not packages:
        return []

    if not check_root():
        raise PermissionError(
            "Root privileges required. Please run with sudo."
        )

    cmd = generate_purge_command(packages, assume_yes=assume_yes)
    return _execute_purge(cmd, packages)
