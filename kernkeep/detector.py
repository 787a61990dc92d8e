"""
Kernel package detection module.

Provides functionality to detect the currently running kernel and
discover all installed kernel image and header packages on the system.
"""

import re
import subprocess
from typing import List

from .utils import run_command


# Matches both image and header packages, including meta-packages
# such as linux-image-amd64
KERNEL_PACKAGE_PATTERN = re.compile(r'linux-(image|headers)')

_DIGITS = re.compile(r'(\d+)')


def get_running_kernel() -> str:
    """
    Detect the currently running kernel release.

    Returns:
        str: Running kernel release string (e.g., '6.1.0-13-amd64')

    Raises:
        RuntimeError: If unable to detect the running kernel
    """
    try:
        _, stdout, _ = run_command(["uname", "-r"])
    except (subprocess.CalledProcessError, OSError) as e:
        raise RuntimeError(f"Failed to detect running kernel: {e}")

    kernel_version = stdout.strip()

    # An empty release would be a substring of every package name
    if not kernel_version:
        raise RuntimeError("uname returned empty kernel version")

    return kernel_version


def parse_package_listing(output: str) -> List[str]:
    """
    Extract kernel package names from `dpkg --list` output.

    The package name is the second column of each row. Rows in any
    dpkg state are accepted, so removed-but-not-purged (rc) packages
    are reported as well.

    Args:
        output: Raw dpkg --list output

    Returns:
        List[str]: Kernel image and header package names, in listing order
    """
    packages = []

    for line in output.splitlines():
        fields = line.split()
        if len(fields) < 2:
            continue

        package_name = fields[1].split(",", 1)[0].strip()
        if package_name and KERNEL_PACKAGE_PATTERN.search(package_name):
            packages.append(package_name)

    return packages


def version_sort_key(name: str) -> list:
    """
    Natural sort key, comparing digit runs numerically.

    'linux-image-6.1.0-13-amd64' sorts after 'linux-image-6.1.0-9-amd64',
    matching what `sort -V` does for package names.
    """
    parts = _DIGITS.split(name)
    # re.split with a capture group keeps text at even and digits at odd indexes,
    # so keys of different names never compare an int against a str
    return [int(part) if i % 2 else part for i, part in enumerate(parts)]


def get_installed_kernel_packages() -> List[str]:
    """
    Get all installed kernel image and header packages.

    Returns:
        List[str]: Unique package names sorted from newest to oldest

    Raises:
        RuntimeError: If unable to query installed packages
    """
    try:
        _, stdout, _ = run_command(["dpkg", "--list"])
    except (subprocess.CalledProcessError, OSError) as e:
        raise RuntimeError(f"Failed to query installed kernel packages: {e}")

    packages = set(parse_package_listing(stdout))

    return sorted(packages, key=version_sort_key, reverse=True)
