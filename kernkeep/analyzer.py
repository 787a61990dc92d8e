"""
Kernel retention analysis module.

Decides which kernel packages are kept and which are purged: the running
kernel, an always-keep list and the newest N distinct kernel versions
survive, everything else is marked for removal.
"""

import re
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple
from dataclasses import dataclass, field


DEFAULT_KEEP_COUNT = 2

DEFAULT_ALWAYS_KEEP = ("linux-image-amd64", "linux-headers-amd64")

# Order matters: only the first matching suffix is stripped
ARCH_SUFFIXES = (
    "-amd64",
    "-common",
    "-generic",
    "-pae",
    "-rt",
    "-cloud",
    "-arm64",
    "-raspi",
)

PACKAGE_PREFIXES = ("linux-image-", "linux-headers-")

# major.minor.patch, an optional +tag and an optional ABI number such as -18 or -rpi7
KERNEL_ABI_PATTERN = re.compile(r'(?:^|-)(\d+\.\d+\.\d+(?:\+\w+)?(?:-[a-z]*\d+)?)')


class KeepReason(Enum):
    """Why a package is retained."""
    RUNNING = "running kernel"
    ALWAYS_KEEP = "user specified"
    LATEST = "latest distinct version"
    META = "meta-package"


@dataclass
class KeepDecision:
    """A package marked for keeping and the rule that kept it."""
    package: str
    reason: KeepReason


@dataclass
class RetentionPlan:
    """
    Result of the retention analysis.

    Attributes:
        running_kernel: Release of the currently running kernel
        packages: All kernel packages considered, newest to oldest
        kept: Keep decisions in the order they were made
        kept_versions: Distinct kernel ABIs retained as latest, newest first
        to_remove: Packages to purge, sorted by name
    """
    running_kernel: str
    packages: List[str]
    kept: List[KeepDecision] = field(default_factory=list)
    kept_versions: List[str] = field(default_factory=list)
    to_remove: List[str] = field(default_factory=list)

    @property
    def kept_packages(self) -> List[str]:
        return [decision.package for decision in self.kept]

    @property
    def is_empty(self) -> bool:
        return not self.to_remove


def extract_version(package: str) -> str:
    """
    Extract the kernel version from a package name.

    Strips the image/headers prefix and then the first architecture
    suffix the name ends with.
    Examples:
        'linux-image-6.1.0-13-amd64' -> '6.1.0-13'
        'linux-headers-6.1.0-13-common' -> '6.1.0-13'
        'linux-image-5.15.0-82-generic' -> '5.15.0-82'
        'linux-image-amd64' -> 'amd64'

    Args:
        package: Package name

    Returns:
        str: Version string, or '' if the name is not a kernel package
    """
    for prefix in PACKAGE_PREFIXES:
        if package.startswith(prefix):
            remainder = package[len(prefix):]
            break
    else:
        return ""

    for suffix in ARCH_SUFFIXES:
        if remainder.endswith(suffix):
            remainder = remainder[:-len(suffix)]
            break

    return remainder


def kernel_abi(package: str) -> str:
    """
    Extract the kernel ABI shared by all flavors of one kernel build.

    Flavor words around the numeric part are ignored, so a kernel's
    -common headers group with every flavor built from it.
    Examples:
        'linux-image-6.1.0-18-cloud-amd64' -> '6.1.0-18'
        'linux-headers-6.1.0-18-common' -> '6.1.0-18'
        'linux-image-unsigned-6.8.0-31-generic' -> '6.8.0-31'
        'linux-image-6.12.48+deb13-amd64' -> '6.12.48+deb13'
        'linux-image-generic-hwe-22.04' -> ''

    Args:
        package: Package name

    Returns:
        str: ABI string, or '' for meta-packages and non-kernel names
    """
    match = KERNEL_ABI_PATTERN.search(extract_version(package))
    return match.group(1) if match else ""


def is_versioned(package: str) -> bool:
    """
    Check whether a package belongs to a specific kernel version.

    Meta-packages such as linux-image-amd64 or linux-headers-generic
    track the newest kernel and carry no version number.
    """
    return bool(kernel_abi(package))


def plan_retention(
    packages: Sequence[str],
    running_kernel: str,
    always_keep: Iterable[str] = DEFAULT_ALWAYS_KEEP,
    keep_count: int = DEFAULT_KEEP_COUNT,
    debug: Optional[Callable[[str], None]] = None,
) -> RetentionPlan:
    """
    Classify kernel packages into keep and remove sets.

    Args:
        packages: Installed kernel packages, sorted newest to oldest
        running_kernel: Running kernel release (uname -r)
        always_keep: Name fragments of packages that are never removed
        keep_count: Number of newest distinct versions to retain
        debug: Optional callback receiving trace messages

    Returns:
        RetentionPlan: Keep decisions and the packages to remove

    Raises:
        ValueError: If keep_count is negative or the plan fails validation
    """
    if keep_count < 0:
        raise ValueError(f"keep_count must not be negative, got {keep_count}")

    trace = debug or (lambda message: None)
    plan = RetentionPlan(running_kernel=running_kernel, packages=list(packages))
    reasons: Dict[str, KeepReason] = {}

    def keep(package: str, reason: KeepReason) -> None:
        trace(f"keep() called for pkg: '{package}', reason: '{reason.value}'")
        if package in reasons:
            trace(f"'{package}' already kept. Skipping add.")
            return
        reasons[package] = reason
        plan.kept.append(KeepDecision(package, reason))

    running_abi = kernel_abi(f"linux-image-{running_kernel}") if running_kernel else ""
    trace(f"Running kernel ABI: '{running_abi}'")

    trace("--- Step 1: Running Kernel ---")
    if running_kernel:
        for package in plan.packages:
            # -common and arch-independent header packages never contain
            # the full uname release, so match them by ABI too
            if running_kernel in package or (running_abi and kernel_abi(package) == running_abi):
                keep(package, KeepReason.RUNNING)

    trace("--- Step 2: User Specified Kernels ---")
    for fragment in always_keep:
        if not fragment:
            continue
        for package in plan.packages:
            if fragment in package:
                keep(package, KeepReason.ALWAYS_KEEP)

    trace("--- Step 3: Latest Distinct Versions ---")
    trace(f"keep_count = {keep_count}")
    for package in plan.packages:
        # The running kernel still counts towards the newest versions,
        # packages kept by the always-keep list do not
        if reasons.get(package) in (KeepReason.ALWAYS_KEEP, KeepReason.META):
            trace(f"'{package}' already kept. Not counted as a latest version.")
            continue

        if not extract_version(package):
            trace(f"'{package}' has no extractable version. Skipping.")
            continue
        version = kernel_abi(package)
        if not version:
            trace(f"'{package}' is a meta-package. Not counted as a latest version.")
            keep(package, KeepReason.META)
            continue
        trace(f"Extracted version for '{package}': '{version}'")

        if version in plan.kept_versions or len(plan.kept_versions) >= keep_count:
            trace(f"Version '{version}' not selected.")
            continue

        plan.kept_versions.append(version)
        trace(f"Selected version '{version}' ({len(plan.kept_versions)}/{keep_count})")

        for other in plan.packages:
            if kernel_abi(other) == version:
                keep(other, KeepReason.LATEST)

    plan.to_remove = sorted(pkg for pkg in plan.packages if pkg and pkg not in reasons)
    trace(f"Number of packages to remove: {len(plan.to_remove)}")

    is_safe, error_msg = validate_plan(plan)
    if not is_safe:
        raise ValueError(error_msg)

    return plan


def validate_plan(plan: RetentionPlan) -> Tuple[bool, str]:
    """
    Validate that the proposed removal is safe.

    Performs safety checks to ensure:
    - No package of the running kernel is being removed
    - No package is both kept and removed
    - At least one versioned kernel image remains installed

    Args:
        plan: Retention plan to check

    Returns:
        Tuple[bool, str]: (is_safe, error_message)
            is_safe: True if removal is safe
            error_message: Description of safety violation (empty if safe)
    """
    if plan.running_kernel:
        for package in plan.to_remove:
            if plan.running_kernel in package:
                return False, (
                    f"Safety check failed: Running kernel {plan.running_kernel} "
                    f"package {package} is marked for removal"
                )

    overlap = set(plan.kept_packages) & set(plan.to_remove)
    if overlap:
        return False, (
            "Safety check failed: Packages both kept and removed: "
            + ", ".join(sorted(overlap))
        )

    images = [
        pkg for pkg in plan.packages
        if pkg.startswith("linux-image-") and is_versioned(pkg)
    ]
    if images and all(pkg in plan.to_remove for pkg in images):
        return False, "Safety check failed: No kernel images would remain after removal"

    return True, ""
