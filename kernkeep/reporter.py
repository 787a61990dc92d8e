"""
Output reporting module.

Provides console output for the retention decision, dry-run simulation
and purge progress.
"""

import sys
from typing import List, Sequence
from enum import Enum

from .analyzer import RetentionPlan
from .remover import RemovalStatus, SimulationResult


NO_REMOVAL_MESSAGE = "No specific old kernel packages found by the script's logic to remove."


class OutputLevel(Enum):
    """Output verbosity levels."""
    QUIET = 0
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3


def format_warning_box(package: str) -> List[str]:
    """
    Build a warning box for a kept package that apt would purge.

    Args:
        package: Package name the plan keeps

    Returns:
        List[str]: Box lines, border included
    """
    lines = [
        f"WARNING: APT Simulation suggests purging '{package}' !",
        "The script intended to KEEP this package.",
        "This might be due to APT's dependency resolution or",
        "if it deems the package no longer 'needed' after other",
        "removals. For critical packages, consider running:",
        "",
        f"  sudo apt-mark hold {package}",
        "",
        "before running the script without --dry-run.",
    ]
    width = max(len(line) for line in lines)
    border = "!" * (width + 6)

    box = [border]
    box.extend(f"!! {line.ljust(width)} !!" for line in lines)
    box.append(border)
    return box


class Reporter:
    """
    Handles formatted output for kernkeep operations.

    Normal output goes to stdout and is gated by the output level;
    warnings and errors always go to stderr.
    """

    def __init__(self, level: OutputLevel = OutputLevel.NORMAL):
        """
        Initialize the reporter.

        Args:
            level: Output verbosity level
        """
        self.level = level

    @property
    def quiet(self) -> bool:
        return self.level == OutputLevel.QUIET

    def info(self, message: str = "") -> None:
        """Print a normal-level message."""
        if not self.quiet:
            print(message)

    def verbose(self, message: str) -> None:
        """Print a message shown only in verbose or debug mode."""
        if self.level.value >= OutputLevel.VERBOSE.value:
            print(message)

    def debug(self, message: str) -> None:
        """Print a debug trace line."""
        if self.level == OutputLevel.DEBUG:
            print(f"DEBUG: {message}")

    def warning(self, message: str) -> None:
        print(f"WARNING: {message}", file=sys.stderr)

    def error(self, message: str) -> None:
        print(f"ERROR: {message}", file=sys.stderr)

    def print_packages(self, packages: Sequence[str]) -> None:
        if self.quiet:
            return
        for package in packages:
            print(package)

    def print_inventory(self, running_kernel: str, packages: Sequence[str]) -> None:
        """
        Print the running kernel and every kernel package found.

        Args:
            running_kernel: Running kernel release
            packages: Installed kernel packages, newest to oldest
        """
        if self.quiet:
            return

        print(f"Current running kernel: {running_kernel}")
        print()
        print("All installed specific kernel packages (sorted newest to oldest):")
        self.print_packages(packages)
        print()

    def print_decisions(self, plan: RetentionPlan) -> None:
        """
        Print which packages are kept and why.

        Args:
            plan: Retention plan to display
        """
        if self.quiet:
            return

        print("--- Deciding which kernels to keep ---")
        for decision in plan.kept:
            print(f"Keeping ({decision.reason.value}): {decision.package}")

        if plan.kept_versions:
            self.verbose(f"Latest distinct versions kept: {', '.join(plan.kept_versions)}")

        if self.level == OutputLevel.DEBUG:
            self.debug(f"Number of packages to remove: {len(plan.to_remove)}")
            for package in plan.to_remove:
                self.debug(f"- {package}")
        print()

    def print_removal_list(self, packages: Sequence[str], dry_run: bool = False) -> None:
        """
        Print the packages selected for purging.

        Args:
            packages: Packages to purge
            dry_run: Whether this is a simulation
        """
        if self.quiet:
            return

        if dry_run:
            print("Simulating removal of specific kernels:")
        else:
            print("Kernels and headers to be removed (by script's logic):")
        self.print_packages(packages)
        print()

    def print_command(self, command: List[str], dry_run: bool = False) -> None:
        """
        Print the command that will be executed.

        Args:
            command: Command as list of arguments
            dry_run: Whether this is a dry run
        """
        if self.quiet:
            return

        cmd_str = " ".join(command)
        if dry_run:
            print(f"Simulating: {cmd_str}")
        else:
            print(f"Executing: {cmd_str}")

    def print_simulation(self, result: SimulationResult) -> None:
        """
        Print the output of a simulated purge.

        A non-zero exit code is reported on stderr even in quiet mode.

        Args:
            result: Simulation exit code and output
        """
        if not self.quiet:
            print(result.output.rstrip("\n"))
            print("Simulating initial cleanup complete. Checking for discrepancies...")

        if result.exit_code != 0:
            self.warning(f"'apt-get purge --simulate' returned a non-zero exit code: {result.exit_code}")
            print(f"Output: {result.output}", file=sys.stderr)
            print("Discrepancy check might be incomplete due to simulation error.", file=sys.stderr)

    def print_discrepancies(self, packages: Sequence[str]) -> None:
        """
        Print a warning box for every kept package apt would purge.

        Discrepancies are printed regardless of output level, since they
        point at packages the user may lose.

        Args:
            packages: Kept packages found in the simulated purge
        """
        for package in packages:
            print()
            for line in format_warning_box(package):
                print(line)
            print()

        if packages:
            print("IMPORTANT: Review the 'apt-mark hold' suggestion above for critical packages.")
            print("To view all currently held packages: apt-mark showhold")
            print("To unhold a package: sudo apt-mark unhold <package_name>")
            print()

    def print_removal_progress(self, package: str, status: RemovalStatus) -> None:
        """
        Print removal progress for a single package.

        Args:
            package: Package being removed
            status: Current status
        """
        if self.quiet:
            return

        if status == RemovalStatus.SUCCESS:
            print(f"Purged {package}")
        elif status == RemovalStatus.FAILED:
            print(f"Failed to purge {package}")

    def print_summary(self, removed: int, failed: int) -> None:
        """
        Print final summary statistics.

        Args:
            removed: Number of packages successfully purged
            failed: Number of packages that failed to purge
        """
        if self.quiet:
            return

        print()
        if removed > 0:
            print(f"Successfully purged {removed} package(s).")

        if failed > 0:
            print(f"Failed to purge {failed} package(s).")
