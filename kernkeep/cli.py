"""
Command-line interface for kernkeep.

Provides argument parsing and orchestrates the kernel retention workflow.
"""

import sys
import argparse
from typing import Optional, List

from . import __version__
from .detector import get_running_kernel, get_installed_kernel_packages
from .analyzer import plan_retention, DEFAULT_ALWAYS_KEEP, DEFAULT_KEEP_COUNT, RetentionPlan
from .remover import (
    check_root,
    find_discrepancies,
    generate_purge_command,
    purge_packages,
    simulate_purge,
    PurgeError,
    RemovalStatus,
)
from .reporter import Reporter, OutputLevel, NO_REMOVAL_MESSAGE


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid count: '{value}'")
    if number < 0:
        raise argparse.ArgumentTypeError(f"count must not be negative: {number}")
    return number


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser.

    Returns:
        argparse.ArgumentParser: Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="kernkeep",
        description=(
            "Purge old kernel images and headers, keeping the running kernel, "
            "an always-keep list and the newest distinct kernel versions"
        ),
        epilog="Example: kernkeep --dry-run  # Simulate the purge with apt-get",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Simulate the purge with apt-get --simulate and check for discrepancies",
    )

    parser.add_argument(
        "--remove",
        action="store_true",
        help="Purge old kernels and headers (requires sudo)",
    )

    parser.add_argument(
        "--keep",
        type=_non_negative_int,
        default=DEFAULT_KEEP_COUNT,
        metavar="N",
        help=f"Number of newest distinct kernel versions to keep (default: {DEFAULT_KEEP_COUNT})",
    )

    parser.add_argument(
        "--always-keep",
        action="append",
        metavar="PKG",
        help=(
            "Never remove packages whose name contains PKG; may be repeated "
            f"(default: {' '.join(DEFAULT_ALWAYS_KEEP)})"
        ),
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Trace every retention decision",
    )

    parser.add_argument(
        "--yes",
        action="store_true",
        help="Assume yes to all prompts (use with --remove)",
    )

    return parser


def _setup_reporter(args) -> Reporter:
    """
    Set up reporter based on command-line arguments.

    Args:
        args: Parsed command-line arguments

    Returns:
        Reporter: Configured reporter instance
    """
    if args.quiet:
        output_level = OutputLevel.QUIET
    elif args.debug:
        output_level = OutputLevel.DEBUG
    elif args.verbose:
        output_level = OutputLevel.VERBOSE
    else:
        output_level = OutputLevel.NORMAL

    return Reporter(output_level)


def _detect_and_plan(args, reporter: Reporter) -> RetentionPlan:
    """
    Detect the running kernel and installed packages, then plan retention.

    Args:
        args: Parsed command-line arguments
        reporter: Reporter instance for output

    Returns:
        RetentionPlan: Keep and remove decisions
    """
    reporter.verbose("Detecting running kernel...")
    running_kernel = get_running_kernel()

    reporter.verbose("Scanning installed kernel packages...")
    packages = get_installed_kernel_packages()
    reporter.verbose(f"Found {len(packages)} kernel package(s)")

    reporter.print_inventory(running_kernel, packages)

    always_keep = args.always_keep if args.always_keep is not None else DEFAULT_ALWAYS_KEEP
    reporter.debug(f"Always keep: {' '.join(always_keep)}")

    return plan_retention(
        packages,
        running_kernel,
        always_keep=always_keep,
        keep_count=args.keep,
        debug=reporter.debug,
    )


def _handle_dry_run(reporter: Reporter, plan: RetentionPlan) -> int:
    """
    Simulate the purge and warn about kept packages apt would remove.

    Args:
        reporter: Reporter instance for output
        plan: Retention plan

    Returns:
        int: Exit code
    """
    reporter.info("This is a DRY RUN (--simulate). No actual changes will be made.")
    reporter.info()
    reporter.print_removal_list(plan.to_remove, dry_run=True)
    reporter.print_command(generate_purge_command(plan.to_remove, simulate=True), dry_run=True)

    result = simulate_purge(plan.to_remove)
    reporter.print_simulation(result)

    discrepancies = find_discrepancies(result.output, plan.kept_packages)
    reporter.debug(f"Discrepancies found: {len(discrepancies)}")
    reporter.print_discrepancies(discrepancies)

    return 0


def _handle_removal(args, reporter: Reporter, plan: RetentionPlan) -> int:
    """
    Handle the removal workflow including confirmation and execution.

    Args:
        args: Parsed command-line arguments
        reporter: Reporter instance for output
        plan: Retention plan

    Returns:
        int: Exit code
    """
    # Verify root privileges before asking anything
    if not check_root():
        print("\nError: Root privileges required for package removal.", file=sys.stderr)
        print("Please run with sudo:", file=sys.stderr)
        print("  sudo kernkeep --remove", file=sys.stderr)
        return -1

    reporter.print_removal_list(plan.to_remove)

    if not args.yes:
        try:
            response = input("Do you want to proceed with purging the listed kernels? (y/N) ").strip().lower()
        except EOFError:
            # Closed stdin answers no
            print()
            response = ""
        if response not in ('y', 'yes'):
            reporter.info("Aborted specific kernel purge by user.")
            reporter.info("Script finished. No actions were performed.")
            return 0

    reporter.info("Purging old kernels...")
    reporter.print_command(generate_purge_command(plan.to_remove, assume_yes=args.yes))

    try:
        results = purge_packages(plan.to_remove, assume_yes=args.yes)
    except PermissionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return -1
    except PurgeError as e:
        reporter.error(f"'apt-get purge' failed with exit code {e.exit_code}.")
        reporter.info("Script finished. No actions were performed.")
        return -2

    for pkg, status in results:
        reporter.print_removal_progress(pkg, status)

    success_count = sum(1 for _, status in results if status == RemovalStatus.SUCCESS)
    reporter.print_summary(success_count, len(results) - success_count)
    reporter.info("Kernel cleanup complete.")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        int: Exit code:
            0 = success (purge done, dry run done, listed or aborted)
            1 = nothing to remove, or an error occurred
            -1 = insufficient privileges (not root)
            -2 = apt-get purge failed
    """
    parser = create_parser()

    # If no arguments provided, show help
    if argv is None:
        argv = sys.argv[1:]

    if not argv:
        parser.print_help()
        return 0

    args = parser.parse_args(argv)

    # Validate argument combinations
    if args.quiet and (args.verbose or args.debug):
        parser.error("--quiet cannot be used with --verbose or --debug")

    if args.yes and not args.remove:
        parser.error("--yes can only be used with --remove")

    if args.dry_run and args.remove:
        parser.error("--dry-run and --remove cannot be used together")

    reporter = _setup_reporter(args)

    try:
        reporter.info("KernKeep v{}".format(__version__))
        reporter.info()

        plan = _detect_and_plan(args, reporter)
        reporter.print_decisions(plan)

        if plan.is_empty:
            reporter.info(NO_REMOVAL_MESSAGE)
            return 1  # Nothing to do

        if args.dry_run:
            return _handle_dry_run(reporter, plan)

        if not args.remove:
            reporter.print_removal_list(plan.to_remove)
            reporter.info("Run with --dry-run to simulate the purge")
            reporter.info("Run with --remove to purge the listed packages (requires sudo)")
            return 0  # List mode - showed what can be done

        return _handle_removal(args, reporter, plan)

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.debug:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
