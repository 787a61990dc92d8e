"""
Unit tests for the reporter module.

Tests output formatting and different verbosity levels.
"""

import unittest
from io import StringIO
from unittest.mock import patch

from kernkeep.reporter import Reporter, OutputLevel, format_warning_box
from kernkeep.remover import RemovalStatus, SimulationResult
from kernkeep.analyzer import KeepDecision, KeepReason, RetentionPlan


class TestFormatWarningBox(unittest.TestCase):
    """Test the discrepancy warning box."""

    def test_box_lines_aligned(self):
        """Test every line of the box has the same width."""
        box = format_warning_box("linux-image-6.1.0-18-amd64")

        widths = {len(line) for line in box}
        self.assertEqual(len(widths), 1)
        self.assertEqual(len(box), 11)

    def test_box_border(self):
        box = format_warning_box("linux-image-amd64")

        self.assertEqual(set(box[0]), {"!"})
        self.assertEqual(box[0], box[-1])
        for line in box[1:-1]:
            self.assertTrue(line.startswith("!! "))
            self.assertTrue(line.endswith(" !!"))

    def test_box_content(self):
        package = "linux-headers-6.1.0-18-common"
        box = format_warning_box(package)

        self.assertIn(f"WARNING: APT Simulation suggests purging '{package}' !", box[1])
        self.assertIn(f"  sudo apt-mark hold {package}", box[7])
        self.assertIn("before running the script without --dry-run.", box[9])

    def test_box_grows_with_long_names(self):
        short = format_warning_box("a")
        long_name = "linux-image-6.1.0-18-amd64-" + "x" * 40
        long = format_warning_box(long_name)

        # Fixed text sets the minimum width
        self.assertEqual(len(short[0]), len("if it deems the package no longer 'needed' after other") + 6)
        self.assertGreater(len(long[0]), len(short[0]))
        self.assertIn(long_name, long[1])


class TestReporterOutput(unittest.TestCase):
    """Test Reporter output formatting."""

    def setUp(self):
        """Set up test fixtures."""
        self.plan = RetentionPlan(
            running_kernel="6.1.0-18-amd64",
            packages=[
                "linux-image-6.1.0-18-amd64",
                "linux-image-6.1.0-17-amd64",
                "linux-image-6.1.0-13-amd64",
            ],
            kept=[
                KeepDecision("linux-image-6.1.0-18-amd64", KeepReason.RUNNING),
                KeepDecision("linux-image-6.1.0-17-amd64", KeepReason.LATEST),
            ],
            kept_versions=["6.1.0-18", "6.1.0-17"],
            to_remove=["linux-image-6.1.0-13-amd64"],
        )

    def test_inventory_normal_level(self):
        reporter = Reporter(OutputLevel.NORMAL)

        with patch('sys.stdout', new=StringIO()) as fake_out:
            reporter.print_inventory(self.plan.running_kernel, self.plan.packages)
            output = fake_out.getvalue()

        self.assertIn("Current running kernel: 6.1.0-18-amd64", output)
        self.assertIn("sorted newest to oldest", output)
        self.assertLess(
            output.index("linux-image-6.1.0-17-amd64"),
            output.index("linux-image-6.1.0-13-amd64"),
        )

    def test_decisions_normal_level(self):
        reporter = Reporter(OutputLevel.NORMAL)

        with patch('sys.stdout', new=StringIO()) as fake_out:
            reporter.print_decisions(self.plan)
            output = fake_out.getvalue()

        self.assertIn("--- Deciding which kernels to keep ---", output)
        self.assertIn("Keeping (running kernel): linux-image-6.1.0-18-amd64", output)
        self.assertIn("Keeping (latest distinct version): linux-image-6.1.0-17-amd64", output)
        self.assertNotIn("DEBUG:", output)
        self.assertNotIn("Latest distinct versions kept", output)

    def test_decisions_verbose_level(self):
        reporter = Reporter(OutputLevel.VERBOSE)

        with patch('sys.stdout', new=StringIO()) as fake_out:
            reporter.print_decisions(self.plan)
            output = fake_out.getvalue()

        self.assertIn("Latest distinct versions kept: 6.1.0-18, 6.1.0-17", output)
        self.assertNotIn("DEBUG:", output)

    def test_decisions_debug_level(self):
        reporter = Reporter(OutputLevel.DEBUG)

        with patch('sys.stdout', new=StringIO()) as fake_out:
            reporter.print_decisions(self.plan)
            output = fake_out.getvalue()

        self.assertIn("DEBUG: Number of packages to remove: 1", output)
        self.assertIn("DEBUG: - linux-image-6.1.0-13-amd64", output)

    def test_quiet_level(self):
        """Test reporter with quiet output level."""
        reporter = Reporter(OutputLevel.QUIET)

        with patch('sys.stdout', new=StringIO()) as fake_out:
            reporter.print_inventory(self.plan.running_kernel, self.plan.packages)
            reporter.print_decisions(self.plan)
            reporter.print_removal_list(self.plan.to_remove)
            reporter.info("hello")
            reporter.debug("trace")
            output = fake_out.getvalue()

        self.assertEqual(output, "")

    def test_debug_only_at_debug_level(self):
        for level in (OutputLevel.NORMAL, OutputLevel.VERBOSE):
            with patch('sys.stdout', new=StringIO()) as fake_out:
                Reporter(level).debug("trace")
                self.assertEqual(fake_out.getvalue(), "")

        with patch('sys.stdout', new=StringIO()) as fake_out:
            Reporter(OutputLevel.DEBUG).debug("trace")
            self.assertEqual(fake_out.getvalue(), "DEBUG: trace\n")

    def test_removal_list_headings(self):
        reporter = Reporter(OutputLevel.NORMAL)

        with patch('sys.stdout', new=StringIO()) as fake_out:
            reporter.print_removal_list(self.plan.to_remove, dry_run=True)
            reporter.print_removal_list(self.plan.to_remove)
            output = fake_out.getvalue()

        self.assertIn("Simulating removal of specific kernels:", output)
        self.assertIn("Kernels and headers to be removed (by script's logic):", output)


class TestReporterCommand(unittest.TestCase):
    """Test command printing."""

    def test_print_command_dry_run(self):
        reporter = Reporter(OutputLevel.NORMAL)

        with patch('sys.stdout', new=StringIO()) as fake_out:
            reporter.print_command(["apt-get", "purge", "--simulate", "pkg"], dry_run=True)
            output = fake_out.getvalue()

        self.assertIn("Simulating: apt-get purge --simulate pkg", output)

    def test_print_command_execute(self):
        reporter = Reporter(OutputLevel.NORMAL)

        with patch('sys.stdout', new=StringIO()) as fake_out:
            reporter.print_command(["apt-get", "purge", "pkg"])
            output = fake_out.getvalue()

        self.assertIn("Executing: apt-get purge pkg", output)


class TestReporterSimulation(unittest.TestCase):
    """Test simulation and discrepancy output."""

    def test_simulation_success(self):
        reporter = Reporter(OutputLevel.NORMAL)

        with patch('sys.stdout', new=StringIO()) as fake_out, \
                patch('sys.stderr', new=StringIO()) as fake_err:
            reporter.print_simulation(SimulationResult(0, "Purg linux-image-6.1.0-13-amd64\n"))
            output = fake_out.getvalue()
            errors = fake_err.getvalue()

        self.assertIn("Purg linux-image-6.1.0-13-amd64", output)
        self.assertIn("Checking for discrepancies", output)
        self.assertEqual(errors, "")

    def test_simulation_failure_warns_on_stderr(self):
        reporter = Reporter(OutputLevel.QUIET)

        with patch('sys.stdout', new=StringIO()) as fake_out, \
                patch('sys.stderr', new=StringIO()) as fake_err:
            reporter.print_simulation(SimulationResult(100, "E: Unable to locate package\n"))
            output = fake_out.getvalue()
            errors = fake_err.getvalue()

        self.assertEqual(output, "")
        self.assertIn("non-zero exit code: 100", errors)
        self.assertIn("Discrepancy check might be incomplete", errors)

    def test_discrepancies_printed(self):
        reporter = Reporter(OutputLevel.NORMAL)

        with patch('sys.stdout', new=StringIO()) as fake_out:
            reporter.print_discrepancies(["linux-image-amd64"])
            output = fake_out.getvalue()

        self.assertIn("sudo apt-mark hold linux-image-amd64", output)
        self.assertIn("apt-mark showhold", output)
        self.assertIn("sudo apt-mark unhold <package_name>", output)

    def test_no_discrepancies(self):
        reporter = Reporter(OutputLevel.NORMAL)

        with patch('sys.stdout', new=StringIO()) as fake_out:
            reporter.print_discrepancies([])
            output = fake_out.getvalue()

        self.assertEqual(output, "")


class TestReporterProgress(unittest.TestCase):
    """Test removal progress reporting."""

    def test_removal_progress(self):
        reporter = Reporter(OutputLevel.NORMAL)

        with patch('sys.stdout', new=StringIO()) as fake_out:
            reporter.print_removal_progress("linux-image-6.1.0-13-amd64", RemovalStatus.SUCCESS)
            reporter.print_removal_progress("linux-image-6.1.0-9-amd64", RemovalStatus.FAILED)
            output = fake_out.getvalue()

        self.assertIn("Purged linux-image-6.1.0-13-amd64", output)
        self.assertIn("Failed to purge linux-image-6.1.0-9-amd64", output)

    def test_summary(self):
        reporter = Reporter(OutputLevel.NORMAL)

        with patch('sys.stdout', new=StringIO()) as fake_out:
            reporter.print_summary(3, 1)
            output = fake_out.getvalue()

        self.assertIn("Successfully purged 3 package(s).", output)
        self.assertIn("Failed to purge 1 package(s).", output)

    def test_error_goes_to_stderr(self):
        reporter = Reporter(OutputLevel.QUIET)

        with patch('sys.stderr', new=StringIO()) as fake_err:
            reporter.error("'apt-get purge' failed with exit code 100.")
            errors = fake_err.getvalue()

        self.assertEqual(errors, "ERROR: 'apt-get purge' failed with exit code 100.\n")


if __name__ == '__main__':
    unittest.main()
