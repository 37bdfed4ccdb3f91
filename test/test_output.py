"""
Output module tests (echo sink and default help formatter).

Conventions
- Test method names follow CamelCase per project convention.
- Output is captured by patching sys.stdout/sys.stderr.
"""

from __future__ import annotations

import io
import re
import unittest
from unittest import TestCase
from unittest.mock import patch

from arbor.output import ArgumentHelp, HelpFormatter, OptionHelp, SubcommandHelp, echo

PARAMETERS = [
    OptionHelp(("-c", "--count"), "INT", "Repetitions"),
    OptionHelp(("-h", "--help"), None, "Show this message and exit"),
    ArgumentHelp("SRC", "Files to copy", True, True),
    ArgumentHelp("DEST", "", False, False),
    SubcommandHelp("sync", "Synchronize folders"),
]


class TestEcho(TestCase):
    def testEchoWritesVerbatimToStdout(self):
        stdout = io.StringIO()
        with patch("sys.stdout", stdout):
            echo("[bold]not markup[/bold]")
        self.assertEqual(stdout.getvalue(), "[bold]not markup[/bold]\n")

    def testEchoErrWritesToStderr(self):
        stdout, stderr = io.StringIO(), io.StringIO()
        with patch("sys.stdout", stdout), patch("sys.stderr", stderr):
            echo("Aborted!", err=True)
        self.assertEqual(stdout.getvalue(), "")
        self.assertEqual(stderr.getvalue(), "Aborted!\n")


class TestHelpFormatter(TestCase):
    def setUp(self):
        self.formatter = HelpFormatter(width=80)

    def testWidthIsValidated(self):
        with self.assertRaises(ValueError):
            HelpFormatter(width=10)
        with self.assertRaises(ValueError):
            HelpFormatter(max_column=0)

    def testUsage(self):
        self.assertEqual(
            self.formatter.format_usage(PARAMETERS, "copy"),
            "Usage: copy [OPTIONS] SRC... [DEST] COMMAND [ARGS]...",
        )
        self.assertEqual(self.formatter.format_usage([], "bare"), "Usage: bare")

    def testHelpSections(self):
        help = self.formatter.format_help("Copy files.\n\n    Really.", "See the manual.", PARAMETERS, "copy")
        sections = help.split("\n\n")

        self.assertEqual(sections[0], "Usage: copy [OPTIONS] SRC... [DEST] COMMAND [ARGS]...")
        self.assertEqual(sections[1], "Copy files.")
        self.assertEqual(sections[2], "Really.")
        self.assertEqual(sections[-1], "See the manual.")

        self.assertRegex(help, re.compile(r"^Arguments:\n  SRC +Files to copy$", re.M))
        self.assertNotRegex(help, re.compile(r"^  DEST", re.M))
        self.assertRegex(help, re.compile(r"^Options:\n  -c, --count INT +Repetitions$", re.M))
        self.assertRegex(help, re.compile(r"^  -h, --help +Show this message and exit$", re.M))
        self.assertRegex(help, re.compile(r"^Commands:\n  sync +Synchronize folders$", re.M))

    def testHelpWithoutOptionalSections(self):
        self.assertEqual(self.formatter.format_help("", "", [], "bare"), "Usage: bare")

    def testEquality(self):
        self.assertEqual(HelpFormatter(width=80), self.formatter)
        self.assertNotEqual(HelpFormatter(), self.formatter)
        self.assertEqual(len({HelpFormatter(), HelpFormatter()}), 1)


if __name__ == "__main__":
    unittest.main()
