# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Tests for L{txecho.script}.
"""

import sys
from io import StringIO

from twisted.logger import Logger, LogLevel
from twisted.trial import unittest

from txecho import script


class LoggingTests(unittest.TestCase):
    """
    Tests for the logging set up by L{script.main}.
    """

    def test_defaultLevel(self):
        """
        Without C{TXECHO_LOG_LEVEL} only warnings and errors are logged.
        """
        self.assertEqual(script.logLevelFromEnvironment({}), LogLevel.warn)

    def test_levelFromEnvironment(self):
        """
        C{TXECHO_LOG_LEVEL} names the threshold, in any case.
        """
        self.assertEqual(
            script.logLevelFromEnvironment({"TXECHO_LOG_LEVEL": "DEBUG"}),
            LogLevel.debug,
        )

    def test_unknownLevel(self):
        """
        An unknown level name falls back to the default threshold.
        """
        self.assertEqual(
            script.logLevelFromEnvironment({"TXECHO_LOG_LEVEL": "loud"}),
            LogLevel.warn,
        )

    def test_observer(self):
        """
        Events below the threshold are dropped; the rest are written as plain
        lines.
        """
        stream = StringIO()
        log = Logger(observer=script.logObserver(stream, LogLevel.warn))
        log.info("quiet")
        log.warn("WARNING: could not create {directory}", directory="/nope")
        log.error("error reading input: {error}", error="boom")
        self.assertEqual(
            stream.getvalue(),
            "WARNING: could not create /nope\nerror reading input: boom\n",
        )


class MainTests(unittest.TestCase):
    """
    Tests for L{script.main}.
    """

    def setUp(self):
        self.stdout = StringIO()
        self.stderr = StringIO()
        self.patch(sys, "stdout", self.stdout)
        self.patch(sys, "stderr", self.stderr)
        self.events = []
        self.patch(script, "log", Logger(observer=self.events.append))

    def assertExitCode(self, code, *argv):
        exc = self.assertRaises(SystemExit, script.main, None, *argv)
        self.assertEqual(exc.code, code)

    def test_eval(self):
        """
        C{--eval} prints its value and the run succeeds.
        """
        self.assertIsNone(self.successResultOf(script.main(None, "-e", "hi")))
        self.assertEqual(self.stdout.getvalue(), "hi\n")

    def test_help(self):
        """
        C{--help} prints the usage text and exits 0.
        """
        self.assertExitCode(0, "--help")
        self.assertIn("Usage: txecho", self.stdout.getvalue())

    def test_version(self):
        """
        C{--version} prints the version and exits 0.
        """
        self.assertExitCode(0, "--version")
        self.assertIn("txecho version: ", self.stdout.getvalue())

    def test_unrecognizedOption(self):
        """
        An unrecognized option exits 2 with an error message.
        """
        self.assertExitCode(2, "--bogus")
        self.assertTrue(
            self.stderr.getvalue().startswith("Error: Unrecognized option '--bogus'\n")
        )

    def test_missingArgument(self):
        """
        An option missing its value exits 3.
        """
        self.assertExitCode(3, "-e", "--socket")
        self.assertIn("Missing argument for '-e' option", self.stderr.getvalue())

    def test_excessArguments(self):
        """
        More than one positional argument exits 4.
        """
        self.assertExitCode(4, "a", "b")

    def test_unsupportedLineEditor(self):
        """
        An unsupported line editor exits 5, listing the supported ones.
        """
        self.assertExitCode(5, "--line-reader", "ed")
        self.assertIn('choose one of: "none", "conch"', self.stderr.getvalue())

    def test_evalWithUnsupportedLineEditor(self):
        """
        C{--eval} still prints its value when the line editor is unsupported.
        """
        d = script.main(None, "-e", "hi", "-l", "bogus")
        self.assertIsNone(self.successResultOf(d))
        self.assertEqual(self.stdout.getvalue(), "hi\n")
        self.assertEqual(self.stderr.getvalue(), "")

    def test_setupError(self):
        """
        A channel which cannot be set up is logged and ends the process with
        that error's code.
        """
        path = self.mktemp()
        failure = self.failureResultOf(script.main(None, "-f", path), SystemExit)
        self.assertEqual(failure.value.code, 6)
        self.assertEqual(len(self.events), 1)
        self.assertEqual(self.events[0]["log_level"], LogLevel.error)
        self.assertTrue(self.events[0]["message"].startswith(f"Cannot open {path}"))
