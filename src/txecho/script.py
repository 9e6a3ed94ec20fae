# -*- test-case-name: txecho.test.test_script -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
The C{txecho} command.
"""

import os
import sys

from twisted.internet.task import react
from twisted.logger import (
    FileLogObserver,
    FilteringLogObserver,
    InvalidLogLevelError,
    Logger,
    LogLevel,
    LogLevelFilterPredicate,
    eventAsText,
    globalLogBeginner,
)

from txecho.error import EchoUsageError, SetupError
from txecho.options import EchoOptions
from txecho.transports import selectTransport

log = Logger()

LOG_LEVEL_VARIABLE = "TXECHO_LOG_LEVEL"


def logLevelFromEnvironment(environ=None) -> LogLevel:
    """
    @return: The L{LogLevel} named by C{TXECHO_LOG_LEVEL}, or
        C{LogLevel.warn} if it is unset or names no level.
    """
    if environ is None:
        environ = os.environ
    name = environ.get(LOG_LEVEL_VARIABLE, "")
    try:
        return LogLevel.levelWithName(name.lower())
    except InvalidLogLevelError:
        return LogLevel.warn


def _formatEvent(event) -> str:
    return eventAsText(event, includeTimestamp=False, includeSystem=False) + "\n"


def logObserver(stream, level=LogLevel.warn):
    """
    Build an observer which writes events of at least C{level} to C{stream}
    as plain text.
    """
    return FilteringLogObserver(
        FileLogObserver(stream, _formatEvent),
        [LogLevelFilterPredicate(defaultLogLevel=level)],
    )


def startLogging(stream=None, level=None) -> None:
    """
    Send diagnostics to C{stream}, standard error by default.
    """
    if stream is None:
        stream = sys.stderr
    if level is None:
        level = logLevelFromEnvironment()
    globalLogBeginner.beginLoggingTo(
        [logObserver(stream, level)], redirectStandardIO=False
    )


def _exitOnSetupError(failure):
    failure.trap(SetupError)
    log.error("{message}", message=str(failure.value))
    raise SystemExit(failure.value.exitCode)


def main(reactor, *argv):
    """
    Parse C{argv} and run the echo session it describes.

    @return: A L{Deferred} which fires when the session is over, or fails
        with L{SystemExit} carrying the process exit code.

    @raise SystemExit: If the command line is invalid, or asked for help or
        the version.
    """
    options = EchoOptions()
    try:
        options.parseOptions(argv)
    except EchoUsageError as e:
        print(f"Error: {e}", file=sys.stderr)
        print(f"{options.synopsis}\nTry --help for usage details.", file=sys.stderr)
        raise SystemExit(e.exitCode)

    d = selectTransport(reactor, options.configuration)
    d.addErrback(_exitOnSetupError)
    return d


def run():
    """
    Entry point of the C{txecho} console script.
    """
    startLogging()
    react(main, sys.argv[1:])


__all__ = ["main", "run", "startLogging", "logObserver", "logLevelFromEnvironment"]
