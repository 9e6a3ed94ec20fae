# -*- test-case-name: txecho.test.test_echo -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
The echo loop: read a line, write it back, until the input runs out.
"""

from twisted.internet.defer import inlineCallbacks
from twisted.logger import Logger

from txecho.error import EndOfInput
from txecho.history import loadHistory, saveHistory
from txecho.interfaces import ILineHistory

log = Logger()


@inlineCallbacks
def echoLines(source, sink):
    """
    Copy lines from C{source} to C{sink} until C{source} runs out.

    Each non-empty line is written as soon as it has been read.  A failure to
    read anything other than L{EndOfInput} is logged and ends the loop; it is
    never retried.

    @param source: An L{ILineSource}.
    @param sink: An L{ILineSink}.

    @return: A L{Deferred} which fires with the number of lines written.
    """
    written = 0
    while True:
        try:
            line = yield source.readLine()
        except EndOfInput:
            break
        except Exception as e:
            log.error("error reading input: {error}", error=e)
            break
        if line:
            sink.writeLine(line)
            written += 1
    return written


@inlineCallbacks
def runSession(source, sink=None, historyFile=None):
    """
    Run one echo session over C{source} and release it afterwards.

    If C{source} keeps an L{ILineHistory} and C{historyFile} is given, the
    history is loaded from the file before the first line is read and saved
    back to it when the session ends, however it ends.

    @param sink: Where lines are written; C{source} itself by default.

    @return: A L{Deferred} which fires with the number of lines written once
        C{source} has been closed.
    """
    if sink is None:
        sink = source
    history = ILineHistory(source, None)
    if history is None or not historyFile:
        history = None
    else:
        history.loadHistory(loadHistory(historyFile))
    try:
        written = yield echoLines(source, sink)
    finally:
        try:
            if history is not None:
                saveHistory(historyFile, history.historyEntries())
        finally:
            yield source.close()
    return written


__all__ = ["echoLines", "runSession"]
