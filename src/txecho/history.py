# -*- test-case-name: txecho.test.test_history -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Best-effort persistence of interactive line history.

The history file is plain text with one entry per line.  It is read when an
interactive session starts and rewritten when it ends.  Nothing here is
fatal: a file which cannot be read is treated as empty, and failures to
write are logged as warnings.
"""

from twisted.logger import Logger
from twisted.python.filepath import FilePath

from txecho.linesource import decodeLine, encodeLine

log = Logger()


def prepareHistoryDirectory(path: str) -> None:
    """
    Create the directory which will hold the history file at C{path}, if it
    does not exist yet.
    """
    directory = FilePath(path).parent()
    if directory.exists():
        return
    try:
        directory.makedirs(ignoreExistingDirectory=True)
    except OSError:
        log.warn("WARNING: could not create {directory}", directory=directory.path)


def loadHistory(path: str):
    """
    Read the history entries stored at C{path}.

    @return: The entries, oldest first; empty if the file is missing or
        cannot be read.
    @rtype: L{list} of L{str}
    """
    try:
        content = FilePath(path).getContent()
    except OSError:
        return []
    entries = decodeLine(content).split("\n")
    if entries[-1] == "":
        entries.pop()
    return entries


def saveHistory(path: str, entries) -> None:
    """
    Overwrite the file at C{path} with C{entries}, one per line.
    """
    content = b"".join(encodeLine(entry) + b"\n" for entry in entries)
    try:
        FilePath(path).setContent(content)
    except OSError as e:
        log.warn("WARNING: could not save history to {path}: {error}", path=path, error=e)


__all__ = ["prepareHistoryDirectory", "loadHistory", "saveHistory"]
