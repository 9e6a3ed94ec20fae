# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Tests for L{txecho.history}.
"""

from twisted.logger import Logger, LogLevel
from twisted.python.filepath import FilePath
from twisted.trial import unittest

from txecho import history


class HistoryTests(unittest.TestCase):
    """
    Tests for L{txecho.history}.
    """

    def setUp(self):
        self.events = []
        self.patch(history, "log", Logger(observer=self.events.append))
        self.directory = FilePath(self.mktemp())
        self.directory.makedirs()
        self.path = self.directory.child("history").path

    def test_missingFile(self):
        """
        A history file which does not exist yet gives no entries.
        """
        self.assertEqual(history.loadHistory(self.path), [])

    def test_roundTrip(self):
        """
        Entries saved to a file are loaded back in the same order.
        """
        history.saveHistory(self.path, ["one", "two words", "caf\xe9"])
        self.assertEqual(
            FilePath(self.path).getContent(), "one\ntwo words\ncaf\xe9\n".encode()
        )
        self.assertEqual(
            history.loadHistory(self.path), ["one", "two words", "caf\xe9"]
        )

    def test_saveOverwrites(self):
        """
        Saving replaces the previous contents of the file.
        """
        history.saveHistory(self.path, ["old"])
        history.saveHistory(self.path, ["new"])
        self.assertEqual(history.loadHistory(self.path), ["new"])

    def test_undecodableBytes(self):
        """
        Bytes which are not UTF-8 are kept through a load and save.
        """
        FilePath(self.path).setContent(b"\xff\xfe\n")
        entries = history.loadHistory(self.path)
        history.saveHistory(self.path, entries)
        self.assertEqual(FilePath(self.path).getContent(), b"\xff\xfe\n")

    def test_saveFailure(self):
        """
        A history file which cannot be written is logged as a warning.
        """
        path = self.directory.child("missing").child("history").path
        history.saveHistory(path, ["lost"])
        self.assertEqual(len(self.events), 1)
        self.assertEqual(self.events[0]["log_level"], LogLevel.warn)
        self.assertEqual(self.events[0]["path"], path)

    def test_prepareDirectory(self):
        """
        Missing directories above the history file are created without a
        warning.
        """
        path = self.directory.child("a").child("b").child("history")
        history.prepareHistoryDirectory(path.path)
        self.assertTrue(path.parent().isdir())
        self.assertEqual(self.events, [])

    def test_prepareExistingDirectory(self):
        """
        A directory which already exists is not an error.
        """
        history.prepareHistoryDirectory(self.path)
        self.assertEqual(self.events, [])

    def test_prepareDirectoryFailure(self):
        """
        A directory which cannot be created is logged as a warning and
        otherwise ignored.
        """
        blocker = self.directory.child("file")
        blocker.setContent(b"")
        directory = blocker.child("sub")
        history.prepareHistoryDirectory(directory.child("history").path)
        self.assertEqual(len(self.events), 1)
        self.assertEqual(self.events[0]["log_level"], LogLevel.warn)
        self.assertEqual(self.events[0]["directory"], directory.path)
