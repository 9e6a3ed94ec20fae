# -*- test-case-name: txecho.test.test_editors -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Interactive line editors.

Each editor is an L{ILineSource}, an L{ILineSink} and an L{ILineHistory}: it
shows a prompt, reads one line with in-place editing and recall of earlier
lines, and remembers every non-empty line entered.

L{ConchLineEditor} is a terminal protocol driven by the reactor, so it works
on standard I/O and on an accepted connection alike.  L{ReadlineEditor} and
L{PromptToolkitEditor} read the local terminal with a blocking call.
"""

import sys

from zope.interface import implementer

from twisted.conch.insults.insults import ServerProtocol
from twisted.conch.recvline import HistoricRecvLine
from twisted.internet.defer import maybeDeferred, succeed
from twisted.internet.protocol import connectionDone
from twisted.python.failure import Failure

from txecho.error import EditorInitError, EndOfInput, PromptAborted
from txecho.interfaces import ILineHistory, ILineSink, ILineSource
from txecho.linesource import _LineQueue, decodeLine, encodeLine
from txecho.options import LineEditor

CTRL_C = b"\x03"
CTRL_D = b"\x04"


@implementer(ILineSource, ILineSink, ILineHistory)
class ConchLineEditor(_LineQueue, HistoricRecvLine):
    """
    A line editor built on L{twisted.conch.recvline.HistoricRecvLine}.

    Run it under an L{twisted.conch.insults.insults.ServerProtocol}; see
    L{buildProtocol}.  Ctrl-D on an empty line ends the input and Ctrl-C
    aborts the prompt.
    """

    drivesConnections = True

    def __init__(self, prompt: str = ""):
        self._initLineQueue()
        self.prompt = prompt
        self.ps = (encodeLine(prompt), encodeLine(prompt))
        self.historyLines = []
        self.historyPosition = 0

    def buildProtocol(self):
        """
        @return: A L{ServerProtocol} which translates terminal input into
            keystrokes for this editor once it is connected to a transport.
        """
        return ServerProtocol(lambda: self)

    def _channel(self):
        return self.terminal

    def _disconnect(self):
        # Not through ServerProtocol, which would reset the terminal.
        self.terminal.transport.loseConnection()

    def connectionMade(self):
        history = self.historyLines
        HistoricRecvLine.connectionMade(self)
        self.historyLines = history
        self.historyPosition = len(history)
        self.keyHandlers.update({CTRL_C: self.handle_INTERRUPT, CTRL_D: self.handle_EOF})
        self._connected()

    def initializeScreen(self):
        # Leave whatever is on the terminal alone; the prompt is shown by
        # readLine.
        self.setInsertMode()

    def handle_EOF(self):
        if self.lineBuffer:
            self.handle_DELETE()
        else:
            self.terminal.nextLine()
            self._inputEnded(Failure(EndOfInput()))

    def handle_INTERRUPT(self):
        self.lineBuffer = []
        self.lineBufferIndex = 0
        self.terminal.nextLine()
        self._inputEnded(Failure(PromptAborted()))

    def lineReceived(self, line: bytes) -> None:
        self._lineReceived(decodeLine(line) + "\n")

    def connectionLost(self, reason=connectionDone) -> None:
        self._connectionClosed(reason)

    def loadHistory(self, entries):
        self.historyLines = [encodeLine(entry) for entry in entries]
        self.historyPosition = len(self.historyLines)

    def historyEntries(self):
        return [decodeLine(line) for line in self.historyLines]


class _BlockingEditor:
    """
    Shared behaviour of the editors which read the local terminal with a
    blocking call on the reactor thread.
    """

    drivesConnections = False

    def __init__(self, prompt: str, output=None):
        self.prompt = prompt
        self._output = output

    def _prompt(self) -> str:
        raise NotImplementedError()

    def _readOne(self) -> str:
        try:
            line = self._prompt()
        except EOFError:
            raise EndOfInput() from None
        except KeyboardInterrupt:
            raise PromptAborted() from None
        return line + "\n"

    def readLine(self):
        return maybeDeferred(self._readOne)

    def writeLine(self, line: str) -> None:
        output = self._output if self._output is not None else sys.stdout
        output.write(line)
        output.flush()

    def close(self):
        return succeed(None)


@implementer(ILineSource, ILineSink, ILineHistory)
class ReadlineEditor(_BlockingEditor):
    """
    A line editor using the GNU readline binding from the standard library.

    readline keeps a single, process-wide history; lines are added to it
    explicitly so that empty lines are never recorded.
    """

    def __init__(self, prompt: str, output=None, _readline=None, _input=input):
        _BlockingEditor.__init__(self, prompt, output)
        if _readline is None:
            try:
                import readline as _readline
            except ImportError as e:
                raise EditorInitError(f"Cannot init readline: {e}")
        self._readline = _readline
        self._input = _input
        self._readline.set_auto_history(False)

    def _prompt(self) -> str:
        line = self._input(self.prompt)
        if line:
            self._readline.add_history(line)
        return line

    def loadHistory(self, entries):
        self._readline.clear_history()
        for entry in entries:
            self._readline.add_history(entry)

    def historyEntries(self):
        length = self._readline.get_current_history_length()
        return [self._readline.get_history_item(index) for index in range(1, length + 1)]


@implementer(ILineSource, ILineSink, ILineHistory)
class PromptToolkitEditor(_BlockingEditor):
    """
    A line editor using a L{prompt_toolkit.PromptSession}.

    prompt_toolkit records accepted lines itself; it skips empty lines and a
    line identical to the one before it.
    """

    def __init__(self, prompt: str, output=None, _session=None):
        _BlockingEditor.__init__(self, prompt, output)
        if _session is None:
            try:
                from prompt_toolkit import PromptSession
                from prompt_toolkit.history import InMemoryHistory

                _session = PromptSession(history=InMemoryHistory())
            except Exception as e:
                raise EditorInitError(f"Cannot init prompt_toolkit: {e}")
        self._session = _session

    def _prompt(self) -> str:
        return self._session.prompt(self.prompt)

    def loadHistory(self, entries):
        for entry in entries:
            self._session.history.append_string(entry)

    def historyEntries(self):
        return list(self._session.history.get_strings())


_EDITORS = {
    LineEditor.conch: ConchLineEditor,
    LineEditor.readline: ReadlineEditor,
    LineEditor.prompt_toolkit: PromptToolkitEditor,
}


def editorClass(lineEditor):
    """
    @param lineEditor: A L{LineEditor} other than C{LineEditor.none}.
    @return: The class implementing it.
    """
    return _EDITORS[lineEditor]


def buildEditor(lineEditor, prompt: str):
    """
    Create the editor named by C{lineEditor}.

    @raise EditorInitError: If the editor cannot be used here.
    """
    return editorClass(lineEditor)(prompt)


def rawTerminal(fd):
    """
    Switch the terminal on C{fd} to raw mode so that every keystroke reaches
    a L{ConchLineEditor} as it is typed.

    @return: A callable which restores the previous terminal settings.
    @raise EditorInitError: If C{fd} is not a terminal.
    """
    try:
        import termios
        import tty
    except ImportError as e:
        raise EditorInitError(f"Cannot init conch: {e}")
    try:
        oldSettings = termios.tcgetattr(fd)
        tty.setraw(fd)
    except termios.error as e:
        raise EditorInitError(f"Cannot init conch: {e}")

    def restore():
        termios.tcsetattr(fd, termios.TCSANOW, oldSettings)

    return restore


__all__ = [
    "ConchLineEditor",
    "ReadlineEditor",
    "PromptToolkitEditor",
    "buildEditor",
    "editorClass",
    "rawTerminal",
]
