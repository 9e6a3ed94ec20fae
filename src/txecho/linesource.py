# -*- test-case-name: txecho.test.test_linesource -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Non-interactive line sources.

Both protocols here act as the L{ILineSource} and the L{ILineSink} of an echo
session: lines are read from their transport and written back to it.  They
can be connected to standard I/O, to an accepted TCP connection, or to a
L{FileTransport} reading a local file.
"""

import codecs

from zope.interface import implementer

from twisted.internet import task
from twisted.internet.defer import Deferred, DeferredQueue, succeed
from twisted.internet.error import ConnectionDone
from twisted.internet.interfaces import IHalfCloseableProtocol
from twisted.internet.protocol import Protocol, connectionDone
from twisted.protocols.basic import LineReceiver
from twisted.python.failure import Failure

from txecho.error import EndOfInput, LineTooLong
from txecho.interfaces import ILineSink, ILineSource

ENCODING = "utf-8"
ERRORS = "surrogateescape"

_END = object()


def encodeLine(line: str) -> bytes:
    """
    Encode text read by a line source back into the bytes it came from.
    """
    return line.encode(ENCODING, ERRORS)


def decodeLine(data: bytes) -> str:
    return data.decode(ENCODING, ERRORS)


class LineAccumulator:
    """
    Rebuild lines from a stream of code points.

    The accumulator is in one of two states.  While C{ACCUMULATE}, every code
    point other than a carriage return is appended to the current line;
    carriage returns are dropped.  A newline moves it to C{EMIT}: the
    current line is handed out without its newline, and the next code point
    starts a fresh line.

    @ivar state: C{ACCUMULATE} or C{EMIT}.
    """

    ACCUMULATE = "accumulate"
    EMIT = "emit"

    def __init__(self):
        self.state = self.ACCUMULATE
        self._characters = []

    def feed(self, character: str):
        """
        Feed one code point.

        @return: The completed line if C{character} finished one, otherwise
            L{None}.
        """
        if self.state == self.EMIT:
            self._characters = []
            self.state = self.ACCUMULATE
        if character == "\n":
            self.state = self.EMIT
            return "".join(self._characters)
        if character != "\r":
            self._characters.append(character)
        return None

    def feedText(self, text: str):
        """
        Feed every code point of C{text}.

        @return: The lines completed along the way.
        @rtype: L{list} of L{str}
        """
        lines = []
        for character in text:
            line = self.feed(character)
            if line is not None:
                lines.append(line)
        return lines

    def flush(self):
        """
        Hand out whatever was accumulated since the last newline.

        @return: The unterminated line, or L{None} if there is none.
        """
        if self.state == self.EMIT or not self._characters:
            return None
        line = "".join(self._characters)
        self._characters = []
        return line


class _LineQueue:
    """
    Buffer lines as a protocol receives them and hand them out one
    L{readLine} at a time.

    Mix this in before L{Protocol} and call L{_initLineQueue} from
    C{__init__}.
    """

    prompt = ""

    def _initLineQueue(self):
        self._lines = DeferredQueue()
        self._ended = None
        self._disconnected = False
        self._closeWaiters = []
        self._connectWaiters = []
        self._isConnected = False

    def whenConnected(self):
        """
        @return: A L{Deferred} which fires with this source once it has been
            connected to its transport.
        """
        if self._isConnected:
            return succeed(self)
        d = Deferred()
        self._connectWaiters.append(d)
        return d

    def _connected(self) -> None:
        self._isConnected = True
        waiters, self._connectWaiters = self._connectWaiters, []
        for waiter in waiters:
            waiter.callback(self)

    def _lineReceived(self, line: str) -> None:
        if self._ended is None:
            self._lines.put(line)

    def _inputEnded(self, reason: Failure) -> None:
        """
        No more lines will arrive; once the buffered lines are consumed,
        L{readLine} fails with C{reason}.
        """
        if self._ended is None:
            self._ended = reason
            self._lines.put(_END)

    def _channel(self):
        """
        @return: What lines and prompts are written to.
        """
        return self.transport

    def _disconnect(self) -> None:
        self.transport.loseConnection()

    def _showPrompt(self) -> None:
        if self.prompt and not self._disconnected:
            self._channel().write(encodeLine(self.prompt))

    def _checkEnd(self, line):
        if line is _END:
            self._lines.put(_END)
            return self._ended
        return line

    def readLine(self):
        self._showPrompt()
        return self._lines.get().addCallback(self._checkEnd)

    def writeLine(self, line: str) -> None:
        self._channel().write(encodeLine(line))

    def close(self):
        if self._disconnected:
            return succeed(None)
        d = Deferred()
        self._closeWaiters.append(d)
        self._disconnect()
        return d

    def _connectionClosed(self, reason: Failure) -> None:
        if reason.check(ConnectionDone):
            self._inputEnded(Failure(EndOfInput()))
        else:
            self._inputEnded(reason)
        self._disconnected = True
        waiters, self._closeWaiters = self._closeWaiters, []
        for waiter in waiters:
            waiter.callback(None)

    def readConnectionLost(self) -> None:
        self._inputEnded(Failure(EndOfInput()))

    def writeConnectionLost(self) -> None:
        self._disconnect()


@implementer(ILineSource, ILineSink, IHalfCloseableProtocol)
class RawLineProtocol(_LineQueue, Protocol):
    """
    Split input into lines one code point at a time, dropping carriage
    returns.

    Each line is delivered with a single trailing newline, including a final
    line which had none.  No prompt is displayed.
    """

    def __init__(self):
        self._initLineQueue()
        self._decoder = codecs.getincrementaldecoder(ENCODING)(ERRORS)
        self._accumulator = LineAccumulator()

    def connectionMade(self) -> None:
        self._connected()

    def dataReceived(self, data: bytes) -> None:
        for line in self._accumulator.feedText(self._decoder.decode(data)):
            self._lineReceived(line + "\n")

    def readConnectionLost(self) -> None:
        for line in self._accumulator.feedText(self._decoder.decode(b"", True)):
            self._lineReceived(line + "\n")
        line = self._accumulator.flush()
        if line is not None:
            self._lineReceived(line + "\n")
        _LineQueue.readConnectionLost(self)

    def connectionLost(self, reason=connectionDone) -> None:
        self._connectionClosed(reason)


@implementer(ILineSource, ILineSink, IHalfCloseableProtocol)
class CanonicalLineProtocol(_LineQueue, LineReceiver):
    """
    Split input on newlines, keeping each newline with its line.

    A final fragment without a newline is delivered as it is.  The prompt,
    if there is one, is written before each line is read.
    """

    delimiter = b"\n"
    MAX_LENGTH = 65536

    def __init__(self, prompt: str = ""):
        self._initLineQueue()
        self.prompt = prompt

    def connectionMade(self) -> None:
        self._connected()

    def lineReceived(self, line: bytes) -> None:
        self._lineReceived(decodeLine(line + self.delimiter))

    def lineLengthExceeded(self, line: bytes) -> None:
        self._inputEnded(
            Failure(LineTooLong(f"line longer than {self.MAX_LENGTH} bytes"))
        )

    def readConnectionLost(self) -> None:
        rest = self.clearLineBuffer()
        if rest:
            self._lineReceived(decodeLine(rest))
        _LineQueue.readConnectionLost(self)

    def connectionLost(self, reason=connectionDone) -> None:
        self._connectionClosed(reason)


class FileTransport:
    """
    A transport which feeds the content of a file to a protocol and writes
    whatever the protocol writes to an output file.

    The input is read in chunks from a cooperative task so a large file does
    not hold up the reactor.

    @ivar disconnecting: Whether L{loseConnection} has been called.
    """

    chunkSize = 2 ** 16
    disconnecting = False

    def __init__(self, inputFile, output, cooperate=task.cooperate):
        """
        @param inputFile: A binary file object to read from.  It is closed
            once it has been read or the connection is lost.
        @param output: A binary file object to write to.
        @param cooperate: Used to schedule the reading task; see
            L{twisted.internet.task.cooperate}.
        """
        self._input = inputFile
        self._output = output
        self._cooperate = cooperate
        self._lost = False
        self.protocol = None

    def connect(self, protocol):
        """
        Connect C{protocol} to this transport and start feeding it.

        @return: The L{twisted.internet.task.CooperativeTask} doing the
            reading.
        """
        self.protocol = protocol
        protocol.makeConnection(self)
        reading = self._cooperate(self._feed())
        reading.whenDone().addErrback(self._readFailed)
        return reading

    def _feed(self):
        with self._input:
            while not self.disconnecting:
                chunk = self._input.read(self.chunkSize)
                if not chunk:
                    break
                self.protocol.dataReceived(chunk)
                yield None
        if not self.disconnecting:
            IHalfCloseableProtocol(self.protocol).readConnectionLost()

    def _readFailed(self, reason):
        self._connectionLost(reason)

    def _connectionLost(self, reason):
        if not self._lost:
            self._lost = True
            self.protocol.connectionLost(reason)

    def write(self, data: bytes) -> None:
        if not self._lost:
            self._output.write(data)
            self._output.flush()

    def writeSequence(self, data) -> None:
        self.write(b"".join(data))

    def loseConnection(self) -> None:
        if self.disconnecting:
            return
        self.disconnecting = True
        self._input.close()
        self._connectionLost(Failure(ConnectionDone()))


__all__ = [
    "LineAccumulator",
    "RawLineProtocol",
    "CanonicalLineProtocol",
    "FileTransport",
    "encodeLine",
    "decodeLine",
]
