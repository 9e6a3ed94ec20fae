# -*- test-case-name: txecho.test.test_transports -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Choose where lines come from and where they go, and run the echo session
there.

L{selectTransport} is the single entry point: given a
L{txecho.options.Configuration} it echoes a literal string, relays standard
I/O to a remote echo server, serves a single TCP connection, or echoes
standard input (or a file) to standard output.
"""

import sys

from zope.interface import implementer

from twisted.internet.abstract import isIPv6Address
from twisted.internet.defer import Deferred, inlineCallbacks, maybeDeferred, succeed
from twisted.internet.endpoints import (
    HostnameEndpoint,
    TCP4ServerEndpoint,
    TCP6ServerEndpoint,
    connectProtocol,
)
from twisted.internet.error import CannotListenError
from twisted.internet.interfaces import IHalfCloseableProtocol
from twisted.internet.protocol import Factory, Protocol, connectionDone
from twisted.internet.stdio import StandardIO
from twisted.logger import Logger
from twisted.python.filepath import FilePath

from txecho.echo import runSession
from txecho.editors import ConchLineEditor, buildEditor, editorClass, rawTerminal
from txecho.error import CannotAccept, CannotDial, CannotListen, CannotOpenFile
from txecho.history import prepareHistoryDirectory
from txecho.linesource import CanonicalLineProtocol, FileTransport, RawLineProtocol
from txecho.options import Strategy

log = Logger()


def parseAddress(address: str):
    """
    Split an address of the form C{host:port} into its parts.

    The host may be omitted (C{":8080"} or C{"8080"}) and may be a bracketed
    IPv6 address (C{"[::1]:8080"}).

    @return: A 2-tuple of the host (possibly empty) and the port number.
    @raise ValueError: If there is no usable port number.
    """
    host, colon, port = address.rpartition(":")
    if not colon:
        host, port = "", address
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        portNumber = int(port)
    except ValueError:
        raise ValueError(f"invalid port {port!r}")
    if not 0 <= portNumber <= 65535:
        raise ValueError(f"port {portNumber} out of range")
    return host, portNumber


def formatAddress(address) -> str:
    """
    Format an L{IPv4Address} or L{IPv6Address} as C{host:port}.
    """
    if isIPv6Address(address.host):
        return f"[{address.host}]:{address.port}"
    return f"{address.host}:{address.port}"


def _notice(out, message: str) -> None:
    if out is None:
        out = sys.stdout
    print(message, file=out, flush=True)


def echoEval(config, out=None) -> None:
    """
    Write the literal string from C{config} followed by a newline.
    """
    if out is None:
        out = sys.stdout
    out.write(config.eval + "\n")
    out.flush()


def connectionSession(config):
    """
    Build the protocol for an accepted connection, and the line source which
    reads through it.

    L{ReadlineEditor} and L{PromptToolkitEditor} can only read the local
    terminal, so with them a connection is read with the canonical strategy
    and the editor's prompt instead.

    @return: A 2-tuple of the protocol to connect and the L{ILineSource}.
    """
    strategy = config.strategy
    if strategy is Strategy.raw:
        protocol = RawLineProtocol()
        return protocol, protocol
    if strategy is Strategy.interactive:
        if editorClass(config.lineEditor).drivesConnections:
            editor = ConchLineEditor(config.prompt)
            return editor.buildProtocol(), editor
        log.info(
            "{editor} cannot read a connection; reading lines without it",
            editor=config.lineEditor.name,
        )
    protocol = CanonicalLineProtocol(config.prompt)
    return protocol, protocol


class SingleConnectionFactory(Factory):
    """
    A factory which builds a protocol for the first connection only; any
    later connection is dropped as soon as it is accepted.

    @ivar accepted: A L{Deferred} which fires with a 2-tuple of the protocol
        and line source for the first connection once it is connected, or
        fails with L{CannotAccept} if the factory stops before that.
    """

    noisy = False

    def __init__(self, buildSession):
        """
        @param buildSession: Called with no arguments to create the protocol
            and line source for the connection; see L{connectionSession}.
        """
        self._buildSession = buildSession
        self._built = False
        self.accepted = Deferred()

    def buildProtocol(self, addr):
        if self._built:
            return None
        self._built = True
        protocol, source = self._buildSession()
        source.whenConnected().addCallback(
            lambda source: self.accepted.callback((protocol, source))
        )
        return protocol

    def stopFactory(self):
        if not self._built:
            self.accepted.errback(CannotAccept("stopped listening"))


def _serverEndpoint(reactor, host: str, port: int):
    if isIPv6Address(host):
        return TCP6ServerEndpoint(reactor, port, interface=host)
    return TCP4ServerEndpoint(reactor, port, interface=host)


@inlineCallbacks
def serveConnection(reactor, config, out=None):
    """
    Listen on C{config.socketAddress}, accept a single connection and echo
    the lines it sends back to it.

    The port stops listening as soon as the connection is accepted.

    @param out: Where the listening and accepted addresses are reported;
        standard output by default.

    @raise CannotListen: If the address cannot be listened on.
    @raise CannotAccept: If the port stops listening before a connection
        arrives.
    """
    address = config.socketAddress
    factory = SingleConnectionFactory(lambda: connectionSession(config))
    try:
        host, port = parseAddress(address)
        listeningPort = yield _serverEndpoint(reactor, host, port).listen(factory)
    except (ValueError, CannotListenError) as e:
        raise CannotListen(f"Cannot start listening on {address}: {e}")

    listening = formatAddress(listeningPort.getHost())
    _notice(out, f"Listening at {listening}...")

    try:
        protocol, source = yield factory.accepted
    except CannotAccept as e:
        raise CannotAccept(f"Cannot start accepting on {listening}: {e}")
    stopping = maybeDeferred(listeningPort.stopListening)

    try:
        peer = formatAddress(protocol.transport.getPeer())
        _notice(out, f"Accepting client at {peer}...")
        protocol.transport.write(
            f"Welcome to echo, client at {peer}. "
            "Close the connection to exit.\n".encode("utf-8")
        )
        written = yield runSession(source, historyFile=config.historyFile)
    finally:
        yield stopping
    return written


@inlineCallbacks
def serveStandardIO(reactor, config, stdio=StandardIO, output=None):
    """
    Echo lines from standard input, or from C{config.filename}, to standard
    output.

    @param stdio: Connects a protocol to standard I/O; see
        L{twisted.internet.stdio.StandardIO}.
    @param output: The binary file written to when reading a file; the
        buffer under L{sys.stdout} by default.

    @raise CannotOpenFile: If the input file cannot be opened.
    @raise txecho.error.EditorInitError: If the line editor cannot be set
        up.
    """
    strategy = config.strategy

    if config.readsFile:
        if strategy is Strategy.raw:
            protocol = RawLineProtocol()
        else:
            protocol = CanonicalLineProtocol(config.prompt)
        try:
            inputFile = FilePath(config.filename).open("r")
        except OSError as e:
            raise CannotOpenFile(f"Cannot open {config.filename}: {e.strerror}")
        if output is None:
            output = sys.stdout.buffer
        FileTransport(inputFile, output).connect(protocol)
        written = yield runSession(protocol)
        return written

    if strategy is not Strategy.interactive:
        if strategy is Strategy.raw:
            protocol = RawLineProtocol()
        else:
            protocol = CanonicalLineProtocol(config.prompt)
        stdio(protocol, reactor=reactor)
        written = yield runSession(protocol)
        return written

    if not editorClass(config.lineEditor).drivesConnections:
        editor = buildEditor(config.lineEditor, config.prompt)
        written = yield runSession(editor, historyFile=config.historyFile)
        return written

    restoreTerminal = rawTerminal(0)
    try:
        editor = ConchLineEditor(config.prompt)
        stdio(editor.buildProtocol(), reactor=reactor)
        written = yield runSession(editor, historyFile=config.historyFile)
    finally:
        restoreTerminal()
    return written


class _Relay(Protocol):
    """
    Half of a connection between two transports: whatever arrives here is
    written to the peer.
    """

    peer = None

    def setPeer(self, peer):
        self.peer = peer

    def dataReceived(self, data):
        self.peer.transport.write(data)


@implementer(IHalfCloseableProtocol)
class _LocalRelay(_Relay):
    """
    Relay standard input to the remote echo server.
    """

    def readConnectionLost(self):
        self.peer.transport.loseWriteConnection()

    def writeConnectionLost(self):
        self.peer.transport.loseConnection()

    def connectionLost(self, reason=connectionDone):
        self.peer.transport.loseConnection()


class _RemoteRelay(_Relay):
    """
    Relay the remote echo server's output to standard output.

    @ivar done: A L{Deferred} which fires when the remote connection is
        closed.
    """

    def __init__(self):
        self.done = Deferred()

    def connectionLost(self, reason=connectionDone):
        if self.peer is not None:
            self.peer.transport.loseConnection()
        self.done.callback(None)


@inlineCallbacks
def dialRemote(reactor, config, stdio=StandardIO):
    """
    Connect to the echo server at C{config.connectAddress} and relay standard
    I/O to it until it closes the connection.

    End of standard input half-closes the connection, so the server still
    gets to answer everything that was sent.

    @raise CannotDial: If the connection cannot be established.
    """
    address = config.connectAddress
    try:
        host, port = parseAddress(address)
        endpoint = HostnameEndpoint(reactor, host or "localhost", port)
        remote = yield connectProtocol(endpoint, _RemoteRelay())
    except Exception as e:
        raise CannotDial(f"Cannot dial n=tcp addr={address}: {e}")

    local = _LocalRelay()
    local.setPeer(remote)
    remote.setPeer(local)
    stdio(local, reactor=reactor)
    yield remote.done


def selectTransport(reactor, config):
    """
    Run whatever C{config} asks for.

    @return: A L{Deferred} which fires when the run is over, or fails with a
        L{txecho.error.SetupError} if it could not start.
    """
    if config.eval is not None:
        echoEval(config)
        return succeed(None)
    if config.connectAddress is not None:
        return dialRemote(reactor, config)
    if config.historyFile:
        prepareHistoryDirectory(config.historyFile)
    if config.socketAddress is not None:
        return serveConnection(reactor, config)
    return serveStandardIO(reactor, config)


__all__ = [
    "parseAddress",
    "formatAddress",
    "echoEval",
    "connectionSession",
    "SingleConnectionFactory",
    "serveConnection",
    "serveStandardIO",
    "dialRemote",
    "selectTransport",
]
