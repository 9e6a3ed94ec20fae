# -*- test-case-name: txecho.test.test_options -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Command line parsing for txecho.

L{EchoOptions} parses the command line into an immutable L{Configuration}
which is then handed to L{txecho.transports.selectTransport}.
"""

import re
import sys
from typing import Optional

from attrs import frozen
from constantly import NamedConstant, Names

from twisted.python import usage

from txecho import __version__
from txecho.error import (
    EchoUsageError,
    ExcessArguments,
    MissingArgument,
    UnrecognizedOption,
    UnsupportedLineEditor,
)

_SIGNED_INTEGER = re.compile(r"[+-]?[0-9]+")


class LineEditor(Names):
    """
    The interactive line editors txecho can read lines with.
    """

    none = NamedConstant()
    conch = NamedConstant()
    readline = NamedConstant()
    prompt_toolkit = NamedConstant()


class Strategy(Names):
    """
    The ways a line source can split its input into lines.
    """

    raw = NamedConstant()
    canonical = NamedConstant()
    interactive = NamedConstant()


def supportedLineEditors():
    """
    @return: The names accepted by C{--line-reader}.
    @rtype: L{list} of L{str}
    """
    return [editor.name for editor in LineEditor.iterconstants()]


@frozen
class Configuration:
    """
    Everything the command line said about one run.

    @ivar eval: A string to echo instead of reading any input.
    @ivar filename: A file to read lines from instead of standard input.
        C{"-"} means standard input.
    @ivar socketAddress: An address to accept a single connection on.
    @ivar connectAddress: An address of a remote echo server to connect to.
    @ivar prompt: The text displayed before each line is read.
    @ivar historyFile: Where interactive history is loaded from and saved to.
    @ivar lineEditor: The interactive line editor to use, a L{LineEditor}
        constant.
    @ivar noReadline: Whether raw character reading was forced.
    """

    eval: Optional[str] = None
    filename: Optional[str] = None
    socketAddress: Optional[str] = None
    connectAddress: Optional[str] = None
    prompt: str = ""
    historyFile: Optional[str] = None
    lineEditor: NamedConstant = LineEditor.none
    noReadline: bool = False
    help: bool = False
    version: bool = False

    @property
    def strategy(self) -> NamedConstant:
        """
        The L{Strategy} used to read lines.
        """
        if self.noReadline:
            return Strategy.raw
        if self.lineEditor is not LineEditor.none:
            return Strategy.interactive
        return Strategy.canonical

    @property
    def readsFile(self) -> bool:
        return self.filename is not None and self.filename != "-"


def isOptionValue(argument: str) -> bool:
    """
    Decide whether C{argument} may be consumed as the value of an option.

    Anything which does not look like an option is a value, and so are a
    lone C{"-"} and negative-looking numbers such as C{"-5"}.
    """
    if argument == "-" or not argument.startswith("-"):
        return True
    return _SIGNED_INTEGER.fullmatch(argument[1:]) is not None


class EchoOptions(usage.Options):
    """
    Command line options for the C{txecho} program.

    @ivar configuration: The L{Configuration} built from the parsed options,
        available once L{parseOptions} has returned.
    """

    synopsis = "Usage: txecho [options] [file]"

    longdesc = (
        "Read lines from standard input, a file or a single network "
        "connection and write each one back out."
    )

    optFlags = [
        ["no-readline", None, "Read raw characters without any line editor."],
    ]

    optParameters = [
        ["eval", "e", None, "Echo this string instead of reading any input."],
        ["file", "f", None, "Read lines from this file instead of stdin."],
        [
            "socket",
            "s",
            None,
            "Accept one connection on this address and echo its lines.",
        ],
        ["connect-to", "c", None, "Connect to an echo server at this address."],
        [
            "prompt",
            "p",
            None,
            "Prompt shown before each line (default: the line reader name "
            "followed by '> ').",
        ],
        ["history", "H", None, "File holding previously entered lines."],
        [
            "line-reader",
            "l",
            "none",
            "Line reader to use, one of: " + ", ".join(supportedLineEditors()),
        ],
    ]

    _helpOptions = frozenset(["help", "h"])

    configuration = None

    def opt_help(self):
        """
        Display this help and exit.
        """
        usage.Options.opt_help(self)

    opt_h = opt_help

    def opt_version(self):
        """
        Display the version and the supported line readers, then exit.
        """
        print(f"txecho version: {__version__}")
        print("Line readers: " + ", ".join(supportedLineEditors()))
        sys.exit(0)

    opt_v = opt_version

    def parseOptions(self, options=None):
        if options is None:
            options = sys.argv[1:]
        options = list(options)
        self._checkOptions(options)
        try:
            usage.Options.parseOptions(self, options)
        except EchoUsageError:
            raise
        except usage.UsageError as e:
            raise EchoUsageError(str(e))

    def _optionNames(self):
        """
        Sort the options this parser knows into those taking values and
        those which do not.
        """
        longParameters = {name[:-1] for name in self.longOpt if name.endswith("=")}
        longFlags = {name for name in self.longOpt if not name.endswith("=")}
        shortParameters = set()
        shortFlags = set()
        for letter, following in zip(self.shortOpt, self.shortOpt[1:] + " "):
            if letter == ":":
                continue
            if following == ":":
                shortParameters.add(letter)
            else:
                shortFlags.add(letter)
        return longParameters, longFlags, shortParameters, shortFlags

    def _checkOptions(self, options):
        """
        Walk the options up to the first positional argument, rejecting
        unknown options and options whose value is missing.

        L{getopt} would happily take C{"--socket"} as the value of C{-e}; an
        option only consumes the next argument if L{isOptionValue} accepts
        it.  C{--help} stops the walk immediately.
        """
        longParameters, longFlags, shortParameters, shortFlags = self._optionNames()
        index = 0
        while index < len(options):
            argument = options[index]
            if argument == "-" or not argument.startswith("-"):
                return
            if argument.startswith("--"):
                name, equals, _ = argument[2:].partition("=")
                if name in self._helpOptions and not equals:
                    self.opt_help()
                if name in longParameters:
                    if not equals:
                        index = self._valueIndex(options, index)
                elif name not in longFlags or equals:
                    raise UnrecognizedOption(argument)
            else:
                for position, letter in enumerate(argument[1:], 1):
                    if letter in self._helpOptions:
                        self.opt_help()
                    if letter in shortParameters:
                        if position == len(argument) - 1:
                            index = self._valueIndex(options, index)
                        break
                    if letter not in shortFlags:
                        raise UnrecognizedOption(argument)
            index += 1

    def _valueIndex(self, options, index):
        following = index + 1
        if following < len(options) and isOptionValue(options[following]):
            return following
        raise MissingArgument(options[index])

    def parseArgs(self, *arguments):
        """
        A single positional argument names the input file, unless C{--file}
        already did.
        """
        if arguments and self["file"] is None:
            self["file"], arguments = arguments[0], arguments[1:]
        if arguments:
            raise ExcessArguments(arguments)

    def postOptions(self):
        name = self["line-reader"]
        try:
            lineEditor = LineEditor.lookupByName(name or "none")
        except ValueError:
            # Evaluating an expression reads no input, so any editor will do.
            if self["eval"] is None:
                raise UnsupportedLineEditor(name, supportedLineEditors())
            lineEditor = LineEditor.none

        noReadline = bool(self["no-readline"])
        prompt = self["prompt"]
        if prompt is None:
            if lineEditor is LineEditor.none or noReadline:
                prompt = ""
            else:
                prompt = f"{lineEditor.name}> "

        self.configuration = Configuration(
            eval=self["eval"],
            filename=self["file"],
            socketAddress=self["socket"],
            connectAddress=self["connect-to"],
            prompt=prompt,
            historyFile=self["history"],
            lineEditor=lineEditor,
            noReadline=noReadline,
        )


__all__ = [
    "LineEditor",
    "Strategy",
    "Configuration",
    "EchoOptions",
    "isOptionValue",
    "supportedLineEditors",
]
