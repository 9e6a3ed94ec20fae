# -*- test-case-name: txecho.test.test_options,txecho.test.test_transports -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Exceptions raised by txecho, and the process exit codes they map to.

Every fatal condition carries an C{exitCode}; L{txecho.script.main} turns it
into a L{SystemExit} with that code.
"""

from twisted.python import usage

EXIT_OK = 0
EXIT_UNRECOGNIZED_OPTION = 2
EXIT_MISSING_ARGUMENT = 3
EXIT_EXCESS_ARGUMENTS = 4
EXIT_UNSUPPORTED_LINE_EDITOR = 5
EXIT_CANNOT_OPEN_FILE = 6
EXIT_EDITOR_INIT_FAILED = 7
EXIT_CANNOT_DIAL = 8
EXIT_CANNOT_LISTEN = 12
EXIT_CANNOT_ACCEPT = 13


class EndOfInput(Exception):
    """
    The line source has no more lines.  This is not an error.
    """


class PromptAborted(Exception):
    """
    The user interrupted an interactive prompt (for example with Ctrl-C).
    """

    def __str__(self) -> str:
        return "prompt aborted"


class LineTooLong(Exception):
    """
    A line exceeded the longest line a line source will buffer.
    """


class EchoUsageError(usage.UsageError):
    """
    Base class for command line errors.
    """

    exitCode = EXIT_UNRECOGNIZED_OPTION


class UnrecognizedOption(EchoUsageError):
    exitCode = EXIT_UNRECOGNIZED_OPTION

    def __init__(self, option: str) -> None:
        EchoUsageError.__init__(self, f"Unrecognized option '{option}'")
        self.option = option


class MissingArgument(EchoUsageError):
    exitCode = EXIT_MISSING_ARGUMENT

    def __init__(self, option: str) -> None:
        EchoUsageError.__init__(self, f"Missing argument for '{option}' option")
        self.option = option


class ExcessArguments(EchoUsageError):
    exitCode = EXIT_EXCESS_ARGUMENTS

    def __init__(self, arguments) -> None:
        EchoUsageError.__init__(
            self, f"Excess command-line arguments: {list(arguments)}"
        )
        self.arguments = tuple(arguments)


class UnsupportedLineEditor(EchoUsageError):
    exitCode = EXIT_UNSUPPORTED_LINE_EDITOR

    def __init__(self, name: str, supported) -> None:
        choices = ", ".join(f'"{each}"' for each in supported)
        EchoUsageError.__init__(
            self, f"Unsupported line reader {name}; choose one of: {choices}"
        )
        self.name = name
        self.supported = tuple(supported)


class SetupError(Exception):
    """
    An input or output channel could not be set up.
    """

    exitCode = 1


class CannotOpenFile(SetupError):
    exitCode = EXIT_CANNOT_OPEN_FILE


class EditorInitError(SetupError):
    exitCode = EXIT_EDITOR_INIT_FAILED


class CannotDial(SetupError):
    exitCode = EXIT_CANNOT_DIAL


class CannotListen(SetupError):
    exitCode = EXIT_CANNOT_LISTEN


class CannotAccept(SetupError):
    exitCode = EXIT_CANNOT_ACCEPT


__all__ = [
    "EXIT_OK",
    "EXIT_UNRECOGNIZED_OPTION",
    "EXIT_MISSING_ARGUMENT",
    "EXIT_EXCESS_ARGUMENTS",
    "EXIT_UNSUPPORTED_LINE_EDITOR",
    "EXIT_CANNOT_OPEN_FILE",
    "EXIT_EDITOR_INIT_FAILED",
    "EXIT_CANNOT_DIAL",
    "EXIT_CANNOT_LISTEN",
    "EXIT_CANNOT_ACCEPT",
    "EndOfInput",
    "PromptAborted",
    "LineTooLong",
    "EchoUsageError",
    "UnrecognizedOption",
    "MissingArgument",
    "ExcessArguments",
    "UnsupportedLineEditor",
    "SetupError",
    "CannotOpenFile",
    "EditorInitError",
    "CannotDial",
    "CannotListen",
    "CannotAccept",
]
