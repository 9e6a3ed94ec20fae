# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Interface documentation for the pieces an echo session is built from.
"""

from zope.interface import Attribute, Interface


class ILineSource(Interface):
    """
    Something which produces lines of text, one per request, until it runs
    out.

    A line source is bound to exactly one underlying stream and cannot be
    restarted.
    """

    prompt = Attribute(
        "The text displayed before each line is read, or an empty string "
        "if nothing is displayed."
    )

    def readLine():
        """
        Request the next line.

        @return: A L{Deferred} which fires with the next line as a L{str}.
            The line may be empty.  If there are no more lines the
            L{Deferred} fails with L{txecho.error.EndOfInput}; any other
            failure means the stream could not be read and no further lines
            will be produced either.
        """

    def close():
        """
        Release the underlying stream.

        @return: A L{Deferred} which fires when the stream has been released.
        """


class ILineSink(Interface):
    """
    Something lines of text can be written to.
    """

    def writeLine(line):
        """
        Write C{line} exactly as given and make it visible right away.

        @param line: The text to write, including any line terminator.
        @type line: L{str}
        """


class ILineHistory(Interface):
    """
    The list of lines previously entered at an interactive prompt.
    """

    def loadHistory(entries):
        """
        Replace the current history.

        @param entries: The lines to make available for recall, oldest first.
        @type entries: iterable of L{str}
        """

    def historyEntries():
        """
        @return: The lines available for recall, oldest first.
        @rtype: L{list} of L{str}
        """


__all__ = ["ILineSource", "ILineSink", "ILineHistory"]
