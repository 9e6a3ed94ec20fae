# -*- test-case-name: txecho -*-

# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
txecho: read lines from a terminal, a file or a socket and echo them back.
"""

from txecho._version import __version__ as version

__version__ = version.short()
