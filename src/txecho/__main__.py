# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Run txecho as C{python -m txecho}.
"""

from txecho.script import run

if __name__ == "__main__":
    run()
