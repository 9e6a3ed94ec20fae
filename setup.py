#!/usr/bin/env python

# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Setuptools installer for txecho.
"""

import pathlib

import setuptools

setuptools.setup(
    name="txecho",
    version="1.0.0",
    description="Echo lines from a terminal, a file or a TCP connection.",
    long_description=pathlib.Path("README.rst").read_text(encoding="utf8"),
    long_description_content_type="text/x-rst",
    license="MIT",
    python_requires=">=3.8",
    package_dir={"": "src"},
    packages=setuptools.find_packages("src"),
    install_requires=[
        "Twisted[conch] >= 22.10.0",
        "zope.interface >= 5",
        "attrs >= 22.2.0",
        "constantly >= 15.1",
        "incremental >= 22.10.0",
        "prompt_toolkit >= 3.0",
    ],
    extras_require={
        "test": ["hypothesis >= 6.88"],
    },
    entry_points={
        "console_scripts": ["txecho = txecho.script:run"],
    },
    zip_safe=False,
    classifiers=[
        "Environment :: Console",
        "Framework :: Twisted",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
    ],
)
