#!/usr/bin/env python

"""Setup file and install script for the pipeline script runner"""

import setuptools

VERSION = '0.1.0'

setuptools.setup(
    name="bpipe",
    version=VERSION,
    description="Parse, check and run pipeline scripts of shell command stages",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    scripts=["scripts/bpipe_run.py"],
    python_requires=">=3.6",
    install_requires=[
        "lark",
        "logbook",
        "pyyaml",
        "toolz",
    ],
    extras_require={
        "test": ["pytest", "pytest-mock"],
    },
    entry_points={"console_scripts": [
        "bpipe=bpipe.pipeline.cli:main",
    ]},
)
