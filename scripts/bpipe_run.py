#!/usr/bin/env python -Es
"""Run a pipeline script of shell command stages.

Usage:
  bpipe_run.py <script> [<input file>] [-c <config file>] [--check] [--print]
"""
from bpipe.pipeline import cli

if __name__ == "__main__":
    cli.main()
