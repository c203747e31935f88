"""Command line interface for running pipeline scripts.

Usage:
  bpipe <script> [<input file>]
     -c YAML system configuration (log directory, extra variables, shell)
     --check only parse and bind, listing the resolved commands
     --print show the composition of the run block
     --workdir directory to run commands in
"""
import argparse
import os
import sys

import bpipe
from bpipe.pipeline.main import run_main
from bpipe.script.errors import LoadError

def parse_cl_args(in_args):
    """Parse input commandline arguments, returning keyword arguments for run_main.
    """
    description = "Run a pipeline script of shell command stages."
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("script", help="Pipeline script to run")
    parser.add_argument("input_file", nargs="?",
                        help=("Initial input file, available to the first stage as $input "
                              "(relative paths are taken from the working directory)"))
    parser.add_argument("-c", "--config",
                        help="YAML configuration file with log and variable settings")
    parser.add_argument("--check", action="store_true", default=False,
                        help="Check the script and list commands without running them")
    parser.add_argument("--print", dest="show_plan", action="store_true", default=False,
                        help="Print the composition of the run block")
    parser.add_argument("--workdir", default=os.getcwd(),
                        help=("Directory to run commands in. Defaults to "
                              "current working directory"))
    parser.add_argument("-v", "--version", action="version",
                        version="%(prog)s " + bpipe.__version__)
    args = parser.parse_args(in_args)
    return {"script": args.script,
            "input_file": args.input_file,
            "config_file": args.config,
            "workdir": os.path.abspath(args.workdir),
            "check_only": args.check,
            "show_plan": args.show_plan}

def main(in_args=None):
    kwargs = parse_cl_args(sys.argv[1:] if in_args is None else in_args)
    try:
        ret = run_main(**kwargs)
    except LoadError as e:
        sys.stderr.write("%s. Aborting.\n" % e)
        sys.exit(255)
    sys.exit(ret)
