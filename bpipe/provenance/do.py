"""Centralize running of external commands, providing logging and exit status tracking.
"""
import collections
import os
import subprocess

from bpipe import utils
from bpipe.log import logger, logger_cl, logger_stdout


def run(cmd, log_stdout=False, shell=None):
    """Run the provided command line through the host shell, returning its exit status.

    Output of the command is captured to the debug log (or to stdout when
    `log_stdout` is set). On failure the last lines of output are logged so
    errors from wrapped tools remain visible.
    """
    logger_cl.debug(cmd)
    try:
        exitcode, debug_stdout = _do_run(cmd, log_stdout, shell=shell)
    except OSError as e:
        logger.error("Could not start command: %s (%s)" % (cmd, e))
        return 127
    if exitcode != 0:
        logger.error("Command exited with status %s: %s\n%s" % (exitcode, cmd, "".join(debug_stdout)))
    return exitcode

def find_bash():
    for test_bash in [utils.which("bash"), "/bin/bash", "/usr/bin/bash", "/usr/local/bin/bash"]:
        if test_bash and os.path.exists(test_bash):
            return test_bash
    raise IOError("Could not find bash in any standard location. Needed for unix pipes")

def _normalize_cmd_args(cmd, shell=None):
    """Normalize subprocess arguments to handle pipes.

    Piped commands set pipefail and require use of bash to help with debugging
    intermediate errors.
    """
    if cmd.find(" | ") > 0 or cmd.find(">(") >= 0 or cmd.find("<(") >= 0:
        return "set -o pipefail; " + cmd, shell or find_bash()
    else:
        return cmd, shell

def _do_run(cmd, log_stdout=False, shell=None):
    """Perform running, returning the exit code and the tail of the output.
    """
    cmd, executable_arg = _normalize_cmd_args(cmd, shell)
    s = subprocess.Popen(
        cmd,
        shell=True,
        executable=executable_arg,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        close_fds=True,
    )
    debug_stdout = collections.deque(maxlen=100)
    while 1:
        line = s.stdout.readline().decode("utf-8", errors="replace")
        if line.rstrip():
            debug_stdout.append(line)
            if log_stdout:
                logger_stdout.debug(line.rstrip())
            else:
                logger.debug(line.rstrip())
        exitcode = s.poll()
        if exitcode is not None:
            for line in s.stdout:
                debug_stdout.append(line.decode("utf-8", errors="replace"))
            break
    s.communicate()
    s.stdout.close()
    return exitcode, debug_stdout
