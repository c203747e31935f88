"""Run a bound composition tree, and render trees for diagnostics.

Both serial and parallel queues run their branches one after the other,
left first, and stop at the first failure.
"""
import time

from bpipe.log import logger
from bpipe.script import stages
from bpipe.script.errors import PipelineNotReadyError, StageExecutionError

def timestamp():
    return time.ctime()

def execute(node, executor, failures=None):
    """Execute a bound tree using `executor`, returning True on success.

    `executor` takes a single command line and returns its exit status. When a
    `failures` list is supplied the StageExecutionError describing the failed
    command is appended to it.
    """
    if isinstance(node, stages.StageReference):
        return _execute_stage(node, executor, failures)
    elif isinstance(node, (stages.SerialQueue, stages.ParallelQueue)):
        return (execute(node.left, executor, failures)
                and execute(node.right, executor, failures))
    else:
        raise TypeError("Unexpected node in composition tree: %r" % (node,))

def _execute_stage(ref, executor, failures):
    if ref.commands is None:
        raise PipelineNotReadyError("stage %s has not been bound" % ref.name)
    logger.info("=== Stage %s %s ===" % (ref.name, timestamp()))
    for command in ref.commands:
        ret = executor(command)
        if ret != 0:
            logger.error("Execution of stage failed (%s)." % ret)
            if failures is not None:
                failures.append(StageExecutionError(ref.name, command, ret))
            return False
    return True

def describe(node):
    """Render a composition tree as nested Serial(...) and Parallel(...) text.
    """
    if isinstance(node, stages.StageReference):
        return node.name
    elif isinstance(node, stages.SerialQueue):
        return "Serial(%s,%s)" % (describe(node.left), describe(node.right))
    elif isinstance(node, stages.ParallelQueue):
        return "Parallel(%s,%s)" % (describe(node.left), describe(node.right))
    else:
        raise TypeError("Unexpected node in composition tree: %r" % (node,))
