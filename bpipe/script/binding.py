"""Bind stage references and substitute variables into command lines.

Binding walks the run tree left to right, exactly in execution order, since
each stage updates the `input` and `output` flow variables seen by the
stages after it. Every stage reference in the returned tree carries its
fully substituted command lines.
"""
from bpipe.log import logger
from bpipe.script import stages
from bpipe.script.errors import BindError, UnknownStageError, UnresolvedVariableError

MAX_SUBSTITUTIONS = 10000

def new_environment(global_vars, input_file=None, extra_vars=None):
    """Seed the variable environment for a bind pass.

    Extra variables (from configuration) are overridden by script globals,
    and the external input file takes precedence over both.
    """
    env = dict(extra_vars or {})
    env.update(global_vars)
    if input_file:
        env["input"] = input_file
    return env

def bind(node, stage_table, env):
    """Resolve a composition tree against the stage table, mutating `env`.

    Returns a new tree with resolved commands on each StageReference.
    """
    if isinstance(node, stages.StageReference):
        return _bind_stage(node, stage_table, env)
    elif isinstance(node, (stages.SerialQueue, stages.ParallelQueue)):
        left = bind(node.left, stage_table, env)
        right = bind(node.right, stage_table, env)
        return node._replace(left=left, right=right)
    else:
        raise TypeError("Unexpected node in composition tree: %r" % (node,))

def _bind_stage(ref, stage_table, env):
    stage = stage_table.get(ref.stage_name)
    if stage is None:
        raise UnknownStageError(ref.stage_name)
    if env.get("input") is not None:
        env["output"] = "%s.%s" % (env["input"], ref.name)
    commands = tuple(substitute(line, env, ref.name) for line in stage.exec_lines)
    if env.get("output") is not None and not stage.forward_input:
        env["input"] = env["output"]
    logger.debug("Bound stage %s: %s" % (ref.name, list(commands)))
    return ref._replace(commands=commands)

def _is_var_name_char(c):
    return c.isalnum() or c == "_"

def _next_placeholder(command, dollar):
    """Find the variable name and end of the placeholder starting at `dollar`.
    """
    if command[dollar + 1:dollar + 2] == "{":
        close = command.find("}", dollar + 2)
        if close < 0:
            return None, len(command)
        return command[dollar + 2:close], close + 1
    end = dollar + 1
    while end < len(command) and _is_var_name_char(command[end]):
        end += 1
    return command[dollar + 1:end], end

def substitute(command, env, stage_name):
    """Replace $name and ${name} placeholders in a command line with values from env.

    Scanning restarts from the beginning after every replacement, so values
    containing placeholders are expanded in turn.
    """
    count = 0
    while True:
        dollar = command.find("$")
        if dollar < 0:
            return command
        var_name, var_end = _next_placeholder(command, dollar)
        if var_name is None:
            raise UnresolvedVariableError(stage_name, command[dollar:])
        if var_name not in env:
            raise UnresolvedVariableError(stage_name, var_name)
        command = command[:dollar] + env[var_name] + command[var_end:]
        count += 1
        if count > MAX_SUBSTITUTIONS:
            raise BindError("Variable expansion in stage %s does not terminate" % stage_name)
