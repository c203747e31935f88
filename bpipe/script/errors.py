"""Exceptions raised while loading, checking and running pipeline scripts.
"""


class BPipeError(Exception):
    pass

class LoadError(BPipeError):
    """The script file could not be read."""
    def __init__(self, path, reason):
        self.path = path
        self.reason = reason
        super(LoadError, self).__init__("Error opening file %s: %s" % (path, reason))

class ParseError(BPipeError):
    """The grammar did not consume the whole script.

    `remainder` holds the script text from the first token that could not be
    accepted to the end of input.
    """
    def __init__(self, remainder, line=None, column=None, expected=None):
        self.remainder = remainder
        self.line = line
        self.column = column
        self.expected = sorted(expected or [])
        msg = "Parsed up to line %s, column %s; remaining: %r" % (line, column, remainder)
        super(ParseError, self).__init__(msg)

class MissingRunBlockError(BPipeError):
    def __init__(self):
        super(MissingRunBlockError, self).__init__("Script does not contain a run block")

class BindError(BPipeError):
    pass

class UnknownStageError(BindError):
    def __init__(self, stage):
        self.stage = stage
        super(UnknownStageError, self).__init__(
            "stage name '%s' didn't match any known stages" % stage)

class UnresolvedVariableError(BindError):
    def __init__(self, stage, variable):
        self.stage = stage
        self.variable = variable
        super(UnresolvedVariableError, self).__init__(
            "Variable %s is not defined in stage %s" % (variable, stage))

class StageExecutionError(BPipeError):
    def __init__(self, stage, command, status):
        self.stage = stage
        self.command = command
        self.status = status
        super(StageExecutionError, self).__init__(
            "Execution of stage %s failed (%s): %s" % (stage, status, command))

class PipelineNotReadyError(BPipeError):
    def __init__(self, msg="pipeline not ready: run a successful check() before execute()"):
        super(PipelineNotReadyError, self).__init__(msg)
