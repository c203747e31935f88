"""Main entry point for running pipeline scripts.

Handles the load, check and execute lifecycle of a single script.
"""
import functools
import os

from bpipe import log, utils
from bpipe.log import logger
from bpipe.pipeline import config_utils
from bpipe.provenance import do
from bpipe.script import binding, execution, grammar, stages
from bpipe.script.errors import BPipeError, LoadError, ParseError, PipelineNotReadyError
from bpipe.script.preprocess import strip_comments

def run_main(script, input_file=None, config_file=None, workdir=None,
             check_only=False, show_plan=False):
    """Run a pipeline script, handling command line options.

    Returns a process exit code: 0 on success, 1 when the script fails to
    check or any stage fails.
    """
    config = config_utils.load_config(config_file)
    if config.get("log_dir"):
        config["log_dir"] = os.path.abspath(config["log_dir"])
    script = os.path.abspath(script)
    handler = log.setup_local_logging(config)
    try:
        if config_file:
            logger.info("System YAML configuration: %s." % os.path.abspath(config_file))
        pipeline = BPipe(config)
        pipeline.load(script)
        with utils.chdir(workdir or os.getcwd()):
            if not pipeline.check(input_file):
                return 1
            if show_plan:
                pipeline.print()
            if check_only:
                for cmd in pipeline.commands():
                    logger.info(cmd)
                return 0
            return 0 if pipeline.execute() else 1
    finally:
        handler.pop_thread()
        handler.close()

class BPipe(object):
    """A pipeline script moving through load, check and execute.
    """
    def __init__(self, config=None, executor=None):
        self.config = config if config is not None else config_utils.load_config()
        if executor is None:
            executor = functools.partial(do.run, shell=config_utils.get_shell(self.config),
                                         log_stdout=config_utils.get_log_stdout(self.config))
        self.executor = executor
        self.script_text = None
        self.parsed = None
        self.bound = None
        self.env = None
        self.error = None

    def load(self, filename):
        """Read a script file and remove comments, raising LoadError if unreadable.
        """
        try:
            with open(filename) as in_handle:
                text = in_handle.read()
        except (IOError, UnicodeDecodeError) as e:
            logger.error("Error opening file %s. Aborting." % filename)
            raise LoadError(filename, e)
        self.load_text(text)
        return True

    def load_text(self, text):
        self.script_text = strip_comments(text)
        self.parsed = None
        self.bound = None
        self.env = None

    def check(self, input_file=None):
        """Parse the script and bind variables, returning True if it is runnable.
        """
        self.bound = None
        self.error = None
        if self.script_text is None:
            raise PipelineNotReadyError("no script loaded: call load() before check()")
        try:
            self.parsed = grammar.parse(self.script_text)
            if self.parsed.title:
                logger.info("Pipeline: %s" % self.parsed.title)
            env = binding.new_environment(self.parsed.variables, input_file,
                                          config_utils.get_variables(self.config))
            self.bound = binding.bind(self.parsed.root, self.parsed.stages, env)
            self.env = env
        except ParseError as e:
            logger.error("Parsed up to %s" % e.remainder)
            if e.expected:
                logger.error("Expected one of: %s" % ", ".join(e.expected))
            self.error = e
            return False
        except BPipeError as e:
            logger.error("BPipe file error: %s" % e)
            self.error = e
            return False
        return True

    @property
    def ready(self):
        return self.bound is not None

    def execute(self):
        """Run the checked pipeline, returning True if every stage succeeded.
        """
        if not self.ready:
            raise PipelineNotReadyError()
        logger.info("=== Starting pipeline at %s ===" % execution.timestamp())
        failures = []
        ret = execution.execute(self.bound, self.executor, failures)
        if ret:
            logger.info("=== Finished successfully at %s ===" % execution.timestamp())
        else:
            self.error = failures[0] if failures else None
            logger.error("=== Pipeline FAILED at %s ===" % execution.timestamp())
        return ret

    def describe(self):
        root = self.bound or (self.parsed.root if self.parsed else None)
        if root is None:
            raise PipelineNotReadyError("no parsed pipeline to describe")
        return execution.describe(root)

    def print(self):
        logger.info(self.describe())

    def commands(self):
        """Resolved command lines in execution order.
        """
        if not self.ready:
            raise PipelineNotReadyError()
        return [cmd for ref in stages.leaves(self.bound) for cmd in ref.commands]
