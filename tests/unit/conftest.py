"""Pytest fixtures shared by the unit tests"""
import logbook
import pytest


class RecordingExecutor(object):
    """Stand in for the shell: records each command and returns a scripted exit status.

    `failing` maps a substring of a command line to the exit status returned
    for commands containing it; everything else succeeds.
    """
    def __init__(self, failing=None):
        self.failing = failing or {}
        self.commands = []

    def __call__(self, cmd):
        self.commands.append(cmd)
        for key, status in self.failing.items():
            if key in cmd:
                return status
        return 0


@pytest.fixture
def executor():
    return RecordingExecutor()


@pytest.fixture
def failing_executor():
    def _make(failing):
        return RecordingExecutor(failing)
    return _make


@pytest.fixture
def log_handler():
    """Capture log records emitted during the test"""
    handler = logbook.TestHandler(level="DEBUG")
    with handler.applicationbound():
        yield handler


@pytest.fixture
def script_file(tmp_path):
    """Write script text to a temporary file, returning its path"""
    def _write(text, name="pipeline.bpipe"):
        path = tmp_path / name
        path.write_text(text)
        return str(path)
    return _write
