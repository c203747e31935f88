import pytest

from bpipe.provenance import do


def test_returns_zero_for_success():
    assert do.run("true") == 0


def test_returns_exit_status_of_failure(log_handler):
    assert do.run("echo problem; exit 4") == 4
    errors = [r.message for r in log_handler.records if r.level_name == "ERROR"]
    assert len(errors) == 1
    assert "exit 4" in errors[0]
    assert "problem" in errors[0]


def test_output_logged_at_debug(log_handler):
    assert do.run("echo first; echo second") == 0
    messages = [r.message for r in log_handler.records]
    assert "first" in messages and "second" in messages


def test_output_to_stdout_channel(log_handler):
    do.run("echo captured", log_stdout=True)
    records = [r for r in log_handler.records if r.message == "captured"]
    assert [r.channel for r in records] == ["bpipe-stdout"]


def test_command_logged_on_commands_channel(log_handler):
    do.run("true")
    assert any(r.channel == "bpipe-commands" and r.message == "true"
               for r in log_handler.records)


def test_piped_failure_detected_with_pipefail():
    assert do.run("false | cat") != 0


def test_unstartable_command_returns_failure(mocker, log_handler):
    mocker.patch("bpipe.provenance.do.subprocess.Popen", side_effect=OSError("no shell"))
    assert do.run("anything") == 127
    assert any("Could not start command" in r.message for r in log_handler.records)


@pytest.mark.parametrize("cmd, expected", [
    ("ls -l", ("ls -l", None)),
    ("cat a | sort", ("set -o pipefail; cat a | sort", "/bin/bash")),
    ("diff <(sort a) b", ("set -o pipefail; diff <(sort a) b", "/bin/bash")),
])
def test_normalize_cmd_args(mocker, cmd, expected):
    mocker.patch("bpipe.provenance.do.find_bash", return_value="/bin/bash")
    assert do._normalize_cmd_args(cmd) == expected


def test_normalize_uses_configured_shell():
    assert do._normalize_cmd_args("a | b", "/usr/local/bin/bash") == \
        ("set -o pipefail; a | b", "/usr/local/bin/bash")


def test_find_bash_fails_without_bash(mocker):
    mocker.patch("bpipe.provenance.do.utils.which", return_value=None)
    mocker.patch("bpipe.provenance.do.os.path.exists", return_value=False)
    with pytest.raises(IOError):
        do.find_bash()
