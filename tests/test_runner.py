import os

import pytest

from silviewer.runner import run_program, pick_output

pytestmark = pytest.mark.skipif(not os.path.exists("/bin/bash"), reason="needs /bin/bash")


def test_echoes_stdin():
    assert run_program("cat", 'print("hi")') == 'print("hi")'


def test_stdout_when_stderr_is_empty():
    assert run_program("echo out", "") == "out\n"


def test_lone_newline_on_stderr_is_ignored():
    assert run_program("echo out; echo >&2", "") == "out\n"


def test_stderr_replaces_stdout():
    assert run_program("echo partial; echo 'error: boom' >&2", "") == "error: boom\n"


def test_failing_command_reports_shell_error():
    output = run_program("definitely-not-a-command-xyz", "")
    assert "definitely-not-a-command-xyz" in output


def test_command_that_ignores_stdin():
    assert run_program("true", "x" * 200000) == ""


def test_pipeline_sees_source():
    assert run_program("cat | tr a-z A-Z", "let x = 1") == "LET X = 1"


def test_missing_shell_is_reported_as_text():
    output = run_program("cat", "", shell="/nonexistent/shell")
    assert output.endswith("\n")
    assert "/nonexistent/shell" in output


@pytest.mark.parametrize("out,err,expected", [
    ("a", "", "a"),
    ("a", "\n", "a"),
    ("a", "\n\n", "\n\n"),
    ("a", "warning", "warning"),
    ("", "", ""),
])
def test_pick_output(out, err, expected):
    assert pick_output(out, err) == expected


def test_unlaunchable_shell_value_is_reported_as_text():
    output = run_program("cat", "", shell="/bin/ba\0sh")
    assert "null byte" in output
