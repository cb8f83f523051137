"""Tests for SubprocessRunner against stub formatter scripts."""

import os
import subprocess
import sys
from unittest.mock import patch

import pytest

from rectify.errors import TempFileError
from rectify.invoker import SubprocessRunner, format_command
from rectify.tools import PhpcbfTool, PhpCsFixerTool, PintTool, PrettierdTool, PrettierTool

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="stub tools are shell scripts")


@pytest.fixture
def runner():
    return SubprocessRunner()


def _cleanup(result):
    if result.produced_temp_file and os.path.exists(result.produced_temp_file):
        os.remove(result.produced_temp_file)


class TestStdinMode:

    def test_output_replaces_text(self, runner, make_stub):
        exe = make_stub("prettier", "cat > /dev/null; printf 'let x = 1;\\n'")

        result = runner.invoke(exe, PrettierTool(), "/src/app.js", "let x=1")

        assert result.succeeded is True
        assert result.exit_status == 0
        assert result.stdout == "let x = 1;\n"
        assert result.produced_temp_file is None

    def test_text_is_piped_to_stdin(self, runner, make_stub):
        exe = make_stub("prettierd", "cat")

        result = runner.invoke(exe, PrettierdTool(), "/src/app.js", "const a = 1;\n")

        assert result.stdout == "const a = 1;\n"

    def test_arguments_are_passed(self, runner, make_stub):
        exe = make_stub("prettier", 'cat > /dev/null; printf "%s|" "$@"')

        result = runner.invoke(exe, PrettierTool(), "/src/my app.js", "")

        assert result.stdout == "--stdin-filepath|/src/my app.js|"
        assert result.args == ["--stdin-filepath", "/src/my app.js"]

    def test_line_endings_survive(self, runner, make_stub):
        exe = make_stub("prettierd", "cat")

        result = runner.invoke(exe, PrettierdTool(), "/a.js", "a\r\nb\r\n")

        assert result.stdout == "a\r\nb\r\n"

    def test_non_zero_exit_fails(self, runner, make_stub):
        exe = make_stub("prettier", "cat > /dev/null; echo 'SyntaxError' >&2; exit 2")

        result = runner.invoke(exe, PrettierTool(), "/a.js", "let")

        assert result.succeeded is False
        assert result.exit_status == 2
        assert "SyntaxError" in result.stderr

    def test_exit_one_is_failure_for_generic_tool(self, runner, make_stub):
        exe = make_stub("prettier", "cat; exit 1")

        result = runner.invoke(exe, PrettierTool(), "/a.js", "x")

        assert result.succeeded is False

    def test_missing_executable_is_launch_failure(self, runner, tmp_path):
        result = runner.invoke(str(tmp_path / "nope"), PrettierTool(), "/a.js", "x")

        assert result.succeeded is False
        assert result.exit_status is None
        assert result.error

    def test_non_executable_file_is_launch_failure(self, runner, tmp_path):
        path = tmp_path / "prettier"
        path.write_text("#!/bin/sh\ncat\n")
        path.chmod(0o644)

        result = runner.invoke(str(path), PrettierTool(), "/a.js", "x")

        assert result.succeeded is False
        assert result.exit_status is None

    def test_undecodable_output_fails(self, runner, make_stub):
        exe = make_stub("prettierd", "cat > /dev/null; printf '\\377\\376'")

        result = runner.invoke(exe, PrettierdTool(), "/a.js", "x")

        assert result.succeeded is False
        assert "utf-8" in result.error

    def test_timeout_kills_tool(self, make_stub):
        exe = make_stub("prettierd", "exec sleep 5")

        result = SubprocessRunner(timeout=0.5).invoke(exe, PrettierdTool(), "/a.js", "x")

        assert result.succeeded is False
        assert result.exit_status is None
        assert "timed out" in result.error


class TestTempFileMode:

    def test_phpcbf_rewrites_file(self, runner, make_stub):
        exe = make_stub("phpcbf", "printf '<?php\\necho 1;\\n' > \"$2\"; exit 1")

        result = runner.invoke(exe, PhpcbfTool(), "/src/app.php", "<?php echo 1;")
        try:
            assert result.succeeded is True
            assert result.exit_status == 1
            assert runner.read_output(result.produced_temp_file) == "<?php\necho 1;\n"
        finally:
            _cleanup(result)

    def test_pint_runs_in_scratch_directory(self, runner, make_stub):
        # pint receives only the file name and must be run from its directory
        exe = make_stub("pint", "printf 'formatted' > \"$2\"; exit 2")

        result = runner.invoke(exe, PintTool(), "/src/app.php", "<?php")
        try:
            assert result.succeeded is True
            assert runner.read_output(result.produced_temp_file) == "formatted"
        finally:
            _cleanup(result)

    def test_stdin_is_not_used(self, runner, make_stub):
        exe = make_stub("php-cs-fixer", "cat; exit 0")

        result = runner.invoke(exe, PhpCsFixerTool(), "/src/app.php", "<?php echo 1;")
        try:
            assert result.succeeded is True
            assert result.stdout == ""
        finally:
            _cleanup(result)

    def test_failed_run_still_reports_temp_file(self, runner, make_stub):
        exe = make_stub("php-cs-fixer", "echo 'parse error' >&2; exit 8")

        result = runner.invoke(exe, PhpCsFixerTool(), "/src/app.php", "<?php")
        try:
            assert result.succeeded is False
            assert result.produced_temp_file
            assert os.path.exists(result.produced_temp_file)
            assert "parse error" in result.stderr
        finally:
            _cleanup(result)

    def test_launch_failure_reports_temp_file(self, runner, tmp_path):
        result = runner.invoke(str(tmp_path / "missing"), PhpcbfTool(), "/a.php", "x")
        try:
            assert result.succeeded is False
            assert result.exit_status is None
            assert result.produced_temp_file
        finally:
            _cleanup(result)

    def test_scratch_write_failure_raises(self, runner, make_stub):
        exe = make_stub("phpcbf", "exit 0")
        with patch("rectify.tools.create_temp_file", side_effect=TempFileError("disk full")):
            with pytest.raises(TempFileError):
                runner.invoke(exe, PhpcbfTool(), "/a.php", "x")


class TestStorage:

    def test_read_output_and_discard(self, runner, tmp_path):
        path = tmp_path / "out.php"
        path.write_bytes(b"a\r\nb")

        assert runner.read_output(str(path)) == "a\r\nb"
        runner.discard(str(path))
        assert not path.exists()

    def test_read_missing_raises(self, runner, tmp_path):
        with pytest.raises(OSError):
            runner.read_output(str(tmp_path / "gone"))


class TestFormatCommand:

    def test_quotes_arguments_with_spaces(self):
        assert format_command("/bin/prettier", ["--stdin-filepath", "/a b.js"]) == \
            '/bin/prettier --stdin-filepath "/a b.js"'


class TestSubprocessCall:

    @patch("subprocess.run")
    def test_uses_argument_list_without_shell(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess([], 0, b"out", b"")

        SubprocessRunner(timeout=3).invoke("/usr/bin/prettier", PrettierTool(), "/a.js", "x")

        args, kwargs = mock_run.call_args
        assert args[0] == ["/usr/bin/prettier", "--stdin-filepath", "/a.js"]
        assert kwargs["input"] == b"x"
        assert kwargs["timeout"] == 3
        assert kwargs.get("shell", False) is False

    @patch("subprocess.run")
    def test_on_start_sees_argv_before_spawn(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess([], 0, b"", b"")
        seen = []

        def on_start(argv):
            seen.append((list(argv), mock_run.called))

        SubprocessRunner().invoke("/usr/bin/prettier", PrettierTool(), "/a.js", "x",
                                  on_start=on_start)

        assert seen == [(["/usr/bin/prettier", "--stdin-filepath", "/a.js"], False)]
