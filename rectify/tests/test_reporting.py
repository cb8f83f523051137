"""Tests for reporters and the trace channel."""

import io

from rectify.reporting import ERROR, INFO, WARNING, ConsoleReporter, MemoryReporter
from rectify.trace import DEFAULT_TRACE_FILENAME, resolve_trace_path, trace


class TestMemoryReporter:

    def test_debug_messages_hidden_when_off(self):
        reporter = MemoryReporter(debug=False)
        reporter.info("Rectify running: pint")
        reporter.warning("Formatter not found: pint")
        assert reporter.messages == []

    def test_debug_messages_shown_when_on(self):
        reporter = MemoryReporter(debug=True)
        reporter.info("a")
        reporter.warning("b")
        reporter.error("c")
        assert reporter.messages == [(INFO, "a"), (WARNING, "b"), (ERROR, "c")]
        assert reporter.texts(WARNING) == ["b"]

    def test_notice_always_shown(self):
        reporter = MemoryReporter(debug=False)
        reporter.notice("Rectify debug mode is now OFF")
        assert reporter.texts() == ["Rectify debug mode is now OFF"]


class TestConsoleReporter:

    def test_prints_with_prefix(self):
        out = io.StringIO()
        reporter = ConsoleReporter(debug=True, file=out)

        reporter.info("Command: /usr/bin/prettier --stdin-filepath a.js")

        assert out.getvalue() == "rectify: Command: /usr/bin/prettier --stdin-filepath a.js\n"

    def test_markup_in_messages_is_literal(self):
        out = io.StringIO()
        ConsoleReporter(file=out).notice("[bold]not markup[/bold]")
        assert "[bold]not markup[/bold]" in out.getvalue()

    def test_quiet_without_debug(self):
        out = io.StringIO()
        ConsoleReporter(debug=False, file=out).info("hidden")
        assert out.getvalue() == ""


class TestTrace:

    def test_disabled_by_empty_value(self):
        # isolated_env sets RECTIFY_TRACE_LOG to ""
        assert resolve_trace_path() is None

    def test_default_path_in_temp_dir(self, monkeypatch):
        monkeypatch.delenv("RECTIFY_TRACE_LOG")
        assert resolve_trace_path().endswith(DEFAULT_TRACE_FILENAME)

    def test_writes_component_and_message(self, tmp_path, monkeypatch):
        log = tmp_path / "logs" / "trace.log"
        monkeypatch.setenv("RECTIFY_TRACE_LOG", str(log))

        trace("Pipeline", "running pint")

        assert "[Pipeline] running pint" in log.read_text()

    def test_appends_lines(self, tmp_path, monkeypatch):
        log = tmp_path / "trace.log"
        monkeypatch.setenv("RECTIFY_TRACE_LOG", str(log))

        trace("Invoker", "first")
        trace("Invoker", "second")

        lines = log.read_text().splitlines()
        assert [line.split("] ", 2)[2] for line in lines] == ["first", "second"]

    def test_never_raises(self, tmp_path, monkeypatch):
        directory = tmp_path / "dir"
        directory.mkdir()
        monkeypatch.setenv("RECTIFY_TRACE_LOG", str(directory))

        trace("Invoker", "x")
