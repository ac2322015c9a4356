"""Tests for log.py - subsystem logger + OpenTelemetry tracing + sink."""

import sys

from emvlua.log import (
    debug, error, flush_sink, get_level, info, log, set_console, set_level, set_sink,
    span, warn,
)
from emvlua.parser import parse


class TestConsoleLogger:
    def test_info_prints_to_stdout(self, capsys):
        info("test", "hello world")
        captured = capsys.readouterr()
        assert "emvlua:test" in captured.out
        assert "hello world" in captured.out

    def test_warn_prints_to_stderr(self, capsys):
        warn("test", "danger")
        captured = capsys.readouterr()
        assert "emvlua:test" in captured.err
        assert "danger" in captured.err

    def test_error_prints_to_stderr(self, capsys):
        error("test", "broke")
        captured = capsys.readouterr()
        assert "broke" in captured.err

    def test_debug_hidden_by_default(self, capsys):
        debug("test", "verbose")
        captured = capsys.readouterr()
        assert captured.out == ""

    def test_set_level_debug(self, capsys):
        set_level("debug")
        debug("test", "now visible")
        captured = capsys.readouterr()
        assert "now visible" in captured.out
        set_level("info")  # reset

    def test_set_level_warn(self, capsys):
        set_level("warn")
        info("test", "hidden")
        captured = capsys.readouterr()
        assert captured.out == ""
        set_level("info")  # reset

    def test_unknown_level_is_info(self):
        set_level("loud")
        assert get_level() == "info"

    def test_subsystem_level(self, capsys):
        set_level("debug", subsystem="decode")
        debug("decode", "decoder detail")
        debug("edit", "edit detail")
        captured = capsys.readouterr()
        assert "decoder detail" in captured.out
        assert "edit detail" not in captured.out
        assert get_level("decode") == "debug"
        set_level("info")  # reset, clears subsystem overrides
        assert get_level("decode") == "info"

    def test_set_console_routes_everything(self, capsys):
        set_console(sys.stderr)
        try:
            info("test", "routed")
        finally:
            set_console(None)
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "routed" in captured.err

    def test_set_console_none_restores_split(self, capsys):
        set_console(None)
        info("test", "back on stdout")
        captured = capsys.readouterr()
        assert "back on stdout" in captured.out

    def test_parse_is_quiet_at_info(self, capsys):
        parse('EMV.Auto = { { ID = "A" } }')
        captured = capsys.readouterr()
        assert captured.out == ""


class TestSpans:
    def test_span_context_manager(self):
        with span("test_op", subsystem="test", count=3) as s:
            assert s is not None
            s.set_attribute("emvlua.custom", "value")

    def test_nested_spans(self):
        with span("outer", subsystem="test"):
            with span("inner", subsystem="test") as s:
                assert s is not None

    def test_log_inside_span(self, capsys):
        with span("test_op", subsystem="test"):
            info("test", "inside a span")
        captured = capsys.readouterr()
        assert "inside a span" in captured.out


class TestSink:
    def setup_method(self):
        set_sink(None)

    def teardown_method(self):
        set_sink(None)
        set_level("info")

    def test_sink_receives_log(self):
        calls = []
        set_sink(lambda sub, lvl, msg, attrs: calls.append((sub, lvl, msg, attrs)))
        info("test", "hello sink")
        assert calls == [("test", "info", "hello sink", None)]

    def test_sink_receives_attrs(self):
        calls = []
        set_sink(lambda sub, lvl, msg, attrs: calls.append(attrs))
        log("test", "info", "with attrs", key="val")
        assert calls[0] == {"key": "val"}

    def test_sink_sees_filtered_levels(self):
        calls = []
        set_sink(lambda sub, lvl, msg, attrs: calls.append(lvl))
        debug("test", "below threshold")
        assert calls == ["debug"]

    def test_sink_error_doesnt_crash(self, capsys):
        def bad_sink(sub, lvl, msg, attrs):
            raise RuntimeError("boom")
        set_sink(bad_sink)
        info("test", "still works")
        captured = capsys.readouterr()
        assert "still works" in captured.out

    def test_flush_sink(self):
        flushed = []
        set_sink(lambda *a: None, flush_fn=lambda: flushed.append(True))
        flush_sink()
        assert len(flushed) == 1

    def test_flush_sink_noop_without_flush_fn(self):
        set_sink(lambda *a: None)
        flush_sink()  # should not raise
