"""
Tests for core logging functionality
"""

import gc
import io
import json

import pytest
from loguru import logger as loguru_logger

from fanlog import (
    Attr,
    FanoutSink,
    LoggerBuilder,
    LoggerFactory,
    SecondarySinkUnavailable,
    Severity,
    StreamSink,
    default,
    new_logger,
    resolve,
    with_base_attrs,
    with_json,
    with_level,
    with_secondary_sink,
    with_set_default,
    with_source,
)


def lines_of(stream):
    return stream.getvalue().splitlines()


class TestLoggerFactory:
    """Test LoggerFactory class"""

    def test_default_logger_writes_json_with_source(self, make_logger):
        """Test default logger writes JSON with source position"""
        logger, stream = make_logger()

        logger.info("started")

        lines = lines_of(stream)
        assert len(lines) == 1
        payload = json.loads(lines[0])
        assert payload["level"] == "INFO"
        assert payload["msg"] == "started"
        assert payload["source"]["file"].endswith("test_core.py")
        assert payload["source"]["function"].endswith(
            "test_default_logger_writes_json_with_source"
        )
        assert isinstance(payload["source"]["line"], int)

    def test_level_threshold(self, make_logger):
        """Test level threshold"""
        logger, stream = make_logger(with_level("warn"), with_json(False))

        logger.debug("hidden")
        logger.info("hidden")
        logger.warn("disk low", req_id="abc")
        logger.error("disk full")

        lines = lines_of(stream)
        assert len(lines) == 2
        assert "level=WARN" in lines[0]
        assert 'msg="disk low"' in lines[0]
        assert "req_id=abc" in lines[0]
        assert "level=ERROR" in lines[1]

    def test_source_capture_disabled(self, make_logger):
        """Test source capture disabled"""
        logger, stream = make_logger(with_source(False))

        logger.info("no source")

        assert "source" not in json.loads(lines_of(stream)[0])

    def test_message_with_braces_is_not_formatted(self, make_logger):
        """Test message with braces is not formatted"""
        logger, stream = make_logger()

        logger.info("payload {value}", value=1)

        payload = json.loads(lines_of(stream)[0])
        assert payload["msg"] == "payload {value}"
        assert payload["value"] == 1

    def test_base_attrs_and_record_attrs(self, make_logger):
        """Test base attrs and record attrs"""
        logger, stream = make_logger(with_base_attrs(service="api"))

        logger.info("hit", Attr("path", "/"), status=200)

        payload = json.loads(lines_of(stream)[0])
        assert payload["service"] == "api"
        assert payload["path"] == "/"
        assert payload["status"] == 200

    def test_exception_is_attached(self, make_logger):
        """Test exception is attached"""
        logger, stream = make_logger()

        try:
            raise ValueError("boom")
        except ValueError:
            logger.exception("failed")

        payload = json.loads(lines_of(stream)[0])
        assert payload["level"] == "ERROR"
        assert "ValueError: boom" in payload["exc"]

    def test_loguru_context_extras_are_included(self, make_logger):
        """Test loguru context extras are included"""
        logger, stream = make_logger()

        with loguru_logger.contextualize(trace_id="t-1"):
            logger.info("traced")

        payload = json.loads(lines_of(stream)[0])
        assert payload["trace_id"] == "t-1"
        assert not any(key.startswith("_fanlog") for key in payload)

    def test_loggers_are_isolated(self, make_logger):
        """Records only reach the sink of the logger that emitted them"""
        first, first_stream = make_logger()
        second, second_stream = make_logger(with_json(False))

        first.info("one")
        second.info("two")

        assert len(lines_of(first_stream)) == 1
        assert len(lines_of(second_stream)) == 1
        assert "two" not in first_stream.getvalue()

    def test_set_default(self, make_logger):
        """Test set_default installs the logger as the default"""
        logger, _ = make_logger(with_set_default(True))
        assert default() is logger

    def test_set_default_disabled(self, make_logger):
        """Test set_default=False leaves the default untouched"""
        before = default()
        make_logger(with_set_default(False))
        assert default() is before

    def test_last_build_wins(self, make_logger):
        """Test last build wins"""
        make_logger()
        latest, _ = make_logger()
        assert default() is latest

    def test_close(self, make_logger):
        """Test close() detaches the handler and is idempotent"""
        logger, stream = make_logger()

        logger.close()
        logger.close()
        logger.info("after close")

        assert stream.getvalue() == ""
        assert logger.enabled(Severity.ERROR) is False

    def test_exception_outside_except_block(self, make_logger):
        """Test exception() with nothing being handled emits no exc field"""
        logger, stream = make_logger()

        logger.exception("nothing raised")

        payload = json.loads(lines_of(stream)[0])
        assert payload["level"] == "ERROR"
        assert payload["msg"] == "nothing raised"
        assert "exc" not in payload

    def test_dropped_loggers_release_handlers(self):
        """Test unreferenced loggers remove their loguru handlers once collected"""
        gc.collect()
        before = len(loguru_logger._core.handlers)

        for _ in range(50):
            LoggerFactory.create_logger(resolve(with_set_default(False)), io.StringIO())
        gc.collect()

        assert len(loguru_logger._core.handlers) == before

    def test_derived_logger_keeps_handler_alive(self):
        """Test a derived logger keeps the shared handler after its base is dropped"""
        stream = io.StringIO()
        base = LoggerFactory.create_logger(resolve(with_set_default(False)), stream)
        derived = base.with_(request_id="r-1")
        del base
        gc.collect()

        try:
            derived.info("still routed")
        finally:
            derived.close()

        assert json.loads(lines_of(stream)[0])["request_id"] == "r-1"


class TestSecondarySink:
    """Test the secondary UDP sink"""

    def test_records_duplicated_as_json(self, make_logger, udp_receiver):
        """Test records are duplicated as JSON datagrams"""
        port = udp_receiver.getsockname()[1]
        logger, stream = make_logger(
            with_json(False), with_secondary_sink(True, f"127.0.0.1:{port}")
        )

        logger.info("hello", user="ann")
        logger.warn("careful")

        assert isinstance(logger.sink, FanoutSink)
        first = json.loads(udp_receiver.recv(65535).decode("utf-8"))
        second = json.loads(udp_receiver.recv(65535).decode("utf-8"))
        assert (first["msg"], first["user"], first["level"]) == ("hello", "ann", "INFO")
        assert (second["msg"], second["level"]) == ("careful", "WARN")

        lines = lines_of(stream)
        assert len(lines) == 2
        assert "msg=hello" in lines[0] and "user=ann" in lines[0]

    def test_disabled_secondary_uses_stream_only(self, make_logger):
        """Test disabled secondary uses stream only"""
        logger, _ = make_logger(with_secondary_sink(False, "not checked"))
        assert isinstance(logger.sink, StreamSink)

    def test_secondary_failure_does_not_block_primary(self, make_logger, udp_receiver):
        """Test secondary failure does not block primary"""
        port = udp_receiver.getsockname()[1]
        errors = []
        logger, stream = make_logger(
            with_secondary_sink(True, f"127.0.0.1:{port}"),
            on_error=lambda sink, exc: errors.append(exc),
        )
        logger.sink.sinks[1].sock.close()

        logger.info("still here")

        assert json.loads(lines_of(stream)[0])["msg"] == "still here"
        assert len(errors) == 1
        assert isinstance(errors[0], OSError)

    def test_close_releases_socket(self, make_logger, udp_receiver):
        """Test close releases socket"""
        port = udp_receiver.getsockname()[1]
        logger, _ = make_logger(with_secondary_sink(True, f"127.0.0.1:{port}"))
        sock = logger.sink.sinks[1].sock

        logger.close()

        assert sock.fileno() == -1

    def test_dropped_logger_closes_socket(self, udp_receiver):
        """Test the UDP socket is closed once an unreferenced logger is collected"""
        port = udp_receiver.getsockname()[1]
        logger = LoggerFactory.create_logger(
            resolve(with_set_default(False), with_secondary_sink(True, f"127.0.0.1:{port}")),
            io.StringIO(),
        )
        sock = logger.sink.sinks[1].sock

        del logger
        gc.collect()

        assert sock.fileno() == -1

    def test_create_logger_raises_when_unreachable(self):
        """Test create logger raises when unreachable"""
        before = default()
        config = resolve(with_secondary_sink(True, "no-port-here"))

        with pytest.raises(SecondarySinkUnavailable):
            LoggerFactory.create_logger(config, io.StringIO())

        assert default() is before

    def test_new_logger_exits_when_unreachable(self, capsys):
        """Test new logger exits when unreachable"""
        before = default()

        with pytest.raises(SystemExit) as exc_info:
            new_logger(with_secondary_sink(True, "no-port-here"))

        assert exc_info.value.code == 1
        assert "dial udp" in capsys.readouterr().err
        assert default() is before


class TestNewLogger:
    """End-to-end scenarios through new_logger"""

    def test_warn_text_scenario(self, capsys):
        """Test warn text scenario"""
        logger = new_logger(with_level("warn"), with_json(False))
        try:
            logger.info("ignored")
            assert capsys.readouterr().out == ""

            logger.warn("quota exceeded", Attr("req_id", "abc"))
        finally:
            logger.close()

        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 1
        assert "level=WARN" in lines[0]
        assert 'msg="quota exceeded"' in lines[0]
        assert "req_id=abc" in lines[0]

    def test_defaults_scenario(self, capsys):
        """Test defaults scenario"""
        logger = new_logger()
        try:
            logger.info("ready")
        finally:
            logger.close()

        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 1
        payload = json.loads(lines[0])
        assert payload["level"] == "INFO"
        assert payload["msg"] == "ready"
        assert "source" in payload
        assert default() is logger


class TestLoggerBuilderIntegration:
    """Integration tests for LoggerBuilder"""

    def test_logger_builder_full_workflow(self):
        """Test logger builder full workflow"""
        stream = io.StringIO()
        logger = (
            LoggerBuilder()
            .with_level("DEBUG")
            .with_json(False)
            .with_set_default(False)
            .with_extra(component="test", version="1.0")
            .build(stream)
        )
        try:
            logger.debug("Debug message")
            logger.info("Info message")
            logger.warning("Warning message")
        finally:
            logger.close()

        content = stream.getvalue()
        assert 'msg="Debug message"' in content
        assert 'msg="Info message"' in content
        assert 'msg="Warning message"' in content
        assert content.count("component=test version=1.0") == 3
