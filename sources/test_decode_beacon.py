"""Tests for the command line entry point, logging and timing helpers."""

import logging

import pytest

import app_logger
from app_logger import log_buffer, logger, set_level
from beacon import decode
from decode_beacon import main
from timing_decorator import timed

PAYLOAD = "1234567890ABCDEF1234567890ABCDEF" + "0003" + "0007" + "C6"


@pytest.fixture
def debug_logging():
    set_level(logging.DEBUG)
    log_buffer.clear()
    yield log_buffer
    set_level(app_logger.LOG_LEVEL)
    log_buffer.clear()


class TestMain:

    def test_decodes_payload(self, capsys):
        assert main([PAYLOAD, "--rssi", "-70"]) == 0

        out = capsys.readouterr().out
        assert out.strip() == (
            "UUID: 12345678-90AB-CDEF-1234-567890ABCDEF CODE: 47pj "
            "PROXIMITY: far DISTANCE: 4.0 m"
        )

    def test_reports_rejected_payload(self, capsys):
        assert main([PAYLOAD, "abc", "-r", "-70"]) == 1

        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 2
        assert lines[1] == "not a beacon: abc"

    def test_requires_rssi(self):
        with pytest.raises(SystemExit):
            main([PAYLOAD])


class TestLogging:

    def test_rejection_logged_at_debug(self, debug_logging):
        assert decode("abc", -70) is None

        assert any("rejected payload 'abc'" in line for line in debug_logging)

    def test_rejection_silent_at_info(self):
        log_buffer.clear()

        assert decode("abc", -70) is None
        assert not any("rejected" in line for line in log_buffer)

    def test_logger_surface(self):
        assert callable(set_level)
        assert not hasattr(app_logger, "log_debug")

    def test_memory_handler_capacity(self):
        handler = app_logger.MemoryHandler(capacity=2)
        handler.setFormatter(logging.Formatter("%(message)s"))
        for i in range(3):
            handler.emit(logger.makeRecord(logger.name, logging.INFO, __file__, 0, str(i), None, None))

        assert list(handler.buffer) == ["1", "2"]


class TestTimed:

    def test_returns_result_and_logs(self, debug_logging):
        @timed("square")
        def square(x):
            return x * x

        assert square(3) == 9
        assert any("[square] took" in line for line in debug_logging)

    def test_logs_when_raising(self, debug_logging):
        @timed()
        def boom():
            raise ValueError("boom")

        with pytest.raises(ValueError):
            boom()
        assert any("boom] took" in line for line in debug_logging)
