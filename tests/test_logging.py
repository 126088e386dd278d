"""Tests for structured logging setup."""

import logging

from rich.logging import RichHandler

from job_board.config import Settings
from job_board.utils.logging import configure_logging, get_logger, log_function_call


class CollectingHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


class TestConfigureLogging:
    def test_installs_rich_handler_on_root(self):
        configure_logging(Settings(log_level="INFO"))

        assert any(isinstance(h, RichHandler) for h in logging.getLogger().handlers)

    def test_service_events_reach_stdlib_handlers(self):
        configure_logging(Settings(log_level="INFO", debug=False))
        target = logging.getLogger("job_board.tests.events")
        handler = CollectingHandler()
        target.addHandler(handler)
        try:
            get_logger("job_board.tests.events").bind(component="job_service").info("Job created", job_id="j-1")
        finally:
            target.removeHandler(handler)

        assert len(handler.records) == 1
        message = handler.records[0].getMessage()
        assert '"event": "Job created"' in message
        assert '"job_id": "j-1"' in message
        assert '"component": "job_service"' in message

    def test_level_filters_debug(self):
        configure_logging(Settings(log_level="WARNING"))
        target = logging.getLogger("job_board.tests.filtered")
        handler = CollectingHandler()
        target.addHandler(handler)
        try:
            get_logger("job_board.tests.filtered").info("Hidden")
        finally:
            target.removeHandler(handler)
            configure_logging(Settings(log_level="INFO"))

        assert handler.records == []


def test_log_function_call_drops_binary_and_private_values():
    context = log_function_call("upload", filename="cv.pdf", content=b"%PDF", _secret="x")
    assert context == {"function": "upload", "parameters": {"filename": "cv.pdf"}}
