import logging

from cip.utils.logging import QUIET_LOGGERS, configure_logging


def test_configure_logging_quiets_request_loggers():
    configure_logging("DEBUG")

    for name in QUIET_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING
    assert "uvicorn.access" in QUIET_LOGGERS
