import logging

from booking_api.utils.my_logging import CorrelationIdFilter, correlation_id_var, setup_logging


def make_record():
    return logging.LogRecord("booking_api.test", logging.INFO, __file__, 1, "hello", None, None)


def test_filter_uses_current_correlation_id():
    token = correlation_id_var.set("req-42")
    try:
        record = make_record()
        CorrelationIdFilter().filter(record)
    finally:
        correlation_id_var.reset(token)

    assert record.correlation_id == "req-42"


def test_filter_outside_request_uses_placeholder():
    record = make_record()
    CorrelationIdFilter().filter(record)

    assert record.correlation_id == "-"


def test_setup_logging_is_idempotent():
    setup_logging()
    setup_logging()

    ours = [h for h in logging.getLogger().handlers if getattr(h, "booking_api", False)]
    assert len(ours) == 1
