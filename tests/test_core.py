from __future__ import annotations

import logging

from adapter_registry.adapters.base import AdapterError, AdapterErrorCode, WalletErrorCode
from adapter_registry.core.logging import StructuredLogFormatter, configure_logging, get_logger, log_progress


def test_formatter_orders_focus_extras_first():
    record = logging.LogRecord("adapter_registry.test", logging.INFO, __file__, 1, "Adapter resolved", (), None)
    record.zeta = 1
    record.adapter = "memory"
    record.phase = "resolve"
    record.environments = ("server", "browser")

    output = StructuredLogFormatter().format(record)

    assert "| INFO | adapter_registry.test | Adapter resolved" in output
    assert output.endswith("| phase=resolve adapter=memory environments=[server, browser] zeta=1")


def test_formatter_colours_levels_when_enabled():
    record = logging.LogRecord("adapter_registry.test", logging.ERROR, __file__, 1, "failed", (), None)
    assert "\033[31mERROR\033[0m" in StructuredLogFormatter(use_color=True).format(record)
    assert record.levelname == "ERROR"


def test_get_logger_attaches_tags_and_extra():
    logger = get_logger("adapter_registry.tests.tags", tags=["ci"], extra={"adapter": "memory", "version": None})
    assert logger.extra == {"tags": ("ci",), "adapter": "memory"}


def test_log_progress_merges_adapter_extras(caplog):
    logger = get_logger("adapter_registry.tests.progress", level="INFO", extra={"module_name": "wallet"})

    with caplog.at_level(logging.INFO, logger="adapter_registry.tests.progress"):
        log_progress(logger, "Adapter constructed", phase="construct", status="ok", extra={"version": "1.0.0"})

    record = caplog.records[-1]
    assert record.getMessage() == "Adapter constructed"
    assert (record.module_name, record.phase, record.status, record.version) == ("wallet", "construct", "ok", "1.0.0")


def test_call_site_extra_is_merged_with_bound_fields(caplog):
    logger = get_logger("adapter_registry.tests.merge", level="INFO", extra={"module_name": "crosschain", "adapter": "memory"})

    with caplog.at_level(logging.INFO, logger="adapter_registry.tests.merge"):
        logger.info("Cross-chain operation started", extra={"operation_id": "op-1", "adapter": "override"})
        logger.bind(version="1.0.0", method=None).warning("bound")

    started, bound = caplog.records[-2:]
    assert (started.module_name, started.adapter, started.operation_id) == ("crosschain", "override", "op-1")
    assert (bound.adapter, bound.version) == ("memory", "1.0.0")
    assert not hasattr(bound, "method")


def test_configure_logging_keeps_host_configuration(monkeypatch):
    root = logging.getLogger()
    host = logging.StreamHandler()
    monkeypatch.setattr(root, "handlers", [host])
    previous = root.level
    root.setLevel(logging.DEBUG)
    try:
        configure_logging("ERROR")
        get_logger("adapter_registry.tests.host")

        assert root.handlers == [host]
        assert root.level == logging.DEBUG
    finally:
        root.setLevel(previous)


def test_forced_configuration_installs_a_single_structured_handler(monkeypatch):
    root = logging.getLogger()
    host = logging.NullHandler()
    monkeypatch.setattr(root, "handlers", [host])
    previous = root.level
    try:
        configure_logging("INFO", force=True)
        configure_logging("DEBUG", force=True)

        structured = [handler for handler in root.handlers if isinstance(handler.formatter, StructuredLogFormatter)]
        assert len(structured) == 1
        assert host in root.handlers
        assert root.level == logging.DEBUG
    finally:
        root.setLevel(previous)


def test_adapter_error_shape():
    cause = ValueError("insufficient funds")
    error = AdapterError("Wallet method 'send_transaction' failed", code=WalletErrorCode.INSUFFICIENT_FUNDS, method_name="send_transaction", cause=cause)

    assert error.code == "INSUFFICIENT_FUNDS"
    assert str(error) == "[INSUFFICIENT_FUNDS] Wallet method 'send_transaction' failed"
    assert error.__cause__ is cause
    assert error.to_dict()["cause"] == repr(cause)
    assert str(AdapterError("plain")) == "plain"
    assert AdapterErrorCode.METHOD_NOT_SUPPORTED == "METHOD_NOT_SUPPORTED"
