from __future__ import annotations

import logging

from cep_lookup.logging_conf import configure_logging


def test_configure_logging_toggles_verbosity() -> None:
    configure_logging(verbose=True)
    assert logging.getLogger("cep_lookup").level == logging.DEBUG
    configure_logging(verbose=False)
    assert logging.getLogger("cep_lookup").level == logging.WARNING


def test_console_handler_writes_json_to_stderr() -> None:
    configure_logging()
    handlers = logging.getLogger("cep_lookup").handlers
    assert len(handlers) == 1
    assert handlers[0].formatter.__class__.__name__ == "JsonFormatter"
