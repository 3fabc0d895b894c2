# -*- coding: utf-8 -*-
import logging

import pytest


@pytest.fixture(autouse=True)
def _restore_logging():
    """
    setup_logging() reconfigura el root logger; se restaura tras cada test.
    """
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
# Fin del archivo tests/shared/config/conftest.py
