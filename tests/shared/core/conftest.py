# -*- coding: utf-8 -*-
# conftest.py: fixtures y utilidades comunes para core

import pytest


@pytest.fixture
def no_sleep(monkeypatch):
    """
    Evita esperas reales en backoff (hace que asyncio.sleep sea no-op).
    """
    async def _noop(_):
        return None
    monkeypatch.setattr("asyncio.sleep", _noop)
    return True
# Fin del archivo
