# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

import pytest
from pimo import metrics
from pimo.config import get_cfg, reload_cfg
from pimo.options import parse_arguments
from pimo.writers.memory_writer import MemoryWriter
from utils import SpyWriter

@pytest.fixture(autouse=True)
def _reset_cfg_between_tests(monkeypatch, tmp_path):
    for k in ("PIGMONGO_WRITER__TYPE", "PIGMONGO_WRITER__URI",
              "PIGMONGO_LOG__OPS", "PIGMONGO_STORAGE__ARGS"):
        monkeypatch.delenv(k, raising=False)
    reload_cfg(str(tmp_path / "missing.yml"))
    cfg = get_cfg()
    cfg.set("writer.type", "memory")
    metrics.reset()
    yield

@pytest.fixture()
def cfg():
    return get_cfg()

@pytest.fixture()
def no_options():
    return parse_arguments([])

@pytest.fixture()
def writer():
    return SpyWriter(MemoryWriter())
