"""
Bytebeat Test Configuration
===========================

Shared fixtures for the bytebeat test suite.

It provides:
- The reference oracle fixture directory and its corpus
- A fresh default configuration for every test
"""

from pathlib import Path

import pytest

from bytebeat.config import set_default_config
from bytebeat.oracle import load_corpus


FIXTURES_DIR = Path(__file__).parent / "fixtures"

ORACLE_DIR = FIXTURES_DIR / "oracle"


# ═══════════════════════════════════════════════════════════════════════════════
# CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture(autouse=True)
def reset_default_config(monkeypatch):
    """
    Fixture: Isolate tests from the caller's environment.

    Clears the BYTEBEAT_* variables and the cached default configuration.
    """
    for name in (
        "BYTEBEAT_SAMPLE_RATE",
        "BYTEBEAT_DURATION",
        "BYTEBEAT_MAX_ERRORS",
        "BYTEBEAT_CC",
        "BYTEBEAT_CFLAGS",
    ):
        monkeypatch.delenv(name, raising=False)
    set_default_config(None)
    yield
    set_default_config(None)


# ═══════════════════════════════════════════════════════════════════════════════
# REFERENCE ORACLE FIXTURES
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture(scope="session")
def oracle_dir() -> Path:
    """
    Fixture: Directory holding corpus.csv and the <name>.bin references.
    """
    return ORACLE_DIR


@pytest.fixture(scope="session")
def corpus_entries(oracle_dir: Path):
    """
    Fixture: The reference corpus, loaded once per session.
    """
    return load_corpus(oracle_dir / "corpus.csv")
