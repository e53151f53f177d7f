"""
Pytest configuration and fixtures for joman tests.

Keypair generation is the slow part of the suite, so two keypairs are
generated once per session and shared.
"""

from pathlib import Path
from typing import Tuple

import pytest

from joman import crypto, logic


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory, monkeypatch) -> Path:
    """Point the config directory at a throwaway location."""
    config_home = tmp_path_factory.mktemp("config")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.setenv("APPDATA", str(config_home))
    monkeypatch.delenv("VISUAL", raising=False)
    monkeypatch.delenv("EDITOR", raising=False)
    return config_home


@pytest.fixture(scope="session")
def keypair() -> Tuple[str, str]:
    """(private_pem, public_pem) shared by the whole session."""
    return crypto.generate_keypair()


@pytest.fixture(scope="session")
def other_keypair() -> Tuple[str, str]:
    """A second, unrelated keypair."""
    return crypto.generate_keypair()


@pytest.fixture
def journal_root(tmp_path: Path) -> Path:
    """A directory holding an initialized journal."""
    logic.init_journal(tmp_path)
    return tmp_path
