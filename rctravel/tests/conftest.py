"""Module with fixtures for a directory of rc-files and a config that points to it."""

import pytest

from rctravel.config import Config

BASHRC = """\
# Aliases
# that are needed
# everywhere
alias ll='ls -l'
"""


@pytest.fixture
def rc_dir(tmp_path):
    path = tmp_path / "rc"
    path.mkdir()

    (path / ".bashrc").write_text(BASHRC)

    return path


@pytest.fixture
def config(rc_dir):
    cfg = Config()
    cfg.bundle.path = str(rc_dir)

    return cfg


@pytest.fixture
def staging_root(tmp_path, monkeypatch):
    """Redirect temporary files to a directory that can be inspected afterwards."""
    path = tmp_path / "staging"
    path.mkdir()

    monkeypatch.setattr("tempfile.tempdir", str(path))

    return path
