"""Tests that run synthesized scripts with a real shell, as the remote side would."""

import os
import shutil
import stat
import subprocess
import time

import pytest

from rctravel.bundle import get_filter, package, Payload, RcSource
from rctravel.session import Multiplexer, ShellProfile, synthesize

pytestmark = pytest.mark.skipif(
    not all(shutil.which(tool) for tool in ["sh", "base64", "gzip", "tar"]),
    reason="requires sh, base64, gzip and tar",
)

# Path of the bundle directory as seen by the landing shell itself
OWN_BUNDLE_DIR = '"$TMPDIR/.rctravel.$(id -u).$$"'


def oracle(attached):
    return Multiplexer("fake", ".fake.conf", "-f", "true" if attached else "false")


def snapshot_shell(destination):
    """A shell that copies the bundle directory instead of being interactive."""
    return ShellProfile(
        "snapshot", ".bashrc", 'cp -R "{dir}" "' + str(destination) + '" && false'
    )


def waiting_shell(result):
    """A shell that checks if its bundle directory still exists after a while."""
    return ShellProfile(
        "waiting",
        ".bashrc",
        'sleep 2; if [ -f "{dir}/.bashrc" ]; then echo present; else echo gone; fi'
        ' > "' + str(result) + '"',
    )


def start(script, tmp_dir, prelude=None):
    environ = dict(os.environ, TMPDIR=str(tmp_dir))
    environ.pop("RCTRAVEL_DIR", None)

    if prelude is None:
        command = ["sh", "-c", script]
    else:
        # The prelude runs in the landing shell itself, so it shares its process id
        command = ["sh", "-c", prelude + '; eval "$1"', "sh", script]

    return subprocess.Popen(command, env=environ)


def land(script, tmp_dir, prelude=None):
    proc = start(script, tmp_dir, prelude)
    proc.wait()

    return proc


@pytest.fixture
def landing(tmp_path):
    path = tmp_path / "landing"
    path.mkdir()

    return path


@pytest.fixture
def payload(rc_dir):
    return package(RcSource(str(rc_dir), ".bashrc"), get_filter("gzip"))


def test_land_and_clean_up(payload, landing, tmp_path):
    snapshot = tmp_path / "snapshot"
    script = synthesize(payload, False, snapshot_shell(snapshot), oracle(False))

    result = land(script, landing)

    # The exit code of the shell is masked
    assert result.returncode == 0

    assert os.listdir(snapshot) == [".bashrc"]
    assert (snapshot / ".bashrc").read_text().splitlines() == ["alias ll='ls -l'"]

    # The bundle directory is gone after the shell exits
    assert os.listdir(landing) == []


def test_land_with_attached_multiplexer(payload, landing, tmp_path):
    script = synthesize(payload, False, snapshot_shell(tmp_path / "s"), oracle(True))

    proc = land(script, landing)
    assert proc.returncode == 0

    (bundle_dir,) = landing.iterdir()

    assert bundle_dir.name == f".rctravel.{os.getuid()}.{proc.pid}"
    assert (bundle_dir / ".bashrc").is_file()

    # Neither group nor others can access the bundle
    for path in [bundle_dir, bundle_dir / ".bashrc"]:
        assert stat.S_IMODE(path.stat().st_mode) & 0o077 == 0


def test_landings_get_their_own_directories(payload, landing, tmp_path):
    script = synthesize(payload, False, snapshot_shell(tmp_path / "s"), oracle(True))

    first = land(script, landing)
    second = land(script, landing)

    assert first.returncode == second.returncode == 0

    assert sorted(p.name for p in landing.iterdir()) == sorted(
        f".rctravel.{os.getuid()}.{proc.pid}" for proc in [first, second]
    )


def test_concurrent_landings(payload, landing, tmp_path):
    result = tmp_path / "result"
    waiting = synthesize(payload, False, waiting_shell(result), oracle(False))
    quick = synthesize(payload, False, snapshot_shell(tmp_path / "s"), oracle(False))

    waiting_proc = start(waiting, landing)

    try:
        for _ in range(50):
            if os.listdir(landing):
                break

            time.sleep(0.1)

        # Another session with the same rc-files that exits right away
        assert land(quick, landing).returncode == 0
    finally:
        waiting_proc.wait()

    assert waiting_proc.returncode == 0
    assert result.read_text().strip() == "present"
    assert os.listdir(landing) == []


def test_land_in_existing_own_directory(payload, landing, tmp_path):
    snapshot = tmp_path / "snapshot"
    script = synthesize(payload, False, snapshot_shell(snapshot), oracle(False))

    proc = land(script, landing, prelude=f"mkdir {OWN_BUNDLE_DIR}")

    assert proc.returncode == 0
    assert os.listdir(snapshot) == [".bashrc"]
    assert os.listdir(landing) == []


def test_land_refuses_symbolic_link(payload, landing, tmp_path):
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    elsewhere.chmod(0o777)

    snapshot = tmp_path / "snapshot"
    script = synthesize(payload, False, snapshot_shell(snapshot), oracle(False))

    proc = land(script, landing, prelude=f'ln -s "{elsewhere}" {OWN_BUNDLE_DIR}')

    assert proc.returncode != 0

    # Nothing was unpacked through the link and no shell was started
    assert os.listdir(elsewhere) == []
    assert not snapshot.exists()


def test_land_corrupt_payload(payload, landing, tmp_path):
    corrupt = Payload("bm90IGEgdGFyYmFsbA==", payload.filter, payload.options)
    script = synthesize(corrupt, False, snapshot_shell(tmp_path / "s"), oracle(True))

    assert land(script, landing).returncode != 0

    assert not (tmp_path / "s").exists()
    assert os.listdir(landing) == []
