import base64
import io
import os
import tarfile

import pytest

from rctravel.bundle import (
    ArchiveOptions,
    ConfigurationMissing,
    FILTERS,
    get_filter,
    package,
    PayloadTooLarge,
    RcSource,
)
from rctravel.bundle.archive import encode, serialize


@pytest.fixture
def source(rc_dir):
    return RcSource(str(rc_dir), ".bashrc")


def test_get_filter():
    assert get_filter("xz").remote_command == "xz -dc"

    with pytest.raises(ValueError) as e:
        get_filter("zip")

    assert "unknown compression filter zip" in str(e.value)


@pytest.mark.parametrize("name", sorted(FILTERS))
def test_filters_reversible(name):
    compression = FILTERS[name]
    data = b"alias ll='ls -l'\n" * 100

    assert compression.decompress(compression.compress(data)) == data


def test_package_anchor_only(source, tmp_path):
    payload = package(source, get_filter("gzip"))

    assert 0 < len(payload) < 65536

    destination = tmp_path / "extracted"
    payload.extract(str(destination))

    assert os.listdir(destination) == [".bashrc"]
    assert (destination / ".bashrc").read_text() == "alias ll='ls -l'\n"


def test_payload_is_single_token(source):
    payload = package(source, get_filter("xz"))

    assert "\n" not in payload.encoded
    assert " " not in payload.encoded
    assert "'" not in payload.encoded

    # Standard base64 that any base64 -d understands
    base64.b64decode(payload.encoded, validate=True)


def test_payload_relative_paths(source, rc_dir):
    (rc_dir / "bin").mkdir()
    (rc_dir / "bin" / "tool").write_text("#!/bin/sh\necho tool # prints\n")

    payload = package(source, get_filter("gzip"))

    names = sorted(member.name for member in payload.members())
    assert names == [".bashrc", "bin", "bin/tool"]

    for member in payload.members():
        assert not os.path.isabs(member.name)
        assert member.uid == 0
        assert member.uname == ""


def test_payload_without_symlinks(source, rc_dir, tmp_path):
    target = tmp_path / "inputrc"
    target.write_text("set editing-mode vi\n")
    (rc_dir / ".inputrc").symlink_to(target)

    payload = package(source, get_filter("gzip"))

    members = {member.name: member for member in payload.members()}

    assert not any(member.issym() or member.islnk() for member in members.values())
    assert members[".inputrc"].isfile()

    with payload.open_archive() as tar:
        f = tar.extractfile(".inputrc")
        assert f is not None
        assert f.read() == b"set editing-mode vi\n"


def test_payload_excludes(source, rc_dir):
    (rc_dir / ".bashrc.swp").write_text("junk")
    (rc_dir / ".git").mkdir()
    (rc_dir / ".git" / "HEAD").write_text("ref: refs/heads/main\n")

    options = ArchiveOptions(exclude=("*.swp", ".git"))
    payload = package(source, get_filter("gzip"), options)

    assert [member.name for member in payload.members()] == [".bashrc"]


def test_payload_digest_depends_on_contents(source, rc_dir):
    first = package(source, get_filter("gzip"))
    second = package(source, get_filter("gzip"))

    (rc_dir / ".inputrc").write_text("set bell-style none\n")
    third = package(source, get_filter("gzip"))

    assert first.digest == second.digest
    assert first.digest != third.digest


def test_package_missing_anchor(tmp_path, staging_root):
    with pytest.raises(ConfigurationMissing) as e:
        package(RcSource(str(tmp_path), ".bashrc"), get_filter("gzip"))

    assert "missing anchor file .bashrc" in str(e.value)
    assert os.listdir(staging_root) == []


def test_package_too_large(source, rc_dir, staging_root):
    # Random data doesn't compress
    (rc_dir / "blob").write_bytes(os.urandom(64 * 1024))

    with pytest.raises(PayloadTooLarge) as e:
        package(source, get_filter("xz"))

    assert e.value.ceiling == 65536
    assert e.value.size >= 65536
    assert str(rc_dir) in str(e.value)
    assert "65536" in str(e.value)

    # The staging directory is gone
    assert os.listdir(staging_root) == []


def test_package_configurable_ceiling(source, staging_root):
    with pytest.raises(PayloadTooLarge):
        package(source, get_filter("gzip"), max_size=16)

    assert os.listdir(staging_root) == []


def test_package_cleans_up_on_success(source, staging_root):
    package(source, get_filter("gzip"))

    assert os.listdir(staging_root) == []


def test_serialize_uncompressed(rc_dir):
    data = serialize(str(rc_dir), ArchiveOptions())

    with tarfile.open(fileobj=io.BytesIO(data)) as tar:
        assert tar.getnames() == [".bashrc"]


def test_encode_label(rc_dir):
    with pytest.raises(PayloadTooLarge) as e:
        encode(str(rc_dir), get_filter("gzip"), ArchiveOptions(), 1, "~/.rctravel")

    assert e.value.directory == "~/.rctravel"
