"""Module that serializes the minified rc-files into a bounded, text-safe payload."""

from __future__ import annotations

import base64
import bz2
from dataclasses import dataclass, field
import fnmatch
import gzip
import hashlib
import io
import lzma
import os
import tarfile
import tempfile
from typing import Callable, Dict, List, Optional, Tuple

import lz4.frame

import rctravel.constants as constants
from rctravel.logger import log
from .common import PayloadTooLarge
from .minify import minify_tree
from .source import RcSource


@dataclass(frozen=True)
class CompressionFilter:
    """
    A compression method that both sides of a session agree on.

    The payload is compressed locally with the Python implementation and decompressed
    on the remote side by piping it through the remote command.
    """

    name: str
    compress: Callable[[bytes], bytes]
    decompress: Callable[[bytes], bytes]
    remote_command: str


FILTERS: Dict[str, CompressionFilter] = {
    f.name: f
    for f in [
        CompressionFilter(
            "gzip",
            lambda data: gzip.compress(data, compresslevel=9, mtime=0),
            gzip.decompress,
            "gzip -dc",
        ),
        CompressionFilter(
            "bzip2",
            lambda data: bz2.compress(data, compresslevel=9),
            bz2.decompress,
            "bzip2 -dc",
        ),
        CompressionFilter(
            "xz",
            lambda data: lzma.compress(data, format=lzma.FORMAT_XZ, preset=9),
            lzma.decompress,
            "xz -dc",
        ),
        CompressionFilter(
            "lz4",
            lambda data: lz4.frame.compress(
                data, compression_level=lz4.frame.COMPRESSIONLEVEL_MAX
            ),
            lz4.frame.decompress,
            "lz4 -dc",
        ),
    ]
}


def get_filter(name: str) -> CompressionFilter:
    """Look up a compression filter by name."""
    try:
        return FILTERS[name]
    except KeyError:
        raise ValueError(
            f"unknown compression filter {name} (expected one of {', '.join(FILTERS)})"
        )


@dataclass(frozen=True)
class ArchiveOptions:
    """
    Options shared by the archiving and the extraction of the payload.

    Exclusion patterns are matched against the relative path and the name of every
    archived file. The extraction flags are handed to tar on the remote side.
    """

    exclude: Tuple[str, ...] = ()
    extract_flags: Tuple[str, ...] = ()

    def excludes(self, relative_path: str) -> bool:
        """Check if the file at the relative path should stay behind."""
        name = os.path.basename(relative_path)

        return any(
            fnmatch.fnmatch(relative_path, pattern) or fnmatch.fnmatch(name, pattern)
            for pattern in self.exclude
        )


@dataclass(frozen=True)
class Payload:
    """A serialized, compressed and base64 encoded directory of rc-files."""

    encoded: str
    filter: CompressionFilter
    options: ArchiveOptions = field(default_factory=ArchiveOptions)

    def __len__(self) -> int:
        """Get the length of the encoded payload."""
        return len(self.encoded)

    @property
    def digest(self) -> str:
        """Get a short identifier that is unique for the contents of the payload."""
        return hashlib.sha256(self.encoded.encode()).hexdigest()[:16]

    def open_archive(self) -> tarfile.TarFile:
        """Decode and decompress the payload into a readable tar archive."""
        data = self.filter.decompress(base64.b64decode(self.encoded))
        return tarfile.open(fileobj=io.BytesIO(data), mode="r:")

    def members(self) -> List[tarfile.TarInfo]:
        """List the entries of the payload."""
        with self.open_archive() as tar:
            return tar.getmembers()

    def extract(self, path: str) -> None:
        """Unpack the payload into a local directory."""
        with self.open_archive() as tar:
            if hasattr(tarfile, "data_filter"):
                tar.extractall(path, filter="data")
            else:
                tar.extractall(path)


def _normalize_owner(info: tarfile.TarInfo) -> tarfile.TarInfo:
    # Files are owned by whoever unpacks them on the other side.
    info.uid = info.gid = 0
    info.uname = info.gname = ""

    return info


def serialize(directory: str, options: ArchiveOptions) -> bytes:
    """Serialize the contents of the directory into an uncompressed tar archive."""
    buf = io.BytesIO()

    with tarfile.open(
        fileobj=buf, mode="w:", format=tarfile.GNU_FORMAT, dereference=True
    ) as tar:
        for dirpath, dirnames, filenames in os.walk(directory):
            dirnames.sort()

            for name in dirnames + sorted(filenames):
                path = os.path.join(dirpath, name)
                relative_path = os.path.relpath(path, directory)

                if options.excludes(relative_path):
                    log.debug(f"excluding {relative_path}")

                    if name in dirnames:
                        dirnames.remove(name)

                    continue

                tar.add(
                    path,
                    arcname=relative_path,
                    recursive=False,
                    filter=_normalize_owner,
                )

    return buf.getvalue()


def encode(
    directory: str,
    compression: CompressionFilter,
    options: ArchiveOptions,
    max_size: int = constants.MAX_PAYLOAD_SIZE,
    label: Optional[str] = None,
) -> Payload:
    """
    Turn a directory into a payload that fits in a single shell argument.

    Raises PayloadTooLarge if the encoded payload reaches the size ceiling.
    """
    data = compression.compress(serialize(directory, options))
    encoded = base64.b64encode(data).decode("ascii")

    log.debug(
        f"encoded {directory} with {compression.name} into {len(encoded)} bytes"
    )

    if len(encoded) >= max_size:
        raise PayloadTooLarge(label or directory, len(encoded), max_size)

    return Payload(encoded, compression, options)


def package(
    source: RcSource,
    compression: CompressionFilter,
    options: Optional[ArchiveOptions] = None,
    max_size: int = constants.MAX_PAYLOAD_SIZE,
) -> Payload:
    """
    Minify and encode the rc-files of the source.

    The minified copy lives in a private staging directory that is removed again
    before returning, whether packaging succeeded or not.
    """
    if options is None:
        options = ArchiveOptions()

    # Fail before any temporary resources exist.
    source.validate()

    with tempfile.TemporaryDirectory(prefix="rctravel_") as staging_dir:
        minified_dir = minify_tree(source, staging_dir)

        return encode(minified_dir, compression, options, max_size, source.path)
