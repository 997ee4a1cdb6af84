"""
Modules that turn a directory of rc-files into a payload that travels inline.

The rc-files are copied into a private staging directory, minified, serialized into a
tar archive, compressed and finally base64 encoded. The result is a single token
without whitespace or quotes that can be embedded in a remote command line, as long as
it stays below the size ceiling.
"""

from .archive import (
    ArchiveOptions,
    CompressionFilter,
    FILTERS,
    get_filter,
    package,
    Payload,
)
from .common import ConfigurationMissing, PayloadTooLarge, RcTravelError
from .source import RcSource

__all__ = [
    "ArchiveOptions",
    "CompressionFilter",
    "ConfigurationMissing",
    "FILTERS",
    "get_filter",
    "package",
    "Payload",
    "PayloadTooLarge",
    "RcSource",
    "RcTravelError",
]
