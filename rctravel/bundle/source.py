"""Module that locates the directory of rc-files that travel."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping, Optional

import rctravel.constants as constants
from rctravel.logger import log
from .common import ConfigurationMissing


@dataclass(frozen=True)
class RcSource:
    """A directory of files to travel, along with the anchor file it must contain."""

    path: str
    anchor: str

    @property
    def anchor_path(self) -> str:
        """Get the full path of the anchor file."""
        return os.path.join(self.path, self.anchor)

    def validate(self) -> None:
        """Check that the directory contains the anchor file."""
        if not os.path.isfile(self.anchor_path):
            raise ConfigurationMissing(self.path, self.anchor)

    @staticmethod
    def resolve(
        path: str, anchor: str, environ: Optional[Mapping[str, str]] = None
    ) -> RcSource:
        """
        Determine the directory to travel.

        Inside a travelled session the configured directory usually doesn't exist, but
        the files that were unpacked for the current session do. If the marker variable
        points to such a directory that still has the anchor file, it is used instead so
        that the session can travel onwards.
        """
        if environ is None:
            environ = os.environ

        override = environ.get(constants.BUNDLE_DIR_VAR)

        if override:
            candidate = RcSource(override, anchor)

            if os.path.isfile(candidate.anchor_path):
                log.debug(f"travelling onwards from unpacked directory {override}")
                return candidate
            else:
                log.debug(f"ignoring {override} since it lacks {anchor}")

        return RcSource(os.path.expanduser(path), anchor)
