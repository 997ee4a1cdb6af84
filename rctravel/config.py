"""Module for configuration variables with defaults that are overridable by a file."""

from __future__ import annotations

from configparser import ConfigParser, SectionProxy
from dataclasses import dataclass, field
import os
from typing import List

import rctravel.constants as constants
from rctravel.logger import log


@dataclass
class BundleConfig:
    """Configuration variables related to the files that travel."""

    path: str = os.path.expanduser(constants.DEFAULT_BUNDLE_PATH)

    max_payload_size: int = constants.MAX_PAYLOAD_SIZE
    shell: str = "bash"

    # Glob patterns of files that never travel
    exclude: List[str] = field(default_factory=list)

    @staticmethod
    def load(section: SectionProxy) -> BundleConfig:
        """Load overridden variables from a section within a config file."""
        config = BundleConfig()

        config.path = os.path.expanduser(section.get("path", fallback=config.path))

        config.max_payload_size = section.getint(
            "max_payload_size", fallback=config.max_payload_size
        )
        config.shell = section.get("shell", fallback=config.shell)
        config.exclude = section.get("exclude", fallback="").split()

        return config


@dataclass
class TransportConfig:
    """Configuration variables related to the transports and the remote side."""

    # The remote shell transport assumes a capable remote with xz available, while
    # container images are often minimal and only ship gzip.
    ssh_filter: str = "xz"
    container_filter: str = "gzip"
    switch_filter: str = "gzip"

    container_runtime: str = "docker"
    multiplexer: str = "tmux"

    @staticmethod
    def load(section: SectionProxy) -> TransportConfig:
        """Load overridden variables from a section within a config file."""
        config = TransportConfig()

        config.ssh_filter = section.get("ssh_filter", fallback=config.ssh_filter)
        config.container_filter = section.get(
            "container_filter", fallback=config.container_filter
        )
        config.switch_filter = section.get(
            "switch_filter", fallback=config.switch_filter
        )
        config.container_runtime = section.get(
            "container_runtime", fallback=config.container_runtime
        )
        config.multiplexer = section.get("multiplexer", fallback=config.multiplexer)

        return config


@dataclass
class SwitchConfig:
    """Configuration variables related to switching to another account."""

    default_user: str = constants.ROOT_USER

    # Membership of any of these groups suggests that sudo is permitted
    trusted_groups: List[str] = field(
        default_factory=lambda: ["sudo", "wheel", "admin"]
    )

    # Accounts that may always use sudo without confirmation
    always_allowed: List[str] = field(default_factory=list)

    @staticmethod
    def load(section: SectionProxy) -> SwitchConfig:
        """Load overridden variables from a section within a config file."""
        config = SwitchConfig()

        config.default_user = section.get("default_user", fallback=config.default_user)

        if "trusted_groups" in section:
            config.trusted_groups = section["trusted_groups"].split()

        config.always_allowed = section.get("always_allowed", fallback="").split()

        return config


@dataclass
class Config:
    """Configuration variables."""

    bundle: BundleConfig = field(default_factory=BundleConfig)
    transport: TransportConfig = field(default_factory=TransportConfig)
    su: SwitchConfig = field(default_factory=SwitchConfig)

    @staticmethod
    def load(filename: str) -> Config:
        """Load overridden configuration variables from a config file."""
        parser = ConfigParser()

        config = Config()

        try:
            with open(os.path.expanduser(filename), "r") as f:
                parser.read_string(f.read(), filename)

            if "bundle" in parser:
                config.bundle = BundleConfig.load(parser["bundle"])

            if "transport" in parser:
                config.transport = TransportConfig.load(parser["transport"])

            if "su" in parser:
                config.su = SwitchConfig.load(parser["su"])
        except FileNotFoundError:
            log.info(f"no config file at {filename}")
        except Exception as e:
            # An unreadable config file is not considered a fatal error since we can
            # fall back to defaults.
            log.error(f"failed to read config file {filename}: {e}")
        else:
            log.info(f"loaded config: {config}")

        return config
