"""
Module defining the command-line arguments of the launchers and parsers for them.

The launchers accept the arguments of their transport as-is, so rctravel's own options
all carry an --rc- prefix to stay out of the way of the transport's flags. Anything that
isn't recognized as one of them is passed on to the transport in the original order.
"""

from __future__ import annotations

import argparse
from typing import List, Optional

from rctravel.bundle import FILTERS
from rctravel.constants import DEFAULT_CONFIG_PATH, VERSION
from rctravel.session import MULTIPLEXERS, PROFILES


class Arguments(argparse.Namespace):
    """Parsed command-line arguments shared by all launchers."""

    rc_dir: Optional[str]
    rc_filter: Optional[str]
    rc_shell: Optional[str]
    rc_multiplexer: Optional[str]
    rc_config: str

    debug: bool
    dry_run: bool
    list: bool

    transport_args: List[str]

    # Program name and description, overridden by every launcher
    prog = "rctravel"
    description = "Travel with your rc-files."
    usage: Optional[str] = None

    # Whether unrecognized arguments belong to the transport
    passthrough = True

    @classmethod
    def parse(cls, args: Optional[List[str]] = None) -> Arguments:
        """
        Parse command-line arguments from the given list of strings.

        Defaults to sys.argv if none are specified.
        """
        parser = cls._get_parser()
        namespace = cls()

        if cls.passthrough:
            _, namespace.transport_args = parser.parse_known_args(args, namespace)
        else:
            parser.parse_args(args, namespace)
            namespace.transport_args = []

        namespace._validate(parser)

        return namespace

    def _validate(self, parser: argparse.ArgumentParser) -> None:
        """Check combinations of arguments that argparse can't express."""

    @classmethod
    def _get_parser(cls) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog=cls.prog,
            description=cls.description,
            usage=cls.usage,
            allow_abbrev=False,
        )

        parser.add_argument(
            "--version",
            action="version",
            version=f"%(prog)s {VERSION}",
            help="show the program version",
        )

        # Source of the rc-files, defaults to the config file
        parser.add_argument(
            "--rc-dir", type=str, help="directory with the rc-files to travel"
        )

        # Compression and landing options
        parser.add_argument(
            "--rc-filter",
            type=str,
            choices=sorted(FILTERS),
            help="compression filter for the payload",
        )
        parser.add_argument(
            "--rc-shell",
            type=str,
            choices=sorted(PROFILES),
            help="interactive shell to start on the remote side",
        )
        parser.add_argument(
            "--rc-multiplexer",
            type=str,
            choices=sorted(MULTIPLEXERS),
            help="multiplexer whose attached sessions keep the rc-files alive",
        )

        # Path to (optional) config file
        parser.add_argument(
            "--rc-config",
            type=str,
            help=f"path to config file (default is {DEFAULT_CONFIG_PATH})",
            default=DEFAULT_CONFIG_PATH,
        )

        # Enable debug output
        parser.add_argument(
            "--rc-debug",
            action="store_true",
            help="enable debug information",
            dest="debug",
        )

        # Inspect what would travel without starting a session
        parser.add_argument(
            "--rc-dry-run",
            action="store_true",
            help="print the remote script instead of running the transport",
            dest="dry_run",
        )
        parser.add_argument(
            "--rc-list",
            action="store_true",
            help="list the files in the payload instead of running the transport",
            dest="list",
        )

        cls._add_arguments(parser)

        return parser

    @classmethod
    def _add_arguments(cls, parser: argparse.ArgumentParser) -> None:
        """Add the arguments that are specific to a launcher."""


class SshArguments(Arguments):
    """Arguments of the remote shell launcher."""

    completion: bool

    prog = "rcssh"
    description = "Start an ssh session that brings your rc-files along."
    usage = "rcssh [--rc-option...] [ssh option...] destination"

    @classmethod
    def _add_arguments(cls, parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "--rc-completion",
            action="store_true",
            help="print bash completion that defers to the completion of ssh",
            dest="completion",
        )

    def _validate(self, parser: argparse.ArgumentParser) -> None:
        if not self.completion and not self.list and not self.transport_args:
            parser.error("missing destination")


class ContainerArguments(Arguments):
    """Arguments of the container launcher."""

    subcommand: str
    rc_runtime: Optional[str]

    prog = "rcdocker"
    description = "Run a shell in a container that brings your rc-files along."
    usage = "rcdocker [--rc-option...] subcommand [option...] container"

    @classmethod
    def _add_arguments(cls, parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "subcommand", type=str, help="container operation, e.g. exec or run"
        )
        parser.add_argument(
            "--rc-runtime",
            type=str,
            help="container runtime to invoke, e.g. docker or podman",
        )


class SwitchArguments(Arguments):
    """Arguments of the user switch launcher."""

    user: Optional[str]

    prog = "rcsu"
    description = "Switch to another account and bring your rc-files along."
    passthrough = False

    @classmethod
    def _add_arguments(cls, parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "user", type=str, nargs="?", help="account to switch to (default is root)"
        )


class InitArguments(argparse.Namespace):
    """Arguments of the bootstrap that runs inside every interactive shell."""

    portable: bool
    rc_shell: Optional[str]
    rc_multiplexer: Optional[str]
    rc_config: str

    @classmethod
    def parse(cls, args: Optional[List[str]] = None) -> InitArguments:
        """Parse command-line arguments from the given list of strings."""
        return cls._get_parser().parse_args(args, namespace=cls())

    @classmethod
    def _get_parser(cls) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="rctravel-init",
            description="Print shell code that activates travelled rc-files.",
            usage='eval "$(rctravel-init)"',
        )

        parser.add_argument(
            "--version",
            action="version",
            version=f"%(prog)s {VERSION}",
            help="show the program version",
        )

        parser.add_argument(
            "--portable",
            action="store_true",
            help="print a standalone version to paste into a travelled rc-file",
        )

        parser.add_argument("--rc-shell", type=str, choices=sorted(PROFILES))
        parser.add_argument("--rc-multiplexer", type=str, choices=sorted(MULTIPLEXERS))
        parser.add_argument(
            "--rc-config",
            type=str,
            help=f"path to config file (default is {DEFAULT_CONFIG_PATH})",
            default=DEFAULT_CONFIG_PATH,
        )

        return parser
