"""Shared functionality of the launchers."""

from abc import ABC, abstractmethod
import contextlib
import os
import subprocess
import sys
from typing import Any, Callable, List, Mapping, Optional

from rctravel.args import Arguments
import rctravel.bundle as bundle
from rctravel.config import Config
from rctravel.logger import log, summarize
import rctravel.session as session


class Launcher(ABC):
    """
    Base class for launchers that hand a synthesized script to a transport.

    The rc-files are packaged and turned into a script in the same way for every
    transport; subclasses only decide how the script is handed over.
    """

    # Name of the transport for messages
    transport = "transport"

    def __init__(
        self,
        args: Arguments,
        config: Config,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """Initialize the launcher based on command-line arguments and config."""
        self._args = args
        self._config = config
        self._environ = os.environ if environ is None else environ

        self._profile = session.get_profile(args.rc_shell or config.bundle.shell)
        self._multiplexer = session.get_multiplexer(
            args.rc_multiplexer or config.transport.multiplexer
        )
        self._filter = bundle.get_filter(args.rc_filter or self._default_filter())

    def run(self) -> int:
        """Run the launcher and clean up properly in case of errors."""
        with contextlib.ExitStack() as stack:
            return self._run(stack)

        # https://github.com/python/mypy/issues/7726
        assert False, "unreachable"

    def _run(self, stack: contextlib.ExitStack) -> int:
        """Package the rc-files and hand them to the transport."""
        payload = self._package()

        if self._args.list:
            self._print_members(payload)
            return 0

        script = session.synthesize(
            payload,
            session.is_remote_context(self._environ),
            self._profile,
            self._multiplexer,
        )
        log.debug(f"synthesized script: {summarize(script)}")

        if self._args.dry_run:
            sys.stdout.write(script)
            return 0

        return self._launch(stack, script)

    def _package(self) -> bundle.Payload:
        """Minify and encode the rc-files that travel."""
        source = bundle.RcSource.resolve(
            self._args.rc_dir or self._config.bundle.path,
            self._profile.anchor,
            self._environ,
        )
        options = bundle.ArchiveOptions(exclude=tuple(self._config.bundle.exclude))

        payload = bundle.package(
            source, self._filter, options, self._config.bundle.max_payload_size
        )
        log.debug(
            f"packaged {source.path} into {len(payload)} bytes ({payload.digest})"
        )

        return payload

    @staticmethod
    def _print_members(payload: bundle.Payload) -> None:
        for member in payload.members():
            if member.isdir():
                print(f"{member.name}/")
            else:
                print(f"{member.name} ({member.size} bytes)")

    @abstractmethod
    def _default_filter(self) -> str:
        """Get the name of the compression filter that suits the transport."""
        raise NotImplementedError()

    @abstractmethod
    def _launch(self, stack: contextlib.ExitStack, script: str) -> int:
        """Hand the script to the transport and return its exit code."""
        raise NotImplementedError()

    def _execute(self, command: List[str]) -> int:
        """Run the transport in the foreground and return its exit code unmodified."""
        log.debug(f"running {summarize(command)}")

        try:
            return subprocess.call(command)
        except OSError as e:
            raise RuntimeError(f"failed to start {self.transport}: {e}")

    @staticmethod
    def _ignore_missing_file(call: Callable[[], Any]) -> Callable[[], None]:
        """Wrap a cleanup call for a file that may already have been removed."""

        def wrapper() -> None:
            with contextlib.suppress(FileNotFoundError):
                call()

        return wrapper
