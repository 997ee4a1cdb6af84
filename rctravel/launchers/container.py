"""Module that implements the launcher for shells inside containers."""

import contextlib
from typing import List

from rctravel.args import ContainerArguments
from .common import Launcher


class ContainerLauncher(Launcher):
    """Launcher that runs the synthesized script as the command of a container."""

    _args: ContainerArguments

    @property
    def transport(self) -> str:  # type: ignore[override]
        """Get the container runtime to invoke."""
        return self._args.rc_runtime or self._config.transport.container_runtime

    def _default_filter(self) -> str:
        # Container images are often minimal, so prefer a filter that they are likely
        # to be able to decompress.
        return self._config.transport.container_filter

    def _launch(self, stack: contextlib.ExitStack, script: str) -> int:
        return self._execute(self._compose_container_command(script))

    def _compose_container_command(self, script: str) -> List[str]:
        """Compose the full command for starting the shell inside the container."""
        container_command = [self.transport, self._args.subcommand]

        # Always attach stdin and a terminal for the interactive shell
        container_command.extend(["--interactive", "--tty"])

        # Pass on all remaining arguments, including the container or image
        container_command.extend(self._args.transport_args)

        # The script is passed as its own argument, so no quoting is needed
        container_command.extend(["/bin/sh", "-c", script])

        return container_command
