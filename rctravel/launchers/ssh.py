"""Module that implements the launcher for remote shells over ssh."""

import contextlib
from typing import List

import rctravel.session as session
from .common import Launcher


class SshLauncher(Launcher):
    """Launcher that runs the synthesized script as the remote command of ssh."""

    transport = "ssh"

    def _default_filter(self) -> str:
        return self._config.transport.ssh_filter

    def _launch(self, stack: contextlib.ExitStack, script: str) -> int:
        return self._execute(self._compose_ssh_command(script))

    def _compose_ssh_command(self, script: str) -> List[str]:
        """Compose the full command for starting the ssh session."""
        ssh_command = ["ssh"]

        # The remote command is an interactive shell, so a terminal is needed even
        # though a command is specified
        ssh_command.append("-t")

        # Pass on all ssh arguments, including the destination
        ssh_command.extend(self._args.transport_args)

        # ssh hands the remote command to the login shell of the remote account,
        # which may not be a POSIX shell
        ssh_command.append(session.wrap_for_remote_shell(script))

        return ssh_command
