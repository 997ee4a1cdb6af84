"""Module that implements the launcher for switching to another local account."""

import contextlib
import getpass
import grp
import os
import shutil
import subprocess
import sys
import tempfile
from typing import Callable, List, Mapping, Optional

from rctravel.args import SwitchArguments
from rctravel.config import Config
from rctravel.constants import ROOT_USER
from rctravel.logger import log
from .common import Launcher
from .escalation import escalate, EscalationExhausted, plan


def _ask(question: str) -> bool:
    """Ask the user a yes/no question on the terminal."""
    try:
        answer = input(f"{question} [y/N] ")
    except EOFError:
        return False

    return answer.strip().lower() in ["y", "yes"]


class SwitchLauncher(Launcher):
    """
    Launcher that runs the synthesized script as another account.

    sudo and su execute files rather than inline scripts, so the script is written to a
    temporary file that only lives for the duration of the session.

    When the target isn't root, the target account has to read the file with its own
    permissions. The file is then readable by everyone, but it lives in a private
    directory with a random name that can be traversed and not listed. Accounts that
    can see the command line of the session can still find and read the payload.
    """

    _args: SwitchArguments

    transport = "su"

    def __init__(
        self,
        args: SwitchArguments,
        config: Config,
        environ: Optional[Mapping[str, str]] = None,
        confirm: Callable[[str], bool] = _ask,
    ):
        """Initialize the launcher with a way to confirm ambiguous sudo permissions."""
        super().__init__(args, config, environ)

        self._confirm = confirm
        self._target = args.user or config.su.default_user

    def _default_filter(self) -> str:
        return self._config.transport.switch_filter

    def _launch(self, stack: contextlib.ExitStack, script: str) -> int:
        script_path = self._write_script(stack, script)

        strategies = plan(self._target, self._mediation_permitted(), self._execute)

        try:
            result = escalate(strategies, self._target, script_path)
        except EscalationExhausted as e:
            log.error(f"failed to switch to {self._target}: {e}")
            return e.returncode

        log.debug(f"switched to {self._target} with {result.strategy}")

        return result.returncode

    def _write_script(self, stack: contextlib.ExitStack, script: str) -> str:
        """Write the script to a temporary file that is removed along with the stack."""
        script_dir = tempfile.mkdtemp(prefix="rctravel_")
        stack.callback(self._ignore_missing_file(lambda: shutil.rmtree(script_dir)))

        fd, script_path = tempfile.mkstemp(
            prefix="rctravel_", suffix=".sh", dir=script_dir
        )

        with os.fdopen(fd, "w") as f:
            f.write(script)

        # Other accounts than root need to be able to read the script themselves, but
        # the directory can't be listed so they need to know its random name
        if self._target == ROOT_USER:
            os.chmod(script_path, 0o700)
        else:
            os.chmod(script_path, 0o755)
            os.chmod(script_dir, 0o711)

        return script_path

    def _mediation_permitted(self) -> bool:
        """
        Check if sudo should be attempted.

        Membership of an administrative group suggests that sudo is permitted. Without
        it, sudo might still be allowed by its own configuration, which can't be read
        without trying, so the user gets to decide.
        """
        if shutil.which("sudo") is None:
            log.debug("sudo is not available")
            return False

        user = getpass.getuser()

        if user in self._config.su.always_allowed or user == ROOT_USER:
            return True

        groups = self._current_groups()

        if any(group in self._config.su.trusted_groups for group in groups):
            return True

        return self._confirm(f"{user} may not be allowed to use sudo, try anyway?")

    @staticmethod
    def _current_groups() -> List[str]:
        """Get the names of the groups of the current process."""
        groups: List[str] = []

        for gid in os.getgroups():
            with contextlib.suppress(KeyError):
                groups.append(grp.getgrgid(gid).gr_name)

        return groups

    def _execute(self, command: List[str]) -> int:
        """Run a strategy in the foreground, letting a missing binary fail it."""
        log.debug(f"running {command}")

        # Make sure prompts from su and sudo appear after any pending output
        sys.stdout.flush()

        return subprocess.call(command)
