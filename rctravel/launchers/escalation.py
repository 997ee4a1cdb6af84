"""
Module with the strategies for running a script as another account.

Switching accounts can fail for many reasons that are impossible to predict up front:
sudo may be missing or not permitted, the target account may not be reachable from the
current account directly, or a password may simply be mistyped. Instead of guessing,
the strategies are attempted one after another until one of them succeeds.

The script that is executed always exits successfully once its interactive shell has
started, so a non-zero exit code means that the switch itself failed.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
import shlex
from typing import Callable, List, Sequence

from rctravel.bundle import RcTravelError
from rctravel.constants import ROOT_USER
from rctravel.logger import log

# Runs a command in the foreground and returns its exit code
Runner = Callable[[List[str]], int]

# Exit code reported when the binary of a strategy is missing
COMMAND_NOT_FOUND = 127


@dataclass(frozen=True)
class AttemptResult:
    """Outcome of attempting a single strategy."""

    strategy: str
    returncode: int

    @property
    def succeeded(self) -> bool:
        """Check if the switch worked."""
        return self.returncode == 0


class EscalationExhausted(RcTravelError):
    """Exception raised when every strategy failed to switch to the target account."""

    def __init__(self, target: str, attempts: Sequence[AttemptResult]) -> None:
        """Instantiate the exception with the outcome of every attempt."""
        super().__init__(f"all strategies to switch to {target} failed")

        self.target = target
        self.attempts = list(attempts)

    @property
    def returncode(self) -> int:
        """Get the exit code of the last attempt."""
        if self.attempts:
            return self.attempts[-1].returncode
        else:
            return 1


class Strategy(ABC):
    """A way of running a script file as another account."""

    name = "strategy"

    def __init__(self, runner: Runner):
        """Initialize the strategy with the function that runs its commands."""
        self._runner = runner

    @abstractmethod
    def command(self, target: str, script_path: str) -> List[str]:
        """Compose the command that runs the script as the target account."""
        raise NotImplementedError()

    def attempt(self, target: str, script_path: str) -> AttemptResult:
        """Attempt to run the script as the target account."""
        command = self.command(target, script_path)

        log.debug(f"attempting {self.name}: {command}")

        try:
            returncode = self._runner(command)
        except FileNotFoundError as e:
            log.debug(f"{self.name} unavailable: {e}")
            returncode = COMMAND_NOT_FOUND

        return AttemptResult(self.name, returncode)


class MediatedSwitch(Strategy):
    """Let sudo run the script as the target account."""

    name = "sudo"

    def command(self, target: str, script_path: str) -> List[str]:
        return ["sudo", "-u", target, "sh", script_path]


class MediatedSwitchViaRoot(Strategy):
    """Let sudo become root first, and then the target account from there."""

    name = "sudo via root"

    def command(self, target: str, script_path: str) -> List[str]:
        return ["sudo", "sudo", "-u", target, "sh", script_path]


class DirectSwitch(Strategy):
    """Let su run the script as the target account, with its password."""

    name = "su"

    def command(self, target: str, script_path: str) -> List[str]:
        return ["su", target, "-c", f"sh {shlex.quote(script_path)}"]


class DirectSwitchViaRoot(Strategy):
    """Let su become root first, and then the target account from there."""

    name = "su via root"

    def command(self, target: str, script_path: str) -> List[str]:
        inner_command = f"sh {shlex.quote(script_path)}"
        switch_command = f"su {shlex.quote(target)} -c {shlex.quote(inner_command)}"

        return ["su", ROOT_USER, "-c", switch_command]


def plan(target: str, mediated: bool, runner: Runner) -> List[Strategy]:
    """
    Determine the strategies to attempt, in order.

    Going through root only makes sense if the target isn't root itself.
    """
    strategies: List[Strategy] = []

    if mediated:
        strategies.append(MediatedSwitch(runner))

        if target != ROOT_USER:
            strategies.append(MediatedSwitchViaRoot(runner))

    strategies.append(DirectSwitch(runner))

    if target != ROOT_USER:
        strategies.append(DirectSwitchViaRoot(runner))

    return strategies


def escalate(
    strategies: Sequence[Strategy], target: str, script_path: str
) -> AttemptResult:
    """
    Attempt the strategies until one of them succeeds.

    Raises EscalationExhausted if none of them did.
    """
    attempts: List[AttemptResult] = []

    for strategy in strategies:
        result = strategy.attempt(target, script_path)
        attempts.append(result)

        if result.succeeded:
            return result

        log.debug(f"{strategy.name} failed with exit code {result.returncode}")

    raise EscalationExhausted(target, attempts)
