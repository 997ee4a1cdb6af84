"""
Launchers that start a session with the rc-files over a transport.

Each launcher packages the rc-files, synthesizes the script that lands them and hands
that script to its transport: as the remote command of ssh, as the command of a
container, or as a file that is executed as another account. The exit code of the
transport is passed on unmodified.
"""

from .common import Launcher
from .container import ContainerLauncher
from .escalation import EscalationExhausted
from .ssh import SshLauncher
from .switch import SwitchLauncher

__all__ = [
    "ContainerLauncher",
    "EscalationExhausted",
    "Launcher",
    "SshLauncher",
    "SwitchLauncher",
]
