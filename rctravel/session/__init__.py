"""
Modules that describe what happens on the far side of a transport.

The synthesizer generates the script that lands the payload: it unpacks the rc-files
into a private directory, starts an interactive shell on them and removes the directory
again once the shell exits, unless a multiplexer session is still attached to it. The
bootstrap runs inside that shell and points programs at the travelled files.
"""

from .bootstrap import BootstrapContext, detect, portable_script, Probe, Rebindings
from .synthesizer import (
    completion_script,
    get_multiplexer,
    get_profile,
    is_remote_context,
    Multiplexer,
    MULTIPLEXERS,
    PROFILES,
    ShellProfile,
    synthesize,
    wrap_for_remote_shell,
)

__all__ = [
    "BootstrapContext",
    "completion_script",
    "detect",
    "get_multiplexer",
    "get_profile",
    "is_remote_context",
    "Multiplexer",
    "MULTIPLEXERS",
    "portable_script",
    "Probe",
    "PROFILES",
    "Rebindings",
    "ShellProfile",
    "synthesize",
    "wrap_for_remote_shell",
]
