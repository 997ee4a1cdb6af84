"""
Module that activates the travelled files inside a landed shell.

Every interactive shell runs the bootstrap early in its configuration, travelled or
not. The decision is made from an explicit context rather than by peeking at the
environment halfway through, so that the detection can be evaluated for any bundle
directory. The resulting rebindings are rendered as shell code to be evaluated by the
shell itself, e.g. `eval "$(rctravel-init)"`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
import shlex
import shutil
from typing import Dict, List, Mapping, Optional

import rctravel.constants as constants
from .synthesizer import load_template, Multiplexer, ShellProfile

# Files inside the bundle directory that the bootstrap knows how to activate
INPUT_CONFIG = ".inputrc"
EDITOR_CONFIG = ".vimrc"
EDITOR = "vim"
EXECUTABLES_DIR = "bin"


@dataclass(frozen=True)
class BootstrapContext:
    """Whether the current shell is travelled, and where its files were unpacked."""

    is_travelled: bool
    bundle_dir: Optional[str] = None

    @staticmethod
    def from_environ(environ: Mapping[str, str]) -> BootstrapContext:
        """Derive the context from the marker variable in an environment."""
        bundle_dir = environ.get(constants.BUNDLE_DIR_VAR)

        if bundle_dir:
            return BootstrapContext(True, bundle_dir)
        else:
            return BootstrapContext(False)


class Probe:
    """Inspects the host that the shell runs on."""

    def is_file(self, path: str) -> bool:
        """Check if a regular file exists at the path."""
        return os.path.isfile(path)

    def is_dir(self, path: str) -> bool:
        """Check if a directory exists at the path."""
        return os.path.isdir(path)

    def has_binary(self, name: str) -> bool:
        """Check if an executable can be found in the search path."""
        return shutil.which(name) is not None


@dataclass
class Rebindings:
    """Environment variables, shell functions and search paths to apply."""

    exports: Dict[str, str] = field(default_factory=dict)
    functions: Dict[str, str] = field(default_factory=dict)
    path_prefixes: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        """Check if there is anything to rebind."""
        return bool(self.exports or self.functions or self.path_prefixes)

    def to_shell(self) -> str:
        """Render the rebindings as shell code."""
        lines: List[str] = []

        for name, value in self.exports.items():
            lines.append(f"export {name}={shlex.quote(value)}")

        for name, body in self.functions.items():
            lines.append(f"{name}() {{ {body}; }}")

        if self.path_prefixes:
            prefix = ":".join(shlex.quote(p) for p in self.path_prefixes)
            lines.append(f'export PATH={prefix}:"$PATH"')

        return "".join(line + "\n" for line in lines)


def _multiplexer_body(
    multiplexer: Multiplexer, config: str, nested_shell: Optional[str]
) -> str:
    invocation = (
        f"command {multiplexer.name} {multiplexer.config_flag} {shlex.quote(config)}"
    )

    if multiplexer.name != "tmux" or nested_shell is None:
        return f'{invocation} "$@"'

    # New windows open a travelled shell rather than the account's own shell
    return (
        '[ "$#" -eq 0 ] && set -- new-session; '
        f"{invocation} start-server \\; "
        f"set-option -g default-command {shlex.quote(nested_shell)} \\; "
        '"$@"'
    )


def detect(
    context: BootstrapContext,
    profile: ShellProfile,
    multiplexer: Multiplexer,
    probe: Optional[Probe] = None,
) -> Rebindings:
    """
    Determine the rebindings for a shell with the given context.

    Outside of a travelled session nothing is rebound. Inside one, each travelled file
    is only activated if it exists (and the program it configures is installed).
    """
    if probe is None:
        probe = Probe()

    rebindings = Rebindings()

    if not context.is_travelled or not context.bundle_dir:
        return rebindings

    bundle_dir = context.bundle_dir

    anchor = os.path.join(bundle_dir, profile.anchor)
    nested_shell: Optional[str] = None

    if probe.is_file(anchor):
        rebindings.exports[constants.RCFILE_VAR] = anchor
        nested_shell = profile.launch(bundle_dir)

    input_config = os.path.join(bundle_dir, INPUT_CONFIG)

    if probe.is_file(input_config):
        rebindings.exports["INPUTRC"] = input_config

    multiplexer_config = os.path.join(bundle_dir, multiplexer.config_file)

    if probe.is_file(multiplexer_config) and probe.has_binary(multiplexer.name):
        rebindings.functions[multiplexer.name] = _multiplexer_body(
            multiplexer, multiplexer_config, nested_shell
        )

    editor_config = os.path.join(bundle_dir, EDITOR_CONFIG)

    if probe.is_file(editor_config) and probe.has_binary(EDITOR):
        editor = f"{EDITOR} -u {shlex.quote(editor_config)}"

        rebindings.exports["EDITOR"] = editor
        rebindings.exports["VISUAL"] = editor
        rebindings.functions[EDITOR] = f'command {editor} "$@"'

    executables_dir = os.path.join(bundle_dir, EXECUTABLES_DIR)

    if probe.is_dir(executables_dir):
        rebindings.path_prefixes.append(executables_dir)

    return rebindings


def portable_script(profile: ShellProfile, multiplexer: Multiplexer) -> str:
    """
    Generate a shell rendition of detect() for hosts where rctravel isn't installed.

    It is meant to be pasted into the travelled rc-file itself and performs the same
    checks at shell startup.
    """
    dir_var = constants.BUNDLE_DIR_VAR

    ctx = {
        "dir_var": dir_var,
        "rcfile_var": constants.RCFILE_VAR,
        "anchor": profile.anchor,
        "nested_shell": profile.launch(f"${dir_var}").replace('"', '\\"'),
        "input_config": INPUT_CONFIG,
        "multiplexer": multiplexer,
        "editor": EDITOR,
        "editor_config": EDITOR_CONFIG,
        "executables_dir": EXECUTABLES_DIR,
    }

    return load_template("bootstrap.sh.j2").render(ctx)
