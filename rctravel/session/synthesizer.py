"""
Module that turns a payload into a self-contained script for the remote side.

The script is transport agnostic: it only relies on a POSIX shell, base64, tar and the
decompression tool of the payload's filter. Transports embed it either as the body of
`sh -c` or as a file that is executed as another account.
"""

from __future__ import annotations

from dataclasses import dataclass
import importlib.resources
import shlex
from typing import Dict, Mapping, Sequence

from jinja2 import Environment, Template

import rctravel.constants as constants
from rctravel.bundle import Payload


@dataclass(frozen=True)
class ShellProfile:
    """An interactive shell along with the anchor file it reads at startup."""

    name: str
    anchor: str

    # Command that starts an interactive shell for a bundle directory expression
    launch_template: str

    def launch(self, bundle_dir: str) -> str:
        """Get the command that starts the shell with the anchor file in bundle_dir."""
        return self.launch_template.format(dir=bundle_dir, anchor=self.anchor)


PROFILES: Dict[str, ShellProfile] = {
    p.name: p
    for p in [
        ShellProfile("bash", ".bashrc", 'bash --rcfile "{dir}/{anchor}" -i'),
        ShellProfile("zsh", ".zshrc", 'ZDOTDIR="{dir}" zsh -i'),
    ]
}


def get_profile(name: str) -> ShellProfile:
    """Look up a shell profile by name."""
    try:
        return PROFILES[name]
    except KeyError:
        raise ValueError(
            f"unsupported shell {name} (expected one of {', '.join(PROFILES)})"
        )


@dataclass(frozen=True)
class Multiplexer:
    """
    A terminal multiplexer whose sessions may outlive the interactive shell.

    The attached check is a shell command that succeeds if a session is attached.
    """

    name: str
    config_file: str
    config_flag: str
    attached_check: str


MULTIPLEXERS: Dict[str, Multiplexer] = {
    m.name: m
    for m in [
        Multiplexer(
            "tmux",
            ".tmux.conf",
            "-f",
            "tmux list-sessions 2>/dev/null | grep -q '(attached)'",
        ),
        Multiplexer(
            "screen",
            ".screenrc",
            "-c",
            "screen -ls 2>/dev/null | grep -q '(Attached)'",
        ),
    ]
}


def get_multiplexer(name: str) -> Multiplexer:
    """Look up a multiplexer by name."""
    try:
        return MULTIPLEXERS[name]
    except KeyError:
        expected = ", ".join(MULTIPLEXERS)
        raise ValueError(f"unsupported multiplexer {name} (expected {expected})")


def load_template(name: str) -> Template:
    """Load a Jinja2 template with delimiters that don't clash with shell syntax."""
    tpl_text = (
        importlib.resources.files("rctravel.templates")
        .joinpath(name)
        .read_text(encoding="utf-8")
    )
    env = Environment(
        variable_start_string="${{",
        variable_end_string="}}",
        block_start_string="<%",
        block_end_string="%>",
        comment_start_string="<#",
        comment_end_string="#>",
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    return env.from_string(tpl_text)


def is_remote_context(environ: Mapping[str, str]) -> bool:
    """Check if the environment belongs to a (possibly nested) remote session."""
    return any(
        environ.get(var)
        for var in ["SSH_CONNECTION", "SSH_TTY", constants.REMOTE_MARKER_VAR]
    )


def synthesize(
    payload: Payload,
    nested: bool,
    profile: ShellProfile = PROFILES["bash"],
    multiplexer: Multiplexer = MULTIPLEXERS["tmux"],
) -> str:
    """
    Generate the script that unpacks the payload and runs a shell on the remote side.

    The bundle directory is derived from the landed account and the process of the
    landing shell, so concurrent sessions never share one, while nested sessions find
    it through the marker variable. An existing symbolic link or a directory owned by
    another account at that path is refused.

    The script always exits successfully once the interactive shell has started, which
    lets callers tell a failing transport apart from a shell that exited with an error.
    """
    dir_var = constants.BUNDLE_DIR_VAR
    flags = payload.options.extract_flags
    extract_flags = "".join(" " + shlex.quote(f) for f in flags)

    ctx = {
        "dir_var": dir_var,
        "remote_var": constants.REMOTE_MARKER_VAR,
        "nested": nested,
        "payload": payload.encoded,
        "filter": payload.filter.name,
        "decompress": payload.filter.remote_command,
        "extract_flags": extract_flags,
        "launch": profile.launch(f"${dir_var}"),
        "attached_check": multiplexer.attached_check,
    }

    return load_template("session.sh.j2").render(ctx)


def wrap_for_remote_shell(script: str) -> str:
    """Quote the script as a single remote command that doesn't depend on PATH."""
    return "/bin/sh -c " + shlex.quote(script)


def completion_script(
    prog: str, transport: str, transport_funcs: Sequence[str]
) -> str:
    """
    Generate bash completion for a launcher that defers to its transport's.

    The completion function of the transport is named differently across
    bash-completion releases, so the first of transport_funcs that exists is used.
    """
    ctx = {
        "prog": prog,
        "func": prog.replace("-", "_"),
        "transport": transport,
        "transport_funcs": list(transport_funcs),
    }

    return load_template("completion.bash.j2").render(ctx)
