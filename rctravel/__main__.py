"""
Module implementing the command-line interfaces and invoking the launchers.

rctravel is started on the local machine with the arguments of the transport it wraps.
It packages the local rc-files, turns them into a script that unpacks them on the other
side, and starts the transport with that script as its command. Inside the session,
`rctravel-init` points programs at the unpacked files.
"""

import os
import signal
import sys
from typing import List, NoReturn, Optional, Type

from rctravel.args import (
    Arguments,
    ContainerArguments,
    InitArguments,
    SshArguments,
    SwitchArguments,
)
from rctravel.bundle import RcTravelError
from rctravel.config import Config
import rctravel.constants as constants
import rctravel.launchers as launchers
import rctravel.logger as logger
from rctravel.logger import log
import rctravel.session as session


def _run_launcher(launcher_cls: Type[launchers.Launcher], args: Arguments) -> NoReturn:
    """Run a launcher and exit with the exit code of its transport."""
    logger.configure(args.debug)

    config = Config.load(args.rc_config)

    try:
        launcher = launcher_cls(args, config)
        exit_code = launcher.run()
    except KeyboardInterrupt:
        exit_code = 128 + signal.SIGINT
    except RcTravelError as e:
        log.error(str(e))
        exit_code = constants.RCTRAVEL_ERROR_CODE
    except Exception as e:
        log.error(f"failed to run session: {e}")
        exit_code = constants.RCTRAVEL_ERROR_CODE

    # Exit with either the exit code of the transport, or RCTRAVEL_ERROR_CODE for
    # failures of rctravel itself.
    sys.exit(exit_code)


def ssh_main(arguments: Optional[List[str]] = None) -> NoReturn:
    """Start an ssh session with the rc-files."""
    args = SshArguments.parse(arguments)

    if args.completion:
        script = session.completion_script(
            "rcssh", "ssh", constants.SSH_COMPLETION_FUNCS
        )
        sys.stdout.write(script)
        sys.exit(0)

    _run_launcher(launchers.SshLauncher, args)


def container_main(arguments: Optional[List[str]] = None) -> NoReturn:
    """Start a shell in a container with the rc-files."""
    _run_launcher(launchers.ContainerLauncher, ContainerArguments.parse(arguments))


def switch_main(arguments: Optional[List[str]] = None) -> NoReturn:
    """Switch to another account with the rc-files."""
    _run_launcher(launchers.SwitchLauncher, SwitchArguments.parse(arguments))


def init_main(arguments: Optional[List[str]] = None) -> NoReturn:
    """Print the shell code that activates the travelled rc-files."""
    args = InitArguments.parse(arguments)

    config = Config.load(args.rc_config)

    try:
        profile = session.get_profile(args.rc_shell or config.bundle.shell)
        multiplexer = session.get_multiplexer(
            args.rc_multiplexer or config.transport.multiplexer
        )
    except ValueError as e:
        log.error(str(e))
        sys.exit(constants.RCTRAVEL_ERROR_CODE)

    if args.portable:
        sys.stdout.write(session.portable_script(profile, multiplexer))
    else:
        context = session.BootstrapContext.from_environ(os.environ)
        rebindings = session.detect(context, profile, multiplexer)
        sys.stdout.write(rebindings.to_shell())

    sys.exit(0)


if __name__ == "__main__":
    ssh_main()
