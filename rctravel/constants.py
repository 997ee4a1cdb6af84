"""Module defining various global constants."""

# rctravel version
VERSION = "1.0.0"

# Special exit code for when rctravel itself fails.
RCTRAVEL_ERROR_CODE = 254

# Hard ceiling on the length of the encoded payload.
#
# The payload is embedded in a single command-line argument, so it must stay well below
# the argument size limits of the transports and remote shells.
MAX_PAYLOAD_SIZE = 65536

# Environment variable that marks a travelled session and carries the bundle directory.
# It doubles as the override that makes a travelled session travel again.
BUNDLE_DIR_VAR = "RCTRAVEL_DIR"

# Environment variable that marks a session as being (nested inside) a remote session.
REMOTE_MARKER_VAR = "RCTRAVEL_REMOTE"

# Environment variable exported by the bootstrap with the path of the travelled rc-file.
RCFILE_VAR = "RCTRAVEL_RCFILE"

# Root-equivalent account used as default target and intermediate account for su.
ROOT_USER = "root"

# Default location of the files to travel and of the config file.
DEFAULT_BUNDLE_PATH = "~/.rctravel"
DEFAULT_CONFIG_PATH = "~/.config/rctravel/config"

# Completion functions of ssh in newer and older bash-completion releases.
SSH_COMPLETION_FUNCS = ["_comp_cmd_ssh", "_ssh"]
