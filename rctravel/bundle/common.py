"""Errors and shared definitions of the bundle modules."""

from typing import Optional


class RcTravelError(Exception):
    """Base class of all errors that rctravel reports to the user."""


class ConfigurationMissing(RcTravelError):
    """Exception raised when the directory to travel lacks its anchor file."""

    def __init__(self, directory: str, anchor: str) -> None:
        """Instantiate the exception for the given directory and anchor file name."""
        super().__init__(f"missing anchor file {anchor} in {directory}")

        self.directory = directory
        self.anchor = anchor


class PayloadTooLarge(RcTravelError):
    """Exception raised when the encoded payload does not fit in a command line."""

    def __init__(self, directory: str, size: int, ceiling: int) -> None:
        """Instantiate the exception with the offending size and the ceiling."""
        super().__init__(
            f"payload of {directory} is too large"
            f" ({size} bytes encoded, must be below {ceiling} bytes)"
        )

        self.directory = directory
        self.size = size
        self.ceiling = ceiling


class UnsafeMinification(Exception):
    """Exception raised when a file cannot be minified without changing its meaning."""

    def __init__(self, reason: str, line: Optional[int] = None) -> None:
        """Instantiate the exception with a reason and the offending line number."""
        if line is not None:
            super().__init__(f"{reason} (line {line})")
        else:
            super().__init__(reason)

        self.reason = reason
        self.line = line
