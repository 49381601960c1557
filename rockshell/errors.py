"""
Error types raised by the subcommand dispatcher and its handlers.
"""

from __future__ import annotations


class RockshellError(Exception):
    """Base class for every error raised by rockshell itself."""


class RegistryError(RockshellError, ValueError):
    """A subcommand registry was built with an empty, malformed or duplicate key."""


class UnknownCommand(RockshellError):
    """The first argument token does not name a registered subcommand."""

    def __init__(self, token: str) -> None:
        self.token = token
        if token:
            super().__init__(f"Unknown command '{token}'")
        else:
            super().__init__("No subcommand given")


class HandlerFailure(RockshellError):
    """
    Raised by a subcommand handler for a failure the user should see as-is
    (bad arguments, missing rock, ...). The dispatcher never catches it.
    """
