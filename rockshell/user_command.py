"""
Host registration surface for a subcommand dispatcher.

A `UserCommand` binds one top-level command name to two callbacks, the way an
editor registers a user-defined command:

• ``execute(line)``  – tokenizes the line and dispatches it.
• ``complete(lead, line)`` – returns completion candidates.

Unknown subcommands are reported through the notification channel here and
never reach the caller as exceptions.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, List, Optional

from .cli_commands import CommandOpts
from .dispatcher import Dispatcher, RANGE_PREFIX
from .errors import UnknownCommand

logger = logging.getLogger(__name__)

Notifier = Callable[[str, int], None]

_LEVEL_COLORS = {
    logging.ERROR: "91",
    logging.WARNING: "93",
    logging.INFO: "94",
    logging.DEBUG: "90",
}


def notify(message: str, level: int = logging.INFO) -> None:
    """Default notification channel: log the message and show it to the user."""
    logger.log(level, message)
    color = _LEVEL_COLORS.get(level, "0")
    prefix = "❌ " if level >= logging.ERROR else ""
    print(f"\033[{color}m{prefix}{message}\033[0m")


class UserCommand:
    """A named top-level command backed by a `Dispatcher`."""

    def __init__(self, dispatcher: Dispatcher, *, notifier: Optional[Notifier] = None) -> None:
        self.dispatcher = dispatcher
        self.name = dispatcher.command_name
        self.notify: Notifier = notifier or notify
        self._line_re = re.compile(
            rf"^{RANGE_PREFIX}{re.escape(self.name)}(?P<bang>!*)(?:\s+(?P<args>.*))?$",
            re.DOTALL,
        )

    def matches(self, line: str) -> bool:
        """True when *line* invokes this command (with or without arguments)."""
        return self._line_re.match(line) is not None

    def parse(self, line: str) -> Optional[CommandOpts]:
        m = self._line_re.match(line)
        if m is None:
            return None
        args = (m.group("args") or "").strip()
        return CommandOpts(name=self.name, args=args, fargs=args.split(), bang=bool(m.group("bang")))

    def execute(self, line: str) -> bool:
        """
        Run *line* through the dispatcher.

        Returns False when the line does not address this command or names an
        unknown subcommand (the user has been notified); True otherwise.
        Handler exceptions propagate.
        """
        opts = self.parse(line)
        if opts is None:
            logger.debug("Line not addressed to %s: %r", self.name, line)
            return False
        try:
            self.dispatcher.dispatch(opts.fargs, opts)
        except UnknownCommand as exc:
            if exc.token:
                self.notify(f"Unknown command '{exc.token}'. Use '{self.name} help'.", logging.ERROR)
            else:
                self.notify(f"Usage: {self.name} <subcommand> [args]. Use '{self.name} help'.", logging.ERROR)
            return False
        return True

    def complete(self, arg_lead: str, cmd_line: str) -> List[str]:
        return self.dispatcher.complete(arg_lead, cmd_line)
